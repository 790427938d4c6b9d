"""Whole-array operations built from Session primitives."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import FileSizeMismatchError
from .session import Session

logger = logging.getLogger(__name__)

# Called with (bytes done, bytes total)
ProgressFn = Callable[[int, int], None]


def read_all(
    session: Session, burst: bool = False, progress: ProgressFn | None = None,
) -> bytearray:
    """Read the whole array.

    Args:
        session: Open session.
        burst: Read everything with one command, relying on address
            auto-increment. Not every part supports this.
        progress: Optional progress callback.

    Returns:
        The array contents, `size_bytes` long.
    """
    geometry = session.geometry
    size = geometry.size_bytes
    buf = bytearray(size)

    if burst:
        buf[:] = session.read_words(0, size)
        if progress is not None:
            progress(size, size)
        return buf

    step = geometry.word_size
    for offset in range(0, size, step):
        buf[offset:offset + step] = session.read_words(offset // step, step)
        if progress is not None:
            progress(offset + step, size)
    logger.debug("read %d words", geometry.num_words)
    return buf


def write_all(
    session: Session,
    data: bytes,
    progress: ProgressFn | None = None,
    lock: bool = False,
) -> int:
    """Program the whole array, one word at a time.

    The part erases each word before writing it, so no prior erase is
    needed. Each write is followed by a bounded completion poll.

    Args:
        session: Open session.
        data: Image exactly `size_bytes` long.
        progress: Optional progress callback.
        lock: Send write-disable once programming is done.

    Returns:
        Number of bytes written.

    Raises:
        FileSizeMismatchError: Before any bus activity, if the image
            size differs from the part size.
        BusyTimeoutError: If a write never completes.
    """
    geometry = session.geometry
    size = geometry.size_bytes
    if len(data) != size:
        raise FileSizeMismatchError(len(data), size)

    session.enable_write()
    step = geometry.word_size
    for offset in range(0, size, step):
        session.write_words(offset // step, data[offset:offset + step])
        session.wait_ready()
        if progress is not None:
            progress(offset + step, size)

    if lock:
        session.disable_write()
    logger.debug("programmed %d words", geometry.num_words)
    return size


def erase_all(session: Session, wait: bool = True, lock: bool = False) -> None:
    """Erase the whole array to 0xFF.

    Args:
        session: Open session.
        wait: Poll for completion of the erase cycle.
        lock: Send write-disable afterwards.
    """
    session.enable_write()
    session.erase_chip()
    if wait:
        session.wait_ready()
    if lock:
        session.disable_write()
