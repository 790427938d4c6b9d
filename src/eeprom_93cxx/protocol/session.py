"""Bus session: one transport, one geometry, and the transaction primitives.

Every primitive is a single transport exchange. A read or write sends
the command header and the data phase in the same exchange so chip
select is held across both.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import TracebackType

from ..errors import BusyTimeoutError, TransportError
from ..geometry.resolve import ResolvedGeometry
from ..transport.base import Phase, Transport
from .command import (
    OP_CONTROL,
    OP_READ,
    OP_WRITE,
    READ_DUMMY_BITS,
    SUB_ERASE_ALL,
    SUB_WRITE_DISABLE,
    SUB_WRITE_ENABLE,
    encode_command,
)

logger = logging.getLogger(__name__)

DEFAULT_SPEED_HZ = 100_000

# Status byte the part drives once a self-timed cycle has finished
STATUS_READY = 0xFF


@dataclass(frozen=True)
class PollPolicy:
    """Bounds on the write-completion poll.

    Attributes:
        timeout: Seconds before giving up (datasheets give ~10 ms per
            write or erase cycle).
        interval: Seconds to sleep between polls.
        max_polls: Optional cap on the number of polls.
    """

    timeout: float = 0.5
    interval: float = 0.0005
    max_polls: int | None = None


class Session:
    """Exclusive owner of a transport for the life of one invocation.

    Use as a context manager to close the transport on exit.
    """

    def __init__(
        self,
        transport: Transport,
        geometry: ResolvedGeometry,
        speed_hz: int = DEFAULT_SPEED_HZ,
        poll: PollPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.transport = transport
        self.geometry = geometry
        self.speed_hz = speed_hz
        self.poll = poll if poll is not None else PollPolicy()
        self._sleep = sleep
        self._clock = clock

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    def _exchange(self, phases: Sequence[Phase], what: str) -> list[bytes]:
        try:
            return self.transport.exchange(phases)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(
                f"Could not execute SPI transaction ({what}): {e}"
            ) from e

    def _phase(self, tx: bytes | None = None, rx_len: int = 0) -> Phase:
        return Phase(tx=tx, rx_len=rx_len, speed_hz=self.speed_hz)

    def read_status(self) -> int:
        """Clock in one byte with no command; 0xFF means the part is ready."""
        (status,) = self._exchange([self._phase(rx_len=1)], "read status")
        return status[0]

    def read_words(self, addr: int, count_bytes: int) -> bytes:
        """Read `count_bytes` starting at word address `addr`.

        Reads past one word rely on the part's address auto-increment.
        """
        header = encode_command(
            self.geometry, OP_READ, addr << READ_DUMMY_BITS, READ_DUMMY_BITS,
        )
        _, data = self._exchange(
            [self._phase(tx=header.tx), self._phase(rx_len=count_bytes)],
            "eeprom read",
        )
        logger.debug("read %d bytes at word 0x%03X", count_bytes, addr)
        return data

    def write_words(self, addr: int, data: bytes) -> None:
        """Write one word at word address `addr`.

        Raises:
            ValueError: If `data` is not exactly one word long.
        """
        if len(data) != self.geometry.word_size:
            raise ValueError(
                f"Write data must be {self.geometry.word_size} byte(s), got {len(data)}"
            )
        header = encode_command(self.geometry, OP_WRITE, addr)
        self._exchange(
            [self._phase(tx=header.tx), self._phase(tx=bytes(data))],
            "eeprom write",
        )
        logger.debug("wrote word 0x%03X: %s", addr, bytes(data).hex())

    def control(self, subop: int) -> None:
        """Send a header-only control command (EWEN, EWDS, ERAL)."""
        # Sub-op occupies the top two bits of the address field
        field = subop << (self.geometry.addr_bits - 2)
        header = encode_command(self.geometry, OP_CONTROL, field)
        self._exchange([self._phase(tx=header.tx)], f"control {subop:#04b}")
        logger.debug("control sub-op %#04b", subop)

    def enable_write(self) -> None:
        self.control(SUB_WRITE_ENABLE)

    def disable_write(self) -> None:
        self.control(SUB_WRITE_DISABLE)

    def erase_chip(self) -> None:
        self.control(SUB_ERASE_ALL)

    def wait_ready(self) -> int:
        """Poll status until the part reports ready.

        Sleeps `poll.interval` between polls.

        Returns:
            Number of polls issued.

        Raises:
            BusyTimeoutError: If the timeout or poll cap is exceeded.
        """
        start = self._clock()
        polls = 0
        while True:
            polls += 1
            if self.read_status() == STATUS_READY:
                return polls
            elapsed = self._clock() - start
            if elapsed >= self.poll.timeout or (
                self.poll.max_polls is not None and polls >= self.poll.max_polls
            ):
                raise BusyTimeoutError(polls, elapsed)
            self._sleep(self.poll.interval)
