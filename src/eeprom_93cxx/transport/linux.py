"""Linux spidev transport.

The 93Cxx family wants SPI mode 0 with an active-high chip select.
Phases of one transaction are concatenated into a single xfer2() call
so chip select stays asserted between the command header and data.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..errors import TransportError
from .base import Phase

logger = logging.getLogger(__name__)

DEFAULT_DEVICE = "/dev/spidev1.0"

_DEVICE_RE = re.compile(r"^(?:/dev/)?spidev(\d+)\.(\d+)$")


def parse_device(device: str) -> tuple[int, int]:
    """Split '/dev/spidevB.C' into (bus, chip select).

    Raises:
        TransportError: If the name is not a spidev node.
    """
    match = _DEVICE_RE.match(device)
    if match is None:
        raise TransportError(
            f"invalid SPI device '{device}', expected /dev/spidevBUS.CS"
        )
    return int(match.group(1)), int(match.group(2))


class SpidevTransport:
    """Transport over a Linux spidev node."""

    def __init__(self, spi: Any, device: str) -> None:
        self._spi = spi
        self.device = device

    @classmethod
    def open(cls, device: str = DEFAULT_DEVICE) -> SpidevTransport:
        """Open and configure the SPI master.

        Raises:
            TransportError: If the node cannot be opened or configured.
        """
        bus, cs = parse_device(device)
        try:
            import spidev  # Local import so the rest of the package works off Linux
        except ImportError as e:
            raise TransportError(f"spidev is not available: {e}") from e

        spi = spidev.SpiDev()
        try:
            spi.open(bus, cs)
        except OSError as e:
            raise TransportError(f"Could not open SPI device {device}: {e}") from e
        try:
            spi.mode = 0
            spi.cshigh = True
            spi.bits_per_word = 8
        except OSError as e:
            spi.close()
            raise TransportError(f"Could not set SPI mode on {device}: {e}") from e
        logger.debug("opened %s (bus %d, cs %d)", device, bus, cs)
        return cls(spi, device)

    def exchange(self, phases: Sequence[Phase]) -> list[bytes]:
        if not phases:
            return []
        speeds = {p.speed_hz for p in phases}
        if len(speeds) != 1:
            raise TransportError(f"Mixed phase speeds not supported: {sorted(speeds)}")
        tx: list[int] = []
        for phase in phases:
            tx.extend(phase.tx if phase.tx is not None else bytes(phase.rx_len))

        try:
            rx = self._spi.xfer2(tx, speeds.pop(), 0, 8)
        except OSError as e:
            raise TransportError(f"Could not execute SPI transaction: {e}") from e

        results: list[bytes] = []
        offset = 0
        for phase in phases:
            chunk = bytes(rx[offset:offset + phase.length])
            offset += phase.length
            results.append(chunk if phase.rx_len else b"")
        return results

    def close(self) -> None:
        self._spi.close()
