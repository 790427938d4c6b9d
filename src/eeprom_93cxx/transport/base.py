"""Transport protocol: synchronous, byte-oriented full-duplex exchanges."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Phase:
    """One duplex phase of a transaction.

    A phase either transmits `tx` or clocks in `rx_len` bytes (the bus
    shifts out zeroes while receiving). Both may be given, in which case
    `rx_len` must equal `len(tx)`.
    """

    tx: bytes | None = None
    rx_len: int = 0
    speed_hz: int = 100_000
    bits_per_word: int = 8

    def __post_init__(self) -> None:
        if self.tx is not None and self.rx_len and self.rx_len != len(self.tx):
            raise ValueError(
                f"Phase rx_len {self.rx_len} does not match tx length {len(self.tx)}"
            )

    @property
    def length(self) -> int:
        """Number of bytes clocked in this phase."""
        return len(self.tx) if self.tx is not None else self.rx_len


@runtime_checkable
class Transport(Protocol):
    """Protocol for the bus a Session drives.

    Chip select stays asserted across all phases of one exchange() call
    when the bus supports it; otherwise phases run back to back.
    """

    def exchange(self, phases: Sequence[Phase]) -> list[bytes]:
        """Run the phases as one transaction.

        Returns:
            Bytes received in each phase, in order. Phases that only
            transmit return b"".
        """
        ...

    def close(self) -> None:
        """Release the bus."""
        ...
