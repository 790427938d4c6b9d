"""Simulated 93Cxx EEPROM behind the Transport protocol.

Decodes command frames the way the part does: skip leading zeroes,
wait for the start bit, read the opcode and address field. Models the
write-enable latch, the self-timed write/erase busy period (as a number
of status polls that return 0x00), and address auto-increment during
long reads. Every transaction is appended to `log`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..geometry.resolve import GeometrySelection, ResolvedGeometry, resolve
from ..protocol.command import (
    HEADER_BYTES,
    OP_CONTROL,
    OP_READ,
    OP_WRITE,
    READ_DUMMY_BITS,
    SUB_ERASE_ALL,
    SUB_WRITE_DISABLE,
    SUB_WRITE_ENABLE,
    decode_command,
)
from .base import Phase

ERASED = 0xFF
READY = 0xFF
BUSY = 0x00


@dataclass(frozen=True)
class Transaction:
    """One exchange as seen by the simulated part."""

    kind: str  # "status", "read", "write", "ewen", "ewds", "eral"
    address: int = 0
    data: bytes = b""
    accepted: bool = True


class SimulatedEeprom:
    """In-memory 93Cxx part.

    Args:
        geometry: Geometry the part is strapped for.
        contents: Initial array contents; defaults to erased (0xFF).
        busy_polls: Status polls answered busy after each write/erase.
        fail_at: Zero-based exchange index that raises OSError, to
            simulate a bus fault.
    """

    def __init__(
        self,
        geometry: ResolvedGeometry,
        contents: bytes | None = None,
        busy_polls: int = 0,
        fail_at: int | None = None,
    ) -> None:
        if contents is not None and len(contents) != geometry.size_bytes:
            raise ValueError(
                f"contents are {len(contents)} bytes, part holds {geometry.size_bytes}"
            )
        self.geometry = geometry
        self.data = bytearray(contents) if contents is not None else bytearray(
            [ERASED] * geometry.size_bytes
        )
        self.busy_polls = busy_polls
        self.fail_at = fail_at
        self.write_enabled = False
        self.closed = False
        self.log: list[Transaction] = []
        self._busy_left = 0
        self._exchanges = 0

    @classmethod
    def for_part(cls, name: str, x16: bool = False, **kwargs) -> SimulatedEeprom:
        """Build a simulated part from a profile name."""
        return cls(resolve(GeometrySelection(profile=name, x16=x16)), **kwargs)

    def kinds(self) -> list[str]:
        """Transaction kinds in order, for sequencing assertions."""
        return [t.kind for t in self.log]

    def exchange(self, phases: Sequence[Phase]) -> list[bytes]:
        index = self._exchanges
        self._exchanges += 1
        if self.fail_at is not None and index == self.fail_at:
            raise OSError(f"simulated bus fault on exchange {index}")
        if self.closed:
            raise OSError("transport is closed")
        if not phases:
            return []

        first = phases[0]
        if first.tx is None:
            return [self._status(p.rx_len) for p in phases]

        if len(first.tx) != HEADER_BYTES:
            raise ValueError(f"Command frame must be {HEADER_BYTES} bytes")
        value = int.from_bytes(first.tx, "big")
        opcode = (
            (value >> (value.bit_length() - 3)) & 0b11
            if value.bit_length() >= 3 else None
        )
        addr_bits = self.geometry.addr_bits
        if opcode == OP_READ:
            _, field = decode_command(first.tx, addr_bits + READ_DUMMY_BITS)
            return [b""] + self._read(field >> READ_DUMMY_BITS, phases[1:])
        if opcode == OP_WRITE:
            _, field = decode_command(first.tx, addr_bits)
            self._write(field, phases[1:])
            return [b""] * len(phases)
        if opcode == OP_CONTROL:
            _, field = decode_command(first.tx, addr_bits)
            self._control(field >> (addr_bits - 2))
            return [b""] * len(phases)
        raise ValueError("No start bit in command frame")

    def close(self) -> None:
        self.closed = True

    def _status(self, length: int) -> bytes:
        if self._busy_left > 0:
            self._busy_left -= 1
            status = BUSY
        else:
            status = READY
        self.log.append(Transaction("status", data=bytes([status])))
        return bytes([status] * length)

    def _read(self, word_addr: int, phases: Sequence[Phase]) -> list[bytes]:
        size = self.geometry.size_bytes
        pos = (word_addr * self.geometry.word_size) % size
        out: list[bytes] = []
        for phase in phases:
            chunk = bytes(self.data[(pos + i) % size] for i in range(phase.length))
            pos = (pos + phase.length) % size
            out.append(chunk if phase.rx_len else b"")
        self.log.append(Transaction("read", address=word_addr, data=b"".join(out)))
        return out

    def _write(self, word_addr: int, phases: Sequence[Phase]) -> None:
        payload = b"".join(p.tx or b"" for p in phases)
        word = self.geometry.word_size
        accepted = self.write_enabled and len(payload) == word
        if accepted:
            offset = word_addr * word
            self.data[offset:offset + word] = payload
            self._busy_left = self.busy_polls
        self.log.append(
            Transaction("write", address=word_addr, data=payload, accepted=accepted)
        )

    def _control(self, subop: int) -> None:
        if subop == SUB_WRITE_ENABLE:
            self.write_enabled = True
            self.log.append(Transaction("ewen"))
        elif subop == SUB_WRITE_DISABLE:
            self.write_enabled = False
            self.log.append(Transaction("ewds"))
        elif subop == SUB_ERASE_ALL:
            if self.write_enabled:
                self.data[:] = bytes([ERASED]) * len(self.data)
                self._busy_left = self.busy_polls
            self.log.append(Transaction("eral", accepted=self.write_enabled))
        else:
            # WRAL (0b01) is not modelled
            raise ValueError(f"Unsupported control sub-op {subop:#04b}")
