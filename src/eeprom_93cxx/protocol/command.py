"""Microwire command header encoder/decoder.

A 93Cxx command is a start bit, a 2-bit opcode and an address field
whose width depends on the part geometry, so it is rarely a whole
number of bytes. The device ignores MOSI until it sees the start bit
while selected, so the command is right-aligned in a 16-bit frame and
padded with leading zeroes. That keeps every transfer at 8 bits per
word, which all SPI controllers handle.

Frame layout (MSB first, total_bits = addr_bits + dummy_bits):

    0 ... 0 | 1 | op1 op0 | field[total_bits-1:0]
    padding  start  opcode   address / sub-op
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..geometry.resolve import ResolvedGeometry

# Opcodes
OP_CONTROL = 0b00
OP_WRITE = 0b01
OP_READ = 0b10

# Control sub-ops, carried in the top two address bits
SUB_WRITE_DISABLE = 0b00
SUB_ERASE_ALL = 0b10
SUB_WRITE_ENABLE = 0b11

START_BIT = 0b100

HEADER_BYTES = 2
HEADER_BITS = HEADER_BYTES * 8

# Extra clock between a read command's address and its data
READ_DUMMY_BITS = 1


@dataclass(frozen=True)
class CommandHeader:
    """A byte-aligned command frame ready for the bus."""

    tx: bytes
    bits_per_word: int = 8

    @property
    def length(self) -> int:
        return len(self.tx)


def field_mask(total_bits: int) -> int:
    """Mask covering the low `total_bits` bits."""
    return (1 << total_bits) - 1


def encode_command(
    geometry: ResolvedGeometry, opcode: int, field: int, dummy_bits: int = 0,
) -> CommandHeader:
    """Pack start bit, opcode and field into a 2-byte frame.

    Args:
        geometry: Supplies the address width.
        opcode: One of OP_READ, OP_WRITE, OP_CONTROL.
        field: Address or sub-op value; bits above the field width are
            discarded.
        dummy_bits: Extra field bits after the address (1 for reads).

    Returns:
        The encoded header.

    Raises:
        ValueError: If the opcode or field is invalid, or the command
            does not fit in 16 bits.
    """
    if not 0 <= opcode <= 0b11:
        raise ValueError(f"Opcode {opcode:#x} does not fit in 2 bits")
    if field < 0:
        raise ValueError(f"Negative command field: {field}")
    if dummy_bits < 0:
        raise ValueError(f"Negative dummy bit count: {dummy_bits}")

    total_bits = geometry.addr_bits + dummy_bits
    # start bit + opcode take 3 bits above the field
    if total_bits + 3 > HEADER_BITS:
        raise ValueError(
            f"Command with {total_bits} field bits does not fit in "
            f"{HEADER_BITS} bits"
        )

    command = ((START_BIT | opcode) << total_bits) | (field & field_mask(total_bits))
    return CommandHeader(tx=command.to_bytes(HEADER_BYTES, "big"))


def decode_command(frame: bytes, total_bits: int) -> tuple[int, int]:
    """Recover (opcode, field) from an encoded frame.

    Leading zero padding is skipped by locating the start bit, which
    must sit exactly above the opcode for the given field width.

    Raises:
        ValueError: If the frame has no start bit or it is misplaced.
    """
    value = int.from_bytes(frame, "big")
    if value == 0:
        raise ValueError("No start bit in command frame")
    start_pos = value.bit_length() - 1
    if start_pos != total_bits + 2:
        raise ValueError(
            f"Start bit at position {start_pos}, expected {total_bits + 2}"
        )
    opcode = (value >> total_bits) & 0b11
    return opcode, value & field_mask(total_bits)
