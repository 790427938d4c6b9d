"""Hex dump formatting for EEPROM images."""

from __future__ import annotations

BYTES_PER_ROW = 16


def format_hex_dump(data: bytes, word_size: int = 1, width: int = 3) -> str:
    """Format an image as a hex dump with offsets, hex values, and ASCII.

    Each row displays 16 bytes:
        OFF: HH HH HH HH HH HH HH HH  HH HH HH HH HH HH HH HH  |ASCII...........|

    In x16 mode (word_size=2) bytes are grouped into 4-digit words.

    Args:
        data: The image bytes.
        word_size: 1 for x8 parts, 2 for x16 parts.
        width: Number of hex digits in the offset column.

    Returns:
        A multi-line string.
    """
    lines: list[str] = []
    half = BYTES_PER_ROW // 2

    for row_off in range(0, len(data), BYTES_PER_ROW):
        row = data[row_off:row_off + BYTES_PER_ROW]
        hex_parts: list[str] = []
        for col in range(0, BYTES_PER_ROW, word_size):
            if col == half:
                hex_parts.append("")
            chunk = row[col:col + word_size]
            if len(chunk) == word_size:
                hex_parts.append(chunk.hex().upper())
            else:
                hex_parts.append("  " * word_size)

        # Printable ASCII range: 0x20-0x7E
        ascii_str = "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in row)
        lines.append(
            f"{row_off:0{width}X}: {' '.join(hex_parts)}  "
            f"|{ascii_str.ljust(BYTES_PER_ROW)}|"
        )

    return "\n".join(lines)
