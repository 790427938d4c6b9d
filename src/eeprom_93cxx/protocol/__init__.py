"""Microwire command encoding, bus session, and whole-array workflows."""

from .command import (
    OP_CONTROL,
    OP_READ,
    OP_WRITE,
    SUB_ERASE_ALL,
    SUB_WRITE_DISABLE,
    SUB_WRITE_ENABLE,
    CommandHeader,
    decode_command,
    encode_command,
)
from .session import PollPolicy, Session
from .workflows import erase_all, read_all, write_all

__all__ = [
    "OP_CONTROL",
    "OP_READ",
    "OP_WRITE",
    "SUB_ERASE_ALL",
    "SUB_WRITE_DISABLE",
    "SUB_WRITE_ENABLE",
    "CommandHeader",
    "PollPolicy",
    "Session",
    "decode_command",
    "encode_command",
    "erase_all",
    "read_all",
    "write_all",
]
