"""Programmer for 93Cxx Microwire serial EEPROMs."""

from .errors import (
    BusyTimeoutError,
    ConfigurationError,
    EepromError,
    FileSizeMismatchError,
    GeometryError,
    GeometryReason,
    TransportError,
)
from .geometry import GeometrySelection, ResolvedGeometry, find_profile, resolve
from .protocol import PollPolicy, Session, erase_all, read_all, write_all

__all__ = [
    "BusyTimeoutError",
    "ConfigurationError",
    "EepromError",
    "FileSizeMismatchError",
    "GeometryError",
    "GeometryReason",
    "GeometrySelection",
    "PollPolicy",
    "ResolvedGeometry",
    "Session",
    "TransportError",
    "erase_all",
    "find_profile",
    "read_all",
    "resolve",
    "write_all",
]
