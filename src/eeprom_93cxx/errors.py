"""Exception hierarchy shared by the geometry, protocol and transport layers."""

from __future__ import annotations

import enum


class EepromError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(EepromError, ValueError):
    """Invalid or conflicting options, detected before any bus access."""


class GeometryReason(enum.Enum):
    """Which geometry check failed."""

    UNKNOWN_TYPE = "unknown EEPROM type"
    ZERO_SIZE = "size is zero"
    SIZE_NOT_POWER_OF_TWO = "size is not a power of two"
    SIZE_SMALLER_THAN_WORD = "size is smaller than one word"
    ADDR_BITS_RANGE = "address bits out of range"
    X16_UNSUPPORTED = "x16 organization not supported"
    X8_UNSUPPORTED = "x8 organization not supported"


class GeometryError(ConfigurationError):
    """A geometry failed validation.

    Attributes:
        reason: The first check that failed.
    """

    def __init__(self, reason: GeometryReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class FileSizeMismatchError(ConfigurationError):
    """A write image does not match the device capacity."""

    def __init__(self, actual: int, expected: int) -> None:
        super().__init__(
            f"Image size {actual} bytes does not match EEPROM size {expected} bytes"
        )
        self.actual = actual
        self.expected = expected


class TransportError(EepromError, OSError):
    """The bus could not be opened, configured, or driven."""


class BusyTimeoutError(EepromError, TimeoutError):
    """The device never reported write completion.

    Not a TransportError: the bus worked, the part stayed busy.
    """

    def __init__(self, polls: int, elapsed: float) -> None:
        super().__init__(
            f"Device still busy after {polls} status polls ({elapsed:.3f} s)"
        )
        self.polls = polls
        self.elapsed = elapsed
