"""Geometry resolution: turn a user selection into a validated geometry."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import ConfigurationError, GeometryError, GeometryReason
from .profiles import Organization, find_profile

logger = logging.getLogger(__name__)

# Used when neither a part name nor explicit parameters are given
DEFAULT_SIZE_BYTES = 256
DEFAULT_ADDR_BITS = 8

MIN_ADDR_BITS = 5
MAX_ADDR_BITS = 9


@dataclass(frozen=True)
class GeometrySelection:
    """What the user asked for: a named part, or explicit parameters.

    Explicit parameters are taken as-is; the caller is expected to have
    already accounted for the organization when choosing addr_bits.
    """

    profile: str | None = None
    size_bytes: int | None = None
    addr_bits: int | None = None
    x16: bool = False

    @property
    def has_parameters(self) -> bool:
        """True if any explicit geometry parameter was supplied."""
        return self.size_bytes is not None or self.addr_bits is not None


@dataclass(frozen=True)
class ResolvedGeometry:
    """Validated geometry for one session. Immutable once built."""

    name: str
    size_bytes: int
    addr_bits: int
    is_x16: bool

    @property
    def word_size(self) -> int:
        """Bytes per addressable word: 2 in x16 mode, 1 in x8 mode."""
        return 2 if self.is_x16 else 1

    @property
    def num_words(self) -> int:
        """Number of addressable words in the array."""
        return self.size_bytes // self.word_size

    @property
    def organization(self) -> str:
        return "x16" if self.is_x16 else "x8"

    def describe(self) -> str:
        """One-line summary, e.g. '93c66, 256x16, 8 command address bits'."""
        width = 16 if self.is_x16 else 8
        return (
            f"{self.name}, {self.num_words}x{width}, "
            f"{self.addr_bits} command address bits"
        )


def validate(
    size_bytes: int, addr_bits: int, is_x16: bool, supported: Organization,
) -> None:
    """Check a candidate geometry, raising on the first violated rule.

    Raises:
        GeometryError: With the reason of the first failing check.
    """
    if size_bytes == 0:
        raise GeometryError(GeometryReason.ZERO_SIZE, "EEPROM size cannot be zero")
    if size_bytes < 0 or size_bytes & (size_bytes - 1):
        raise GeometryError(
            GeometryReason.SIZE_NOT_POWER_OF_TWO,
            f"EEPROM size {size_bytes} is not a power of 2",
        )
    word_size = 2 if is_x16 else 1
    if size_bytes < word_size:
        raise GeometryError(
            GeometryReason.SIZE_SMALLER_THAN_WORD,
            f"EEPROM size {size_bytes} is smaller than one {word_size}-byte word",
        )
    if not MIN_ADDR_BITS <= addr_bits <= MAX_ADDR_BITS:
        raise GeometryError(
            GeometryReason.ADDR_BITS_RANGE,
            f"addr-bits {addr_bits} should be between "
            f"{MIN_ADDR_BITS} and {MAX_ADDR_BITS}",
        )
    if is_x16 and not supported & Organization.X16:
        raise GeometryError(
            GeometryReason.X16_UNSUPPORTED,
            "Selected EEPROM does not support x16 mode",
        )
    if not is_x16 and not supported & Organization.X8:
        raise GeometryError(
            GeometryReason.X8_UNSUPPORTED,
            "Selected EEPROM does not support x8 mode",
        )


def resolve(selection: GeometrySelection) -> ResolvedGeometry:
    """Merge a profile or explicit parameters into a ResolvedGeometry.

    A named profile has its address width reduced by one in x16 mode;
    explicit parameters are never adjusted.

    Args:
        selection: The user's choice of part or parameters.

    Returns:
        The validated geometry.

    Raises:
        ConfigurationError: If both a profile and parameters are given.
        GeometryError: If the part is unknown or the geometry is invalid.
    """
    if selection.profile is not None and selection.has_parameters:
        raise ConfigurationError(
            "Please specify either EEPROM type, or EEPROM parameters, but not both"
        )

    if selection.profile is not None:
        profile = find_profile(selection.profile)
        if profile is None:
            raise GeometryError(
                GeometryReason.UNKNOWN_TYPE,
                f"Unknown EEPROM type: {selection.profile}",
            )
        name = profile.name
        size_bytes = profile.size_bytes
        addr_bits = profile.addr_bits - 1 if selection.x16 else profile.addr_bits
        supported = profile.organizations
    else:
        name = "custom"
        size_bytes = (
            selection.size_bytes if selection.size_bytes is not None
            else DEFAULT_SIZE_BYTES
        )
        addr_bits = (
            selection.addr_bits if selection.addr_bits is not None
            else DEFAULT_ADDR_BITS
        )
        supported = Organization.BOTH

    validate(size_bytes, addr_bits, selection.x16, supported)
    geometry = ResolvedGeometry(
        name=name, size_bytes=size_bytes, addr_bits=addr_bits, is_x16=selection.x16,
    )
    logger.debug("resolved geometry: %s", geometry.describe())
    return geometry
