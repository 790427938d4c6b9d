"""Known 93Cxx parts and their command geometry.

Microwire EEPROMs have no identification command, so the part must be
named by the user. Each profile records the x8 address width; x16 mode
uses one bit fewer (see resolve.py).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Organization(enum.Flag):
    """Word organizations a part can be strapped for (ORG pin)."""

    X8 = 1
    X16 = 2
    BOTH = X8 | X16


@dataclass(frozen=True)
class GeometryProfile:
    """Static description of one EEPROM part."""

    name: str
    size_bytes: int
    addr_bits: int
    organizations: Organization


PROFILES: tuple[GeometryProfile, ...] = (
    GeometryProfile("93c66", size_bytes=512, addr_bits=9, organizations=Organization.BOTH),
    GeometryProfile("93c56", size_bytes=256, addr_bits=8, organizations=Organization.BOTH),
    GeometryProfile("93c46", size_bytes=128, addr_bits=7, organizations=Organization.BOTH),
    GeometryProfile("93c06", size_bytes=32, addr_bits=6, organizations=Organization.X16),
)


def find_profile(name: str) -> GeometryProfile | None:
    """Look up a profile by case-insensitive name, or None if unknown."""
    wanted = name.lower()
    for profile in PROFILES:
        if profile.name.lower() == wanted:
            return profile
    return None
