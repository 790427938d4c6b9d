"""Device geometry: known parts and selection/validation."""

from .profiles import PROFILES, GeometryProfile, Organization, find_profile
from .resolve import GeometrySelection, ResolvedGeometry, resolve, validate

__all__ = [
    "PROFILES",
    "GeometryProfile",
    "GeometrySelection",
    "Organization",
    "ResolvedGeometry",
    "find_profile",
    "resolve",
    "validate",
]
