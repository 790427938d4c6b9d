"""Tests for the known-part registry."""

from eeprom_93cxx.geometry.profiles import PROFILES, Organization, find_profile


class TestFindProfile:
    """Tests for case-insensitive profile lookup."""

    def test_exact_name(self) -> None:
        profile = find_profile("93c66")
        assert profile is not None
        assert profile.size_bytes == 512
        assert profile.addr_bits == 9

    def test_case_insensitive(self) -> None:
        """Upper-case part numbers resolve to the same profile."""
        assert find_profile("93C46") is find_profile("93c46")

    def test_unknown_returns_none(self) -> None:
        assert find_profile("93c86") is None
        assert find_profile("") is None

    def test_no_partial_match(self) -> None:
        assert find_profile("93c6") is None


class TestProfileTable:
    """Sanity checks over the static table."""

    def test_sizes_are_powers_of_two(self) -> None:
        for profile in PROFILES:
            assert profile.size_bytes & (profile.size_bytes - 1) == 0

    def test_names_unique(self) -> None:
        names = [p.name.lower() for p in PROFILES]
        assert len(names) == len(set(names))

    def test_93c06_is_x16_only(self) -> None:
        profile = find_profile("93c06")
        assert profile is not None
        assert profile.organizations == Organization.X16
        assert not profile.organizations & Organization.X8

    def test_dual_organization_parts(self) -> None:
        for name in ("93c46", "93c56", "93c66"):
            profile = find_profile(name)
            assert profile is not None
            assert profile.organizations == Organization.BOTH
