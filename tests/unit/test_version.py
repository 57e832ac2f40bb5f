"""Tests for semantic version parsing, ordering and incrementing."""

from __future__ import annotations

import pytest

from release_tagger.core.version import (
    BumpType,
    ReleaseType,
    Version,
    compare_versions,
    increment_version,
    is_valid,
    next_release_version,
    prerelease_identifiers,
)
from release_tagger.exceptions import InvalidVersionError


class TestIsValid:
    """Tests for is_valid()."""

    @pytest.mark.parametrize(
        "version",
        [
            "0.0.0",
            "1.2.3",
            "v1.2.3",
            "1.0.0-alpha",
            "1.0.0-beta.1",
            "1.0.0+build.5",
            "1.0.0-rc.1+sha.abc",
        ],
    )
    def test_valid_versions(self, version: str):
        """Standard semver strings are valid."""
        assert is_valid(version)

    @pytest.mark.parametrize(
        "version",
        ["", "1", "1.2", "01.2.3", "1.2.3-", "1.2.3-01", "latest", "release-1.2.3", "1.2.3.4"],
    )
    def test_invalid_versions(self, version: str):
        """Non-semver strings are rejected."""
        assert not is_valid(version)

    @pytest.mark.parametrize("version", ["1\u0661.0.0", "1.2.\uff13", "1.0.0-\u0661"])
    def test_non_ascii_digits(self, version: str):
        """Only ASCII digits count as numbers."""
        assert not is_valid(version)


class TestVersionParse:
    """Tests for Version.parse()."""

    def test_parse_full(self):
        """All components are parsed."""
        v = Version.parse("v1.2.3-beta.4+build.7")

        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease == ("beta", 4)
        assert v.build == ("build", "7")
        assert v.prefix == "v"

    def test_str_roundtrip(self):
        """str() reproduces the input."""
        assert str(Version.parse("v2.0.0-rc.1+exp")) == "v2.0.0-rc.1+exp"

    def test_invalid_raises(self):
        """Invalid input raises InvalidVersionError."""
        with pytest.raises(InvalidVersionError, match="not-a-version"):
            Version.parse("not-a-version")

    def test_prerelease_identifiers(self):
        """Numeric identifiers become ints."""
        assert prerelease_identifiers("1.0.0-pre.3") == ("pre", 3)
        assert prerelease_identifiers("1.0.0") == ()


class TestCompareVersions:
    """Tests for compare_versions() and Version ordering."""

    def test_semver_precedence_chain(self):
        """The example chain from semver.org is strictly increasing."""
        chain = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
            "1.0.1",
            "1.1.0",
            "2.0.0",
        ]
        for lower, higher in zip(chain, chain[1:]):
            assert compare_versions(lower, higher) == -1
            assert compare_versions(higher, lower) == 1

    def test_equal(self):
        """A version equals itself; build metadata and prefix are ignored."""
        assert compare_versions("1.2.3", "1.2.3") == 0
        assert compare_versions("1.2.3+a", "1.2.3+b") == 0
        assert compare_versions("v1.2.3", "1.2.3") == 0

    def test_antisymmetric(self):
        """compare(a, b) is the inverse of compare(b, a)."""
        versions = ["0.9.0", "1.2.0", "1.3.0-pre.1", "1.3.0", "v1.3.0+x"]
        for a in versions:
            for b in versions:
                assert compare_versions(a, b) == -compare_versions(b, a)

    def test_invalid_raises(self):
        """Comparing an invalid version raises."""
        with pytest.raises(InvalidVersionError):
            compare_versions("1.2.3", "nope")


class TestBump:
    """Tests for Version.bump() and increment_version()."""

    @pytest.mark.parametrize(
        ("version", "kind", "expected"),
        [
            ("1.2.3", "major", "2.0.0"),
            ("1.2.3", "minor", "1.3.0"),
            ("1.2.3", "patch", "1.2.4"),
            ("2.0.0-beta.1", "major", "2.0.0"),
            ("1.3.0-pre.2", "minor", "1.3.0"),
            ("1.3.0-pre.2", "patch", "1.3.0"),
            ("1.2.3", "premajor", "2.0.0-pre.0"),
            ("1.2.3", "preminor", "1.3.0-pre.0"),
            ("1.2.3", "prepatch", "1.2.4-pre.0"),
            ("1.2.3", "prerelease", "1.2.4-pre.0"),
            ("1.2.4-pre.0", "prerelease", "1.2.4-pre.1"),
            ("1.2.4-rc.5", "prerelease", "1.2.4-pre.0"),
            ("1.8.4-pre.20231105.0", "prerelease", "1.8.4-pre.20231105.1"),
            ("v1.2.3+build", "patch", "v1.2.4"),
        ],
    )
    def test_increment(self, version: str, kind: str, expected: str):
        """Increments follow node-semver semantics."""
        assert increment_version(version, kind, "pre") == expected

    def test_prerelease_without_channel(self):
        """Without a channel only a numeric counter is used."""
        assert increment_version("1.0.0", ReleaseType.PRERELEASE) == "1.0.1-0"
        assert increment_version("1.0.1-0", ReleaseType.PRERELEASE) == "1.0.1-1"

    def test_label_only_prerelease_gets_counter(self):
        """A bare channel label gains a counter."""
        assert increment_version("1.0.0-beta", "prerelease", "beta") == "1.0.0-beta.0"

    def test_increment_is_greater_and_valid(self):
        """Every increment yields a valid, greater version."""
        for version in ["0.0.0", "1.2.3", "1.2.3-pre.4", "2.0.0-beta"]:
            for kind in ReleaseType:
                bumped = increment_version(version, kind, "pre")
                assert is_valid(bumped)
                assert compare_versions(bumped, version) == 1

    def test_invalid_raises(self):
        """Incrementing an invalid version raises InvalidVersionError."""
        with pytest.raises(InvalidVersionError):
            increment_version("latest", "patch")


class TestBumpType:
    """Tests for BumpType severity."""

    def test_severity_order(self):
        """none < patch < minor < major."""
        ordered = [BumpType.NONE, BumpType.PATCH, BumpType.MINOR, BumpType.MAJOR]
        assert [b.severity for b in ordered] == sorted(b.severity for b in ordered)


class TestNextReleaseVersion:
    """Tests for next_release_version()."""

    def test_stable_bump(self):
        """Stable environments apply the bump directly."""
        base = Version.parse("1.2.3")
        assert str(next_release_version(base, BumpType.MINOR)) == "1.3.0"

    def test_stable_none_is_none(self):
        """Nothing to release without a bump."""
        assert next_release_version(Version.parse("1.2.3"), BumpType.NONE) is None

    def test_first_release(self):
        """No base uses the initial version with the tag prefix."""
        version = next_release_version(None, BumpType.NONE, initial_version="0.1.0", tag_prefix="v")
        assert str(version) == "v0.1.0"

    def test_first_prerelease(self):
        """A prerelease environment opens its channel on the first release."""
        version = next_release_version(None, BumpType.MINOR, channel="pre")
        assert str(version) == "0.1.0-pre.0"

    def test_counter_bump_without_commits(self):
        """An open channel without relevant commits bumps the counter."""
        version = next_release_version(Version.parse("2.0.0-beta.1"), BumpType.NONE, channel="beta")
        assert str(version) == "2.0.0-beta.2"

    def test_opens_channel_from_stable(self):
        """A stable base opens the channel with the bump applied."""
        version = next_release_version(Version.parse("1.2.3"), BumpType.MINOR, channel="pre")
        assert str(version) == "1.3.0-pre.0"

    def test_stable_base_without_commits(self):
        """A stable base without commits opens a patch prerelease."""
        version = next_release_version(Version.parse("1.2.3"), BumpType.NONE, channel="pre")
        assert str(version) == "1.2.4-pre.0"

    def test_same_level_bumps_counter(self):
        """A bump already covered by the open prerelease only moves the counter."""
        base = Version.parse("1.3.0-pre.2")
        assert str(next_release_version(base, BumpType.MINOR, channel="pre")) == "1.3.0-pre.3"
        assert str(next_release_version(base, BumpType.PATCH, channel="pre")) == "1.3.0-pre.3"

    def test_larger_bump_starts_new_prerelease(self):
        """A bump beyond the open prerelease starts a new one."""
        base = Version.parse("1.3.0-pre.2")
        assert str(next_release_version(base, BumpType.MAJOR, channel="pre")) == "2.0.0-pre.0"

    def test_stable_environment_promotes_prerelease(self):
        """A stable environment turns a prerelease base into its release."""
        base = Version.parse("1.3.0-pre.2")
        assert str(next_release_version(base, BumpType.PATCH)) == "1.3.0"

    def test_counter_needs_leading_channel(self):
        """A channel label further in the prerelease is not an open channel."""
        base = Version.parse("1.0.0-x.pre.1")

        assert str(next_release_version(base, BumpType.PATCH, channel="pre")) == "1.0.1-pre.0"

    def test_none_never_sorts_below_base(self):
        """Moving onto the channel without commits always goes up."""
        base = Version.parse("1.0.0-x.pre.1")
        version = next_release_version(base, BumpType.NONE, channel="pre")

        assert str(version) == "1.0.1-pre.0"
        assert version > base

    def test_none_switches_label_upwards(self):
        """A higher channel label continues on the same release."""
        base = Version.parse("1.0.0-alpha.1")
        version = next_release_version(base, BumpType.NONE, channel="beta")

        assert str(version) == "1.0.0-beta.0"
