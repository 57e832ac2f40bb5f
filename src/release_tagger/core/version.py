"""Semantic version parsing, ordering and incrementing.

Versions follow Semantic Versioning 2.0.0 (https://semver.org). A
leading ``v`` is accepted, as tags are commonly written ``v1.2.3``,
and is preserved when a version is bumped.

Incrementing mirrors the behaviour of the node ``semver`` package so
tags created by earlier JavaScript tooling continue in sequence:

    >>> str(Version.parse("1.2.3").bump(ReleaseType.PRERELEASE, "beta"))
    '1.2.4-beta.0'
    >>> str(Version.parse("2.0.0-beta.1").bump(ReleaseType.PRERELEASE, "beta"))
    '2.0.0-beta.2'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from functools import total_ordering

from release_tagger.exceptions import InvalidVersionError

PrereleaseIdentifier = int | str

_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"

SEMVER_PATTERN = re.compile(
    r"(?P<prefix>v?)"
    r"(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<prerelease>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?",
    re.ASCII,
)


class BumpType(StrEnum):
    """Magnitude of a version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    @property
    def severity(self) -> int:
        """Rank used for comparisons: none < patch < minor < major."""
        return _BUMP_SEVERITY[self]


_BUMP_SEVERITY = {
    BumpType.NONE: 0,
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}


class ReleaseType(StrEnum):
    """Version operations understood by Version.bump()."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"


def _identifier_key(identifier: PrereleaseIdentifier) -> tuple[int, int, str]:
    # Numeric identifiers always have lower precedence than alphanumeric ones
    if isinstance(identifier, int):
        return (0, identifier, "")
    return (1, 0, identifier)


@total_ordering
@dataclass(frozen=True)
class Version:
    """A parsed semantic version.

    Equality and ordering follow semver precedence, so build metadata
    and the optional ``v`` prefix do not take part in comparisons.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[PrereleaseIdentifier, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)
    prefix: str = field(default="", compare=False)

    @classmethod
    def parse(cls, version: str) -> Version:
        """Parse a version string.

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        match = SEMVER_PATTERN.fullmatch(version)
        if match is None:
            raise InvalidVersionError(version)

        prerelease = match.group("prerelease")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(
                int(part) if part.isdigit() else part for part in prerelease.split(".")
            )
            if prerelease
            else (),
            build=tuple(build.split(".")) if build else (),
            prefix=match.group("prefix"),
        )

    def __str__(self) -> str:
        version = f"{self.prefix}{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += "-" + ".".join(str(part) for part in self.prerelease)
        if self.build:
            version += "+" + ".".join(self.build)
        return version

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def _precedence_key(self) -> tuple:
        if not self.prerelease:
            # A release ranks above every prerelease of the same core version
            return (self.major, self.minor, self.patch, 1, ())
        identifiers = tuple(_identifier_key(part) for part in self.prerelease)
        return (self.major, self.minor, self.patch, 0, identifiers)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def has_channel(self, channel: str) -> bool:
        """True if the prerelease identifiers contain the channel label."""
        return channel in self.prerelease

    def with_prerelease(self, prerelease: tuple[PrereleaseIdentifier, ...]) -> Version:
        return Version(self.major, self.minor, self.patch, prerelease, prefix=self.prefix)

    def with_prefix(self, prefix: str) -> Version:
        return Version(
            self.major, self.minor, self.patch, self.prerelease, self.build, prefix=prefix
        )

    def bump(self, kind: ReleaseType | str, channel: str | None = None) -> Version:
        """Return the next version for the given operation.

        Build metadata is dropped, the prefix is kept.

        Args:
            kind: Version operation to apply
            channel: Prerelease label used by the ``pre*`` operations

        Returns:
            New Version instance
        """
        kind = ReleaseType(kind)
        major, minor, patch = self.major, self.minor, self.patch

        if kind is ReleaseType.MAJOR:
            # 2.0.0-beta.1 -> 2.0.0, the prerelease already is the next major
            if minor != 0 or patch != 0 or not self.prerelease:
                major += 1
            return Version(major, 0, 0, prefix=self.prefix)

        if kind is ReleaseType.MINOR:
            if patch != 0 or not self.prerelease:
                minor += 1
            return Version(major, minor, 0, prefix=self.prefix)

        if kind is ReleaseType.PATCH:
            if not self.prerelease:
                patch += 1
            return Version(major, minor, patch, prefix=self.prefix)

        if kind is ReleaseType.PREMAJOR:
            return Version(major + 1, 0, 0, prefix=self.prefix)._open_channel(channel)

        if kind is ReleaseType.PREMINOR:
            return Version(major, minor + 1, 0, prefix=self.prefix)._open_channel(channel)

        if kind is ReleaseType.PREPATCH:
            return Version(major, minor, patch + 1, prefix=self.prefix)._open_channel(channel)

        if not self.prerelease:
            return Version(major, minor, patch + 1, prefix=self.prefix)._open_channel(channel)
        return self._next_prerelease(channel)

    def _open_channel(self, channel: str | None) -> Version:
        return self.with_prerelease((channel, 0) if channel else (0,))

    def _next_prerelease(self, channel: str | None) -> Version:
        identifiers = list(self.prerelease)
        for index in range(len(identifiers) - 1, -1, -1):
            if isinstance(identifiers[index], int):
                identifiers[index] += 1
                break
        else:
            identifiers.append(0)

        if channel is not None:
            counter_follows = len(identifiers) > 1 and isinstance(identifiers[1], int)
            if identifiers[0] != channel or not counter_follows:
                identifiers = [channel, 0]

        return self.with_prerelease(tuple(identifiers))


def parse_version(version: str) -> Version:
    """Parse a version string into a Version."""
    return Version.parse(version)


def is_valid(version: str) -> bool:
    """Return True if the string is a semantic version."""
    return SEMVER_PATTERN.fullmatch(version) is not None


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings by semver precedence.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b

    Raises:
        InvalidVersionError: If either string is not a semantic version
    """
    left, right = Version.parse(a), Version.parse(b)
    if left == right:
        return 0
    return -1 if left < right else 1


def prerelease_identifiers(version: str) -> tuple[PrereleaseIdentifier, ...]:
    """Return the prerelease identifiers of a version, empty if none."""
    return Version.parse(version).prerelease


def increment_version(
    version: str,
    kind: ReleaseType | str,
    channel: str | None = None,
) -> str:
    """Increment a version string.

    Raises:
        InvalidVersionError: If the input is not a semantic version
    """
    return str(Version.parse(version).bump(kind, channel))


def _prerelease_level(version: Version) -> BumpType:
    """The bump a prerelease already stands for (1.2.0-pre.3 is a minor)."""
    if version.patch != 0:
        return BumpType.PATCH
    if version.minor != 0:
        return BumpType.MINOR
    return BumpType.MAJOR


def next_release_version(
    base: Version | None,
    bump: BumpType,
    *,
    channel: str | None = None,
    initial_version: str = "0.1.0",
    tag_prefix: str = "",
) -> Version | None:
    """Apply a bump decision to the current release version.

    Args:
        base: Latest release version, None for the first release
        bump: Bump computed from the commits since that release
        channel: Prerelease label of the environment, None for stable
        initial_version: Version used when there is no previous release
        tag_prefix: Prefix for the initial version

    Returns:
        The next version, or None if a stable environment has nothing
        to release
    """
    if base is None:
        first = Version.parse(initial_version).with_prefix(tag_prefix)
        return first._open_channel(channel) if channel else first

    if channel is None:
        if bump is BumpType.NONE:
            return None
        return base.bump(bump.value)

    if bump is BumpType.NONE:
        candidate = base.bump(ReleaseType.PRERELEASE, channel)
        # Switching from another label must not sort below the base (1.0.0-x.pre.1)
        return candidate if candidate > base else base.bump(ReleaseType.PREPATCH, channel)

    # Later runs on an open channel only move the counter, unless the
    # commits call for a larger increment than the prerelease stands for
    if base.prerelease[:1] == (channel,) and bump.severity <= _prerelease_level(base).severity:
        return base.bump(ReleaseType.PRERELEASE, channel)
    return base.bump(f"pre{bump.value}", channel)
