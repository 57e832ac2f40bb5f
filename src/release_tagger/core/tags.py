"""Selection of the previous release tag.

The previous tag is the base the changelog and the next version are
computed from. Which tag counts as "previous" depends on the
ResolutionMode:

- LATEST: the greatest semantic version among all tags.
- ENVIRONMENT: the greatest tag belonging to the environment's
  release train (a prerelease channel, or stable releases).
- PREDECESSOR: the greatest tag strictly below a given release tag.
- TARGET: the given release tag itself, for rolling tags that are
  moved and re-released on every run.

Tags that are not semantic versions are ignored by every mode except
TARGET. Sorting is stable, so tags of equal precedence keep their
input order.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from release_tagger.core.version import Version, is_valid
from release_tagger.exceptions import NoValidTagFoundError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Sequence

    from release_tagger.config.models import EnvironmentPolicy


class ResolutionMode(StrEnum):
    LATEST = "latest"
    ENVIRONMENT = "environment"
    PREDECESSOR = "predecessor"
    TARGET = "target"


def _parsed_tags(tags: Iterable[str]) -> list[tuple[str, Version]]:
    return [(tag, Version.parse(tag)) for tag in tags if is_valid(tag)]


def _greatest(candidates: Sequence[tuple[str, Version]]) -> str | None:
    if not candidates:
        return None
    ordered = sorted(candidates, key=lambda item: item[1], reverse=True)
    # reverse=True keeps equal items in input order, so the first is first-seen
    return ordered[0][0]


def find_latest_tag(tags: Iterable[str]) -> str:
    """Return the tag with the greatest semantic version.

    Raises:
        NoValidTagFoundError: If no tag is a semantic version
    """
    latest = _greatest(_parsed_tags(tags))
    if latest is None:
        raise NoValidTagFoundError("No semantic version tags found")
    return latest


def _belongs_to_environment(
    version: Version,
    policy: EnvironmentPolicy,
    known_channels: Collection[str],
) -> bool:
    if policy.channel is not None:
        return version.has_channel(policy.channel)
    if policy.stable_means_no_prerelease:
        return not version.is_prerelease
    return not any(version.has_channel(channel) for channel in known_channels)


def find_environment_tag(
    tags: Iterable[str],
    policy: EnvironmentPolicy,
    known_channels: Collection[str] = (),
) -> str | None:
    """Return the latest tag of the environment's release train.

    A prerelease environment only considers tags carrying its channel
    label. A stable environment considers tags without prerelease
    identifiers, or, when ``stable_means_no_prerelease`` is off, tags
    carrying none of the known channel labels.

    Returns:
        The tag name, or None when the environment has no release yet
    """
    candidates = [
        (tag, version)
        for tag, version in _parsed_tags(tags)
        if _belongs_to_environment(version, policy, known_channels)
    ]
    return _greatest(candidates)


def find_predecessor_tag(tags: Iterable[str], current_tag: str) -> str | None:
    """Return the greatest tag strictly below ``current_tag``.

    Raises:
        InvalidVersionError: If ``current_tag`` is not a semantic version
    """
    current = Version.parse(current_tag)
    candidates = [(tag, version) for tag, version in _parsed_tags(tags) if version < current]
    return _greatest(candidates)


def resolve_previous_tag(
    tags: Iterable[str],
    mode: ResolutionMode,
    *,
    policy: EnvironmentPolicy | None = None,
    known_channels: Collection[str] = (),
    target_tag: str | None = None,
) -> str | None:
    """Select the previous release tag according to ``mode``.

    Args:
        tags: Tag names, in any order
        mode: Selection policy
        policy: Environment policy, required for ENVIRONMENT
        known_channels: Every configured channel label
        target_tag: Release tag, required for PREDECESSOR and TARGET

    Returns:
        Tag name, or None when no previous release exists

    Raises:
        NoValidTagFoundError: LATEST mode found no semantic version tag
        InvalidVersionError: PREDECESSOR mode got an invalid target tag
        ValueError: A required argument for the mode is missing
    """
    tags = list(tags)

    if mode is ResolutionMode.LATEST:
        return find_latest_tag(tags)

    if mode is ResolutionMode.ENVIRONMENT:
        if policy is None:
            raise ValueError("ENVIRONMENT resolution requires an environment policy")
        return find_environment_tag(tags, policy, known_channels)

    if target_tag is None:
        raise ValueError(f"{mode.upper()} resolution requires a target tag")

    if mode is ResolutionMode.PREDECESSOR:
        return find_predecessor_tag(tags, target_tag)

    return target_tag if target_tag in tags else None


def find_unchanneled_prerelease_tags(
    tags: Iterable[str],
    known_channels: Collection[str],
) -> list[str]:
    """Return prerelease tags that carry none of the known channel labels.

    Such tags (``1.0.0-rc.1`` when only ``pre`` is configured) are never
    selected by ENVIRONMENT resolution.
    """
    return [
        tag
        for tag, version in _parsed_tags(tags)
        if version.is_prerelease and not any(version.has_channel(c) for c in known_channels)
    ]
