"""Core business logic for release-tagger.

This module contains the fundamental building blocks:
- Semantic version parsing, ordering and incrementing
- Conventional commit parsing and bump calculation
- Previous release tag resolution
- Changelog rendering

Everything here is free of I/O; release orchestration against GitHub
lives in release_tagger.core.release.
"""

from __future__ import annotations

from release_tagger.core.changelog import format_commit_for_changelog, render_changelog
from release_tagger.core.commits import (
    Commit,
    CommitType,
    ParsedCommit,
    calculate_bump,
    filter_skip_release_commits,
    get_breaking_changes,
    group_commits_by_type,
    parse_commits,
)
from release_tagger.core.tags import ResolutionMode, resolve_previous_tag
from release_tagger.core.version import (
    BumpType,
    ReleaseType,
    Version,
    compare_versions,
    increment_version,
    is_valid,
    next_release_version,
    parse_version,
)

__all__ = [
    # Version
    "BumpType",
    # Commits
    "Commit",
    "CommitType",
    "ParsedCommit",
    "ReleaseType",
    # Tags
    "ResolutionMode",
    "Version",
    "calculate_bump",
    "compare_versions",
    "filter_skip_release_commits",
    # Changelog
    "format_commit_for_changelog",
    "get_breaking_changes",
    "group_commits_by_type",
    "increment_version",
    "is_valid",
    "next_release_version",
    "parse_commits",
    "parse_version",
    "render_changelog",
    "resolve_previous_tag",
]
