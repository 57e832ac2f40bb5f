"""Repository host integration."""

from __future__ import annotations

from release_tagger.vcs.base import FIRST_RELEASE_BASE, Release, RepositoryHost, Tag
from release_tagger.vcs.github import GitHubClient

__all__ = [
    "FIRST_RELEASE_BASE",
    "GitHubClient",
    "Release",
    "RepositoryHost",
    "Tag",
]
