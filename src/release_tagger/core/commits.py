"""Conventional commit parsing and bump calculation.

Commit headers are parsed with the grammar from
https://www.conventionalcommits.org::

    type(scope)!: subject

    optional body

    BREAKING CHANGE: optional footer

Parsing never fails. A header that does not follow the grammar, or
uses a type outside CommitType, yields an unclassified commit whose
subject is the whole header.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from release_tagger.core.version import BumpType

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_tagger.config.models import CommitsConfig, EnvironmentPolicy

DEFAULT_BREAKING_PATTERN = r"BREAKING[ -]CHANGE:"
DEFAULT_MERGE_PATTERN = r"^Merge pull request #(\d+) from (.*)$"
DEFAULT_REVERT_PATTERN = r'^Revert "([\s\S]*)"$'

HEADER_PATTERN = re.compile(
    r"^(?P<type>\w+)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r":[ \t]*(?P<subject>\S.*)$"
)


class CommitType(StrEnum):
    """Recognized commit types, in changelog section order."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    REVERT = "revert"
    BREAKING = "breaking"


_KNOWN_TYPES = frozenset(CommitType)


@dataclass(frozen=True)
class Commit:
    """A commit as returned by the repository host."""

    sha: str
    message: str
    author_name: str | None = None
    html_url: str = ""

    @property
    def author(self) -> str:
        return self.author_name or "Unknown"

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


@dataclass(frozen=True)
class ParsedCommit:
    """A commit classified by its conventional commit header."""

    commit: Commit
    commit_type: CommitType | None
    scope: str | None
    subject: str
    header: str
    body: str = ""
    is_breaking: bool = False
    is_merge: bool = False
    is_revert: bool = False

    @property
    def is_conventional(self) -> bool:
        return self.commit_type is not None

    @classmethod
    def from_commit(
        cls,
        commit: Commit,
        breaking_pattern: str = DEFAULT_BREAKING_PATTERN,
        merge_pattern: str = DEFAULT_MERGE_PATTERN,
        revert_pattern: str = DEFAULT_REVERT_PATTERN,
    ) -> ParsedCommit:
        """Parse a commit message.

        Args:
            commit: Commit to classify
            breaking_pattern: Regex marking a breaking change in the body
            merge_pattern: Regex identifying merge commits
            revert_pattern: Regex identifying revert commits

        Returns:
            ParsedCommit instance
        """
        message = commit.message.strip()
        header, _, body = message.partition("\n")
        header = header.strip()
        body = body.strip()

        commit_type: CommitType | None = None
        scope: str | None = None
        subject = header
        breaking_marker = False

        match = HEADER_PATTERN.match(header)
        if match and match.group("type").lower() in _KNOWN_TYPES:
            commit_type = CommitType(match.group("type").lower())
            scope = match.group("scope") or None
            subject = match.group("subject").strip()
            breaking_marker = match.group("breaking") is not None

        is_breaking = breaking_marker or bool(body and re.search(breaking_pattern, body))
        if is_breaking:
            commit_type = CommitType.BREAKING

        return cls(
            commit=commit,
            commit_type=commit_type,
            scope=scope,
            subject=subject,
            header=header,
            body=body,
            is_breaking=is_breaking,
            is_merge=_matches(merge_pattern, header, message),
            is_revert=_matches(revert_pattern, header, message),
        )


def _matches(pattern: str, header: str, message: str) -> bool:
    return bool(re.match(pattern, header) or re.match(pattern, message))


def parse_commit(commit: Commit, config: CommitsConfig) -> ParsedCommit:
    """Classify a single commit using the configured patterns."""
    return ParsedCommit.from_commit(
        commit,
        breaking_pattern=config.breaking_pattern,
        merge_pattern=config.merge_pattern,
        revert_pattern=config.revert_pattern,
    )


def parse_commits(commits: Iterable[Commit], config: CommitsConfig) -> list[ParsedCommit]:
    """Classify commits, dropping merge and revert commits.

    The input order is preserved.
    """
    parsed = (parse_commit(commit, config) for commit in commits)
    return [pc for pc in parsed if not pc.is_merge and not pc.is_revert]


def filter_skip_release_commits(commits: Iterable[Commit], patterns: Sequence[str]) -> list[Commit]:
    """Drop commits whose message contains a skip release marker.

    Markers are matched case-insensitively anywhere in the message.
    """
    if not patterns:
        return list(commits)

    lowered = [pattern.lower() for pattern in patterns]
    return [
        commit
        for commit in commits
        if not any(pattern in commit.message.lower() for pattern in lowered)
    ]


def calculate_bump(
    parsed: Iterable[ParsedCommit],
    config: CommitsConfig,
    policy: EnvironmentPolicy | None = None,
) -> BumpType:
    """Decide the version bump for a set of classified commits.

    The first matching rule wins: a major type, a minor type, a patch
    type, then the environment's default bump, then NONE.
    """
    relevant = [pc for pc in parsed if not pc.is_merge and not pc.is_revert]
    types = {pc.commit_type for pc in relevant if pc.commit_type is not None}

    if any(pc.is_breaking for pc in relevant) or types & set(config.types_major):
        return BumpType.MAJOR
    if types & set(config.types_minor):
        return BumpType.MINOR
    if types & set(config.types_patch):
        return BumpType.PATCH
    if policy is not None and policy.default_bump is not None:
        return policy.default_bump
    return BumpType.NONE


def group_commits_by_type(
    parsed: Iterable[ParsedCommit],
) -> dict[CommitType | None, list[ParsedCommit]]:
    """Group commits by type, unclassified commits under None."""
    grouped: dict[CommitType | None, list[ParsedCommit]] = defaultdict(list)
    for pc in parsed:
        grouped[pc.commit_type].append(pc)
    return dict(grouped)


def get_breaking_changes(parsed: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    return [pc for pc in parsed if pc.is_breaking]
