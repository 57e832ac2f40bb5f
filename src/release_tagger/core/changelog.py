"""Markdown changelog rendering.

Classified commits are grouped into one section per commit type, in
CHANGELOG_SECTIONS order, followed by a "Commits" section for commits
without a recognized type. Rendering is a pure function of its input:
the same commits always give byte-identical output.

Example output::

    ## Features
    - **api**: add endpoint ([Ann](https://github.com/o/r/commit/abcdef1))

    ## Commits
    - 1234567: Update README (Bob)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from release_tagger.core.commits import CommitType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_tagger.core.commits import ParsedCommit

CHANGELOG_SECTIONS: tuple[tuple[CommitType, str], ...] = (
    (CommitType.FEAT, "Features"),
    (CommitType.FIX, "Bug Fixes"),
    (CommitType.DOCS, "Documentation"),
    (CommitType.STYLE, "Styles"),
    (CommitType.REFACTOR, "Code Refactoring"),
    (CommitType.PERF, "Performance Improvements"),
    (CommitType.TEST, "Tests"),
    (CommitType.BUILD, "Builds"),
    (CommitType.CI, "Continuous Integration"),
    (CommitType.CHORE, "Chores"),
    (CommitType.REVERT, "Reverts"),
    (CommitType.BREAKING, "Breaking Changes"),
)

UNCLASSIFIED_SECTION = "Commits"


def format_commit_for_changelog(pc: ParsedCommit) -> str:
    """Format a classified commit as a single changelog line."""
    author = pc.commit.author
    if pc.commit_type is None:
        return f"- {pc.commit.short_sha}: {pc.header} ({author})"

    scope = f"**{pc.scope}**: " if pc.scope else ""
    return f"- {scope}{pc.subject} ([{author}]({pc.commit.html_url}))"


def _render_section(title: str, commits: list[ParsedCommit]) -> str:
    entries = "\n".join(format_commit_for_changelog(pc) for pc in commits)
    return f"## {title}\n{entries.strip()}"


def render_changelog(parsed: Iterable[ParsedCommit]) -> str:
    """Render classified commits as a Markdown changelog.

    Empty sections are omitted and commits keep their input order
    within a section.

    Args:
        parsed: Classified commits, merges and reverts already removed

    Returns:
        Changelog text, or an empty string when there are no commits
    """
    parsed = list(parsed)
    sections: list[str] = []

    for commit_type, title in CHANGELOG_SECTIONS:
        commits = [pc for pc in parsed if pc.commit_type == commit_type]
        if commits:
            sections.append(_render_section(title, commits))

    unclassified = [pc for pc in parsed if pc.commit_type is None]
    if unclassified:
        sections.append(_render_section(UNCLASSIFIED_SECTION, unclassified))

    return "\n\n".join(sections)
