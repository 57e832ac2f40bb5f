"""Unit tests for changelog rendering."""

from __future__ import annotations

from release_tagger.config.models import CommitsConfig
from release_tagger.core.changelog import (
    CHANGELOG_SECTIONS,
    format_commit_for_changelog,
    render_changelog,
)
from release_tagger.core.commits import Commit, CommitType, ParsedCommit, parse_commits


def classified(message: str, sha: str = "abcdef1234", author: str | None = "Ann") -> ParsedCommit:
    commit = Commit(sha=sha, message=message, author_name=author, html_url=f"https://x/{sha}")
    return ParsedCommit.from_commit(commit)


class TestFormatCommitForChangelog:
    """Tests for format_commit_for_changelog()."""

    def test_format_with_scope(self):
        """Scoped entries get a bold scope prefix and an author link."""
        pc = ParsedCommit(
            commit=Commit("abcdef1234", "feat(api): add endpoint", "Ann", "https://x/1"),
            commit_type=CommitType.FEAT,
            scope="api",
            subject="add endpoint",
            header="feat(api): add endpoint",
        )

        assert format_commit_for_changelog(pc) == "- **api**: add endpoint ([Ann](https://x/1))"

    def test_format_without_scope(self):
        """Unscoped entries have no prefix."""
        pc = classified("fix: handle timeout", sha="1")

        assert format_commit_for_changelog(pc) == "- handle timeout ([Ann](https://x/1))"

    def test_format_unclassified(self):
        """Unclassified entries use the short sha and the full header."""
        pc = classified("Update build script", sha="0123456789abcdef", author="Bob")

        assert format_commit_for_changelog(pc) == "- 0123456: Update build script (Bob)"

    def test_unknown_author(self):
        """A missing author is shown as Unknown."""
        pc = classified("Update build script", sha="0123456789", author=None)

        assert format_commit_for_changelog(pc).endswith("(Unknown)")


class TestRenderChangelog:
    """Tests for render_changelog()."""

    def test_empty(self):
        """No commits render to an empty string."""
        assert render_changelog([]) == ""

    def test_single_feature(self):
        """A single feature renders one section."""
        pc = classified("feat(api): add endpoint", sha="abcdef1234")

        assert render_changelog([pc]) == (
            "## Features\n- **api**: add endpoint ([Ann](https://x/abcdef1234))"
        )

    def test_section_order(self):
        """Sections follow the type enumeration, Commits last."""
        parsed = [
            classified("Plain message", sha="p1"),
            classified("chore: tidy", sha="c1"),
            classified("feat!: big change", sha="b1"),
            classified("fix: bug", sha="f1"),
            classified("feat: feature", sha="f2"),
        ]
        changelog = render_changelog(parsed)
        headings = [line for line in changelog.splitlines() if line.startswith("## ")]

        assert headings == [
            "## Features",
            "## Bug Fixes",
            "## Chores",
            "## Breaking Changes",
            "## Commits",
        ]

    def test_full_document(self):
        """Sections are separated by one blank line with no outer whitespace."""
        parsed = [
            classified("feat: one", sha="a1"),
            classified("feat(ui): two", sha="a2"),
            classified("Bump things", sha="9999999999", author="Bob"),
        ]

        assert render_changelog(parsed) == (
            "## Features\n"
            "- one ([Ann](https://x/a1))\n"
            "- **ui**: two ([Ann](https://x/a2))\n"
            "\n"
            "## Commits\n"
            "- 9999999: Bump things (Bob)"
        )

    def test_entries_keep_input_order(self):
        """Entries are not re-sorted within a section."""
        parsed = [classified("fix: zeta", sha="1"), classified("fix: alpha", sha="2")]
        lines = render_changelog(parsed).splitlines()

        assert lines[1].startswith("- zeta")
        assert lines[2].startswith("- alpha")

    def test_idempotent(self, sample_commits: list[Commit]):
        """Rendering the same commits twice gives identical output."""
        parsed = parse_commits(sample_commits, CommitsConfig())

        assert render_changelog(parsed) == render_changelog(parsed)
        assert render_changelog(iter(parsed)) == render_changelog(parsed)

    def test_every_type_has_a_section(self):
        """Each commit type has exactly one section label."""
        assert [t for t, _ in CHANGELOG_SECTIONS] == list(CommitType)
