"""Shared pytest fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from release_tagger.core.commits import Commit

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the runner's GitHub environment out of the tests."""
    for name in ("GITHUB_REPOSITORY", "GITHUB_TOKEN", "GITHUB_SHA", "GITHUB_OUTPUT"):
        monkeypatch.delenv(name, raising=False)


def _make_commit(sha: str, message: str, author: str | None = "Test") -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name=author,
        html_url=f"https://github.com/owner/repo/commit/{sha}",
    )


@pytest.fixture
def feat_commit() -> Commit:
    return _make_commit("feat1234567890", "feat: add user authentication")


@pytest.fixture
def fix_commit() -> Commit:
    return _make_commit("fix1234567890", "fix(core): handle empty config")


@pytest.fixture
def breaking_commit() -> Commit:
    return _make_commit(
        "break1234567890",
        "feat(api)!: remove v1 endpoints\n\nBREAKING CHANGE: v1 clients must migrate",
    )


@pytest.fixture
def sample_commits(
    feat_commit: Commit, fix_commit: Commit, breaking_commit: Commit
) -> list[Commit]:
    return [
        feat_commit,
        fix_commit,
        _make_commit("docs1234567890", "docs: update README"),
        _make_commit("chore1234567890", "chore(deps): bump requests"),
        breaking_commit,
        _make_commit("plain1234567890", "Tweak the build script", author=None),
    ]


@pytest.fixture
def project_with_pyproject(tmp_path: Path) -> Path:
    """A project directory with a [tool.release-tagger] section."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.release-tagger]
environment = "staging"
files = ["dist/*.whl"]

[tool.release-tagger.environments.staging]
channel = "beta"

[tool.release-tagger.environments.prod]
default_bump = "patch"

[tool.release-tagger.commits]
types_patch = ["fix", "perf"]

[tool.release-tagger.github]
owner = "acme"
repo = "widgets"
"""
    )
    return tmp_path


@pytest.fixture
def make_commit():
    """Factory for commits with a GitHub style html_url."""
    return _make_commit
