"""Repository host interface used by the release orchestration.

A host client is bound to one repository when it is created, so none
of the operations take an owner or repository name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from release_tagger.core.commits import Commit

FIRST_RELEASE_BASE = "HEAD"


@dataclass(frozen=True)
class Tag:
    name: str
    commit_sha: str


@dataclass(frozen=True)
class Release:
    id: int
    tag_name: str
    upload_url: str
    html_url: str = ""


class RepositoryHost(Protocol):
    """Operations the release process needs from a hosted repository."""

    def list_tags(self) -> list[Tag]:
        """All tags of the repository, pagination already resolved."""
        ...

    def ref_exists(self, ref: str) -> bool:
        """True if ``ref`` (for example ``tags/1.2.3``) exists."""
        ...

    def compare_commits(self, base: str, head: str) -> list[Commit]:
        """Commits reachable from ``head`` but not ``base``, oldest first.

        Raises:
            CommitRangeUnavailableError: If the comparison cannot be made
        """
        ...

    def create_or_update_ref(self, ref: str, sha: str, *, force: bool = True) -> None: ...

    def get_release_by_tag(self, tag: str) -> Release | None: ...

    def delete_release(self, release_id: int) -> None: ...

    def create_release(
        self,
        *,
        tag_name: str,
        body: str,
        name: str,
        prerelease: bool,
    ) -> Release: ...

    def upload_asset(self, release: Release, name: str, data: bytes) -> None:
        """Attach a file to a release.

        Raises:
            AssetUploadConflictError: If an asset with ``name`` already exists
        """
        ...
