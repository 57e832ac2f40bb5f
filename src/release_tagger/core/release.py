"""Release orchestration.

ReleaseRunner ties the pure building blocks to a repository host:

    previous tag -> commits since it -> classified commits
        -> next tag + changelog -> tag ref + release + assets

Planning only reads from the host. Publishing is idempotent for a
given tag: the tag ref is moved when it exists and a release with the
same tag is deleted before the new one is created. Concurrent runs
against the same tag are not safe and must be serialized by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from release_tagger.core.changelog import render_changelog
from release_tagger.core.commits import calculate_bump, filter_skip_release_commits, parse_commits
from release_tagger.core.tags import (
    ResolutionMode,
    find_unchanneled_prerelease_tags,
    resolve_previous_tag,
)
from release_tagger.core.version import BumpType, Version, is_valid, next_release_version
from release_tagger.exceptions import CommitRangeUnavailableError, NoValidTagFoundError
from release_tagger.vcs.assets import UploadReport, expand_file_globs, upload_assets
from release_tagger.vcs.base import FIRST_RELEASE_BASE

if TYPE_CHECKING:
    from pathlib import Path

    from release_tagger.config.models import ReleaseTaggerConfig
    from release_tagger.core.commits import Commit, ParsedCommit
    from release_tagger.vcs.base import Release, RepositoryHost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleasePlan:
    """Everything decided before anything is written to the host."""

    head_sha: str
    previous_tag: str | None
    base_ref: str
    commits: tuple[ParsedCommit, ...]
    bump: BumpType
    tag: str | None
    changelog: str
    release_name: str | None = None
    prerelease: bool = False

    @property
    def is_first_release(self) -> bool:
        return self.base_ref == FIRST_RELEASE_BASE

    @property
    def has_release(self) -> bool:
        return self.tag is not None


@dataclass
class ReleaseResult:
    plan: ReleasePlan
    release: Release | None = None
    assets: UploadReport = field(default_factory=UploadReport)


class ReleaseRunner:
    """Plans and publishes a release for one repository."""

    def __init__(
        self,
        client: RepositoryHost,
        config: ReleaseTaggerConfig,
        *,
        root: Path | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.root = root

    def run(self, head_sha: str, *, execute: bool = True) -> ReleaseResult:
        """Plan a release at ``head_sha`` and publish it when ``execute``."""
        plan = self.plan(head_sha)
        if not plan.has_release or not execute:
            return ReleaseResult(plan=plan)
        return self.publish(plan)

    # -------- Planning --------

    def plan(self, head_sha: str) -> ReleasePlan:
        config = self.config
        logger.info(
            "Planning release for %s in environment %s",
            head_sha,
            config.environment,
        )

        tag_names = [tag.name for tag in self.client.list_tags()]
        logger.info("Found %d tags", len(tag_names))
        self._warn_unchanneled_tags(tag_names)

        previous_tag = self._resolve(tag_names, config.previous_tag_mode)
        logger.info("Previous release tag: %s", previous_tag or "(none)")

        base_ref = self._base_ref(previous_tag)
        commits = self._fetch_commits(base_ref, head_sha)
        commits = filter_skip_release_commits(commits, config.commits.skip_release_patterns)
        parsed = parse_commits(commits, config.commits)
        logger.info("Found %d commits since last release", len(parsed))

        bump = calculate_bump(parsed, config.commits, config.policy)
        logger.info("Next semver bump: %s", bump)

        tag = config.target_tag or self._next_tag(tag_names, bump)
        if tag is not None:
            logger.info("New release tag: %s", tag)

        return ReleasePlan(
            head_sha=head_sha,
            previous_tag=previous_tag,
            base_ref=base_ref,
            commits=tuple(parsed),
            bump=bump,
            tag=tag,
            changelog=render_changelog(parsed),
            release_name=self._release_name(tag),
            prerelease=self._is_prerelease(tag),
        )

    def _warn_unchanneled_tags(self, tag_names: list[str]) -> None:
        if self.config.previous_tag_mode is not ResolutionMode.ENVIRONMENT:
            return
        ignored = find_unchanneled_prerelease_tags(tag_names, self.config.known_channels)
        if ignored:
            channels = ", ".join(sorted(self.config.known_channels)) or "(none)"
            logger.warning(
                "Prerelease tags %s match no configured channel (%s) "
                "and are ignored when resolving the previous release",
                ", ".join(ignored),
                channels,
            )

    def _resolve(self, tag_names: list[str], mode: ResolutionMode) -> str | None:
        try:
            return resolve_previous_tag(
                tag_names,
                mode,
                policy=self.config.policy,
                known_channels=self.config.known_channels,
                target_tag=self.config.target_tag,
            )
        except NoValidTagFoundError:
            logger.info("No semantic version tags found, assuming this is the first release")
            return None

    def _base_ref(self, previous_tag: str | None) -> str:
        if previous_tag is None:
            return FIRST_RELEASE_BASE
        if not self.client.ref_exists(f"tags/{previous_tag}"):
            logger.info(
                "Could not find release tag %s. Assuming this is the first release.",
                previous_tag,
            )
            return FIRST_RELEASE_BASE
        return previous_tag

    def _fetch_commits(self, base_ref: str, head_sha: str) -> list[Commit]:
        logger.info("Fetching commits between %s and %s", base_ref, head_sha)
        try:
            return self.client.compare_commits(base_ref, head_sha)
        except CommitRangeUnavailableError as e:
            logger.warning("Could not fetch commits between %s and %s: %s", base_ref, head_sha, e)
            return []

    def _next_tag(self, tag_names: list[str], bump: BumpType) -> str | None:
        config = self.config
        base_tag = self._resolve(tag_names, config.version_base_mode)
        base = Version.parse(base_tag) if base_tag and is_valid(base_tag) else None
        version = next_release_version(
            base,
            bump,
            channel=config.policy.channel,
            initial_version=config.version.initial_version,
            tag_prefix=config.version.tag_prefix,
        )
        if version is None:
            logger.info("No releasable changes since %s", base_tag)
            return None
        return str(version)

    def _release_name(self, tag: str | None) -> str | None:
        if tag is None:
            return None
        title = self.config.title
        if self.config.target_tag:
            return title or tag
        return f"{title} - {tag}" if title else tag

    def _is_prerelease(self, tag: str | None) -> bool:
        if self.config.prerelease is not None:
            return self.config.prerelease
        return tag is not None and is_valid(tag) and Version.parse(tag).is_prerelease

    # -------- Publishing --------

    def publish(self, plan: ReleasePlan) -> ReleaseResult:
        """Create or move the tag, replace the release and upload assets.

        Raises:
            ValueError: If the plan has no tag to release
        """
        if plan.tag is None:
            raise ValueError("Nothing to publish: the release plan has no tag")

        self.client.create_or_update_ref(f"tags/{plan.tag}", plan.head_sha, force=True)
        logger.info("Created or updated tag %s", plan.tag)

        existing = self.client.get_release_by_tag(plan.tag)
        if existing is not None:
            logger.info("Found release %s for tag %s, deleting", existing.id, plan.tag)
            self.client.delete_release(existing.id)

        release = self.client.create_release(
            tag_name=plan.tag,
            body=plan.changelog,
            name=plan.release_name or plan.tag,
            prerelease=plan.prerelease,
        )
        logger.info("Created release %s for tag %s", release.id, plan.tag)

        report = UploadReport()
        if self.config.files:
            paths = expand_file_globs(self.config.files, self.root)
            report = upload_assets(self.client, release, paths)

        return ReleaseResult(plan=plan, release=release, assets=report)
