"""Configuration models for release-tagger.

Values come from ``[tool.release-tagger]`` in pyproject.toml and from
the action inputs, with the inputs taking precedence. Every model has
defaults so an empty configuration is a valid one.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from release_tagger.core.commits import (
    DEFAULT_BREAKING_PATTERN,
    DEFAULT_MERGE_PATTERN,
    DEFAULT_REVERT_PATTERN,
)
from release_tagger.core.tags import ResolutionMode
from release_tagger.core.version import BumpType, is_valid


class EnvironmentPolicy(BaseModel):
    """How an environment selects tags and bumps versions.

    A policy with a ``channel`` tracks prerelease tags carrying that
    label (``1.2.0-pre.3``); a policy without one tracks stable tags.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    channel: str | None = None
    stable_means_no_prerelease: bool = True
    default_bump: BumpType | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.channel is not None

    @field_validator("channel")
    @classmethod
    def _channel_is_identifier(cls, value: str | None) -> str | None:
        if value is not None and not re.fullmatch(r"[0-9A-Za-z-]*[A-Za-z-][0-9A-Za-z-]*", value):
            raise ValueError(f"channel must be an alphanumeric prerelease label, got {value!r}")
        return value

    @field_validator("default_bump")
    @classmethod
    def _none_means_unset(cls, value: BumpType | None) -> BumpType | None:
        return None if value is BumpType.NONE else value


def default_environments() -> dict[str, EnvironmentPolicy]:
    return {
        "dev": EnvironmentPolicy(name="dev"),
        "test": EnvironmentPolicy(name="test", channel="pre"),
        "prod": EnvironmentPolicy(name="prod", default_bump=BumpType.PATCH),
    }


class CommitsConfig(BaseModel):
    """Commit classification settings."""

    types_major: list[str] = Field(default_factory=lambda: ["breaking"])
    types_minor: list[str] = Field(default_factory=lambda: ["feat"])
    types_patch: list[str] = Field(default_factory=lambda: ["fix"])
    breaking_pattern: str = DEFAULT_BREAKING_PATTERN
    merge_pattern: str = DEFAULT_MERGE_PATTERN
    revert_pattern: str = DEFAULT_REVERT_PATTERN
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: ["[skip release]", "[release skip]", "[no release]"]
    )

    @field_validator("breaking_pattern", "merge_pattern", "revert_pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression {value!r}: {e}") from e
        return value

    @field_validator("merge_pattern")
    @classmethod
    def _merge_groups(cls, value: str) -> str:
        if re.compile(value).groups not in (1, 2):
            raise ValueError("merge_pattern must have one or two capture groups")
        return value

    @field_validator("revert_pattern")
    @classmethod
    def _revert_groups(cls, value: str) -> str:
        if re.compile(value).groups != 1:
            raise ValueError("revert_pattern must have exactly one capture group")
        return value


class VersionConfig(BaseModel):
    """Version numbering settings."""

    initial_version: str = "0.1.0"
    tag_prefix: str = ""

    @field_validator("initial_version")
    @classmethod
    def _valid_initial(cls, value: str) -> str:
        if not is_valid(value):
            raise ValueError(f"initial_version is not a semantic version: {value!r}")
        return value

    @field_validator("tag_prefix")
    @classmethod
    def _known_prefix(cls, value: str) -> str:
        # Tags with any other prefix are not recognised as versions when read back
        if value not in ("", "v"):
            raise ValueError(f"tag_prefix must be '' or 'v', got {value!r}")
        return value


class GitHubConfig(BaseModel):
    """GitHub API settings."""

    owner: str | None = None
    repo: str | None = None
    token: str | None = Field(default=None, repr=False)
    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    max_retries: int = Field(default=2, ge=0)


class ReleaseTaggerConfig(BaseModel):
    """Root configuration."""

    environment: str = "prod"
    environments: dict[str, EnvironmentPolicy] = Field(default_factory=default_environments)
    target_tag: str | None = None
    title: str | None = None
    prerelease: bool | None = None
    files: list[str] = Field(default_factory=list)
    previous_tag_mode: ResolutionMode = ResolutionMode.ENVIRONMENT
    version_base_mode: ResolutionMode = ResolutionMode.LATEST

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @field_validator("environments", mode="before")
    @classmethod
    def _name_environments(cls, value: object) -> object:
        # Allow [tool.release-tagger.environments.beta] tables without a name key
        if isinstance(value, dict):
            return {
                name: {"name": name, **policy} if isinstance(policy, dict) else policy
                for name, policy in value.items()
            }
        return value

    @field_validator("version_base_mode")
    @classmethod
    def _base_mode_computes(cls, value: ResolutionMode) -> ResolutionMode:
        # Only read when computing the next tag, which a target tag skips
        if value not in (ResolutionMode.LATEST, ResolutionMode.ENVIRONMENT):
            raise ValueError("version_base_mode must be 'latest' or 'environment'")
        return value

    @field_validator("target_tag", "title", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> ReleaseTaggerConfig:
        if self.environment not in self.environments:
            known = ", ".join(sorted(self.environments))
            raise ValueError(f"unknown environment {self.environment!r} (known: {known})")

        mode = self.previous_tag_mode
        needs_target = mode in (ResolutionMode.PREDECESSOR, ResolutionMode.TARGET)
        if needs_target and self.target_tag is None:
            raise ValueError(f"previous_tag_mode '{mode}' requires target_tag")
        return self

    @property
    def policy(self) -> EnvironmentPolicy:
        """Policy of the selected environment."""
        return self.environments[self.environment]

    @property
    def known_channels(self) -> frozenset[str]:
        return frozenset(p.channel for p in self.environments.values() if p.channel)
