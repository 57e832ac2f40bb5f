"""Exception hierarchy for release-tagger.

All errors raised on purpose derive from ReleaseTaggerError so the CLI
can tell expected failures apart from unexpected ones.
"""

from __future__ import annotations


class ReleaseTaggerError(Exception):
    """Base class for all release-tagger errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ReleaseTaggerError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """A configuration file was requested but does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# =============================================================================
# Versions and tags
# =============================================================================


class VersionError(ReleaseTaggerError):
    """Base class for version handling errors."""


class InvalidVersionError(VersionError):
    """A string is not a valid semantic version."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Invalid semantic version: {version!r}")


class NoValidTagFoundError(VersionError):
    """No tag in the repository parses as a semantic version."""


# =============================================================================
# Repository host
# =============================================================================


class GitHubError(ReleaseTaggerError):
    """A GitHub API request failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class CommitRangeUnavailableError(GitHubError):
    """The commit comparison between two refs could not be computed."""


class AssetUploadConflictError(GitHubError):
    """A release asset with the same name already exists."""
