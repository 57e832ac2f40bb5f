"""Configuration management for release-tagger."""

from __future__ import annotations

from release_tagger.config.loader import load_config
from release_tagger.config.models import (
    CommitsConfig,
    EnvironmentPolicy,
    GitHubConfig,
    ReleaseTaggerConfig,
    VersionConfig,
)

__all__ = [
    "CommitsConfig",
    "EnvironmentPolicy",
    "GitHubConfig",
    "ReleaseTaggerConfig",
    "VersionConfig",
    "load_config",
]
