"""Configuration loading.

The optional ``[tool.release-tagger]`` table in pyproject.toml is read
first; values supplied on the command line or through action inputs
are layered on top.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_tagger.config.models import ReleaseTaggerConfig
from release_tagger.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_NAME = "release-tagger"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or one of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_tagger_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the [tool.release-tagger] table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_NAME, {}))


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def github_repository_from_env() -> dict[str, str]:
    """Owner and repo from GITHUB_REPOSITORY (``owner/repo``), if set."""
    repository = os.environ.get("GITHUB_REPOSITORY", "")
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        return {}
    return {"owner": owner, "repo": repo}


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReleaseTaggerConfig:
    """Load configuration for the project at ``path``.

    A missing pyproject.toml is not an error: the action also runs in
    repositories that are not Python projects.

    Args:
        path: Project directory, defaults to the current directory
        overrides: Values taking precedence over the file; None values
            are ignored so unset inputs keep the file's value

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If the merged configuration is invalid
    """
    try:
        data = extract_release_tagger_config(load_pyproject_toml(find_pyproject_toml(path)))
    except ConfigNotFoundError:
        data = {}

    data = _merge({"github": github_repository_from_env()}, data)
    data = _merge(data, overrides or {})

    try:
        return ReleaseTaggerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(str(e)) from e
