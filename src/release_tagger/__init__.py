"""release-tagger: tag, changelog and GitHub release automation."""

from __future__ import annotations

__version__ = "0.1.0"
