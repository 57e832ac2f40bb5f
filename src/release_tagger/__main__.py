"""Allow running as ``python -m release_tagger``."""

from __future__ import annotations

from release_tagger.cli.app import app

app()
