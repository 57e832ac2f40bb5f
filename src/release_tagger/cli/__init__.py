"""Command line interface for release-tagger."""
