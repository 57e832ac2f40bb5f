"""Command line entry point.

Every option can also be supplied through the environment variables a
GitHub Action step receives (``INPUT_*``, ``GITHUB_*``).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from release_tagger import __version__
from release_tagger.cli.commands.release import run_changelog, run_release
from release_tagger.core.tags import ResolutionMode

app = typer.Typer(
    name="release-tagger",
    help="Tag releases and publish GitHub releases from conventional commits.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

PATH_OPTION = typer.Option(None, "--path", "-p", help="Project directory.")
SHA_OPTION = typer.Option(..., "--sha", envvar="GITHUB_SHA", help="Commit to release.")
TOKEN_OPTION = typer.Option(None, "--token", envvar="GITHUB_TOKEN", help="GitHub token.")
ENVIRONMENT_OPTION = typer.Option(
    None, "--environment", "-e", envvar="INPUT_ENVIRONMENT", help="Release environment."
)
TARGET_TAG_OPTION = typer.Option(
    None,
    "--tag",
    envvar="INPUT_AUTOMATIC_RELEASE_TAG",
    help="Release this tag instead of computing the next version.",
)
TITLE_OPTION = typer.Option(None, "--title", envvar="INPUT_TITLE", help="Release title.")
PRERELEASE_OPTION = typer.Option(
    None,
    "--prerelease/--no-prerelease",
    envvar="INPUT_PRERELEASE",
    help="Mark the release as a prerelease (default: from the tag).",
)
FILES_OPTION = typer.Option(
    None, "--file", "-f", envvar="INPUT_FILES", help="Glob of artifacts to upload."
)
PREVIOUS_TAG_MODE_OPTION = typer.Option(
    None,
    "--previous-tag-mode",
    envvar="INPUT_PREVIOUS_TAG_MODE",
    help="How the previous release tag is selected.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # urllib3 logs every connection at DEBUG and retries at WARNING
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"release-tagger {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", envvar="RUNNER_DEBUG", help="Enable debug logging."
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
) -> None:
    """release-tagger command line interface."""
    _configure_logging(verbose)


def _overrides(
    token: str | None,
    environment: str | None,
    target_tag: str | None,
    title: str | None,
    prerelease: bool | None,
    files: list[str] | None,
    previous_tag_mode: ResolutionMode | None,
) -> dict[str, object]:
    return {
        "environment": environment,
        "target_tag": target_tag,
        "title": title,
        "prerelease": prerelease,
        "files": files or None,
        "previous_tag_mode": previous_tag_mode,
        "github": {"token": token},
    }


@app.command()
def release(
    path: str | None = PATH_OPTION,
    sha: str = SHA_OPTION,
    token: str | None = TOKEN_OPTION,
    environment: str | None = ENVIRONMENT_OPTION,
    target_tag: str | None = TARGET_TAG_OPTION,
    title: str | None = TITLE_OPTION,
    prerelease: bool | None = PRERELEASE_OPTION,
    files: list[str] | None = FILES_OPTION,
    previous_tag_mode: ResolutionMode | None = PREVIOUS_TAG_MODE_OPTION,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changing anything."),
) -> None:
    """Tag the commit and publish a GitHub release with a changelog."""
    run_release(
        path=path,
        sha=sha,
        overrides=_overrides(
            token, environment, target_tag, title, prerelease, files, previous_tag_mode
        ),
        execute=not dry_run,
        console=console,
        err_console=err_console,
    )


@app.command()
def changelog(
    path: str | None = PATH_OPTION,
    sha: str = SHA_OPTION,
    token: str | None = TOKEN_OPTION,
    environment: str | None = ENVIRONMENT_OPTION,
    target_tag: str | None = TARGET_TAG_OPTION,
    previous_tag_mode: ResolutionMode | None = PREVIOUS_TAG_MODE_OPTION,
) -> None:
    """Print the changelog for the next release."""
    run_changelog(
        path=path,
        sha=sha,
        overrides=_overrides(token, environment, target_tag, None, None, None, previous_tag_mode),
        console=console,
        err_console=err_console,
    )


if __name__ == "__main__":
    app()
