"""Implementation of the 'release' and 'changelog' commands.

The release command tags the current commit, publishes a GitHub
release with the generated changelog and uploads artifacts.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.panel import Panel

from release_tagger.config import load_config
from release_tagger.core.release import ReleaseRunner
from release_tagger.vcs import GitHubClient

if TYPE_CHECKING:
    from rich.console import Console

    from release_tagger.config.models import ReleaseTaggerConfig
    from release_tagger.core.release import ReleasePlan, ReleaseResult


def _load(
    path: str | None,
    overrides: dict[str, Any],
    err_console: Console,
) -> tuple[Path, ReleaseTaggerConfig]:
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path, overrides)
    except Exception as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    if not config.github.token:
        err_console.print(
            "[red]Error:[/] No repo token specified. "
            "Please set the [cyan]GITHUB_TOKEN[/] environment variable."
        )
        raise SystemExit(1)

    return project_path, config


def _plan(runner: ReleaseRunner, sha: str, err_console: Console) -> ReleasePlan:
    try:
        return runner.plan(sha)
    except Exception as e:
        err_console.print(f"[red]Error planning release:[/] {e}")
        raise SystemExit(1) from e


def run_release(
    path: str | None,
    sha: str,
    overrides: dict[str, Any],
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to the project directory
        sha: Commit to tag
        overrides: Configuration values from the command line or action inputs
        execute: Whether to actually create the tag and release
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = _load(path, overrides, err_console)

    try:
        client = GitHubClient.from_config(config.github)
    except Exception as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    with client:
        runner = ReleaseRunner(client, config, root=project_path)
        plan = _plan(runner, sha, err_console)

        if not plan.has_release:
            console.print(
                "[yellow]No releasable changes found since "
                f"{plan.previous_tag or 'the first commit'}. Nothing to do.[/]"
            )
            return

        mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
        if plan.is_first_release:
            console.print(f"\n{mode_str} - First release! Tagging [green]{plan.tag}[/]\n")
        else:
            console.print(
                f"\n{mode_str} - Releasing [green]{plan.tag}[/] "
                f"(previous [cyan]{plan.previous_tag}[/], bump [cyan]{plan.bump}[/])\n"
            )

        if not execute:
            files = ", ".join(config.files) or "none"
            console.print(
                Panel(
                    "[bold]Would make the following changes:[/]\n\n"
                    f"  • Create or move tag [cyan]{plan.tag}[/] to {plan.head_sha}\n"
                    f"  • Replace release [cyan]{plan.release_name}[/]"
                    f"{' (prerelease)' if plan.prerelease else ''}\n"
                    f"  • Upload artifacts: {files}",
                    title="[yellow]Dry Run Preview[/]",
                    border_style="yellow",
                )
            )
            console.print(plan.changelog or "[dim](empty changelog)[/]", markup=False)
            console.print("\n[dim]Run without [cyan]--dry-run[/] to apply these changes.[/]")
            return

        try:
            result = runner.publish(plan)
        except Exception as e:
            err_console.print(f"[red]Error publishing release:[/] {e}")
            raise SystemExit(1) from e

    _report(result, console, err_console)
    _emit_outputs(result)


def _report(result: ReleaseResult, console: Console, err_console: Console) -> None:
    for name in result.assets.uploaded:
        console.print(f"  [green]✓[/] Uploaded {name}")
    for path, error in result.assets.failed.items():
        err_console.print(f"  [yellow]![/] Could not upload {path}: {error}")

    release = result.release
    url = release.html_url if release else ""
    console.print(
        Panel(
            f"[green]Released {result.plan.tag}![/]\n\n{url}",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )


def _emit_outputs(result: ReleaseResult) -> None:
    """Write step outputs for later workflow steps when running in Actions."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path or result.release is None:
        return
    with Path(output_path).open("a", encoding="utf-8") as fh:
        fh.write(f"tag={result.plan.tag}\n")
        fh.write(f"previous_tag={result.plan.previous_tag or ''}\n")
        fh.write(f"release_id={result.release.id}\n")
        fh.write(f"upload_url={result.release.upload_url}\n")


def run_changelog(
    path: str | None,
    sha: str,
    overrides: dict[str, Any],
    console: Console,
    err_console: Console,
) -> None:
    """Print the changelog and next tag without changing anything."""
    project_path, config = _load(path, overrides, err_console)

    try:
        client = GitHubClient.from_config(config.github)
    except Exception as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    with client:
        plan = _plan(ReleaseRunner(client, config, root=project_path), sha, err_console)

    err_console.print(f"[dim]Next tag:[/] {plan.tag or '(none)'}")
    console.print(plan.changelog, markup=False, highlight=False)
