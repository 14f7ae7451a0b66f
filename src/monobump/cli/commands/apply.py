"""Implementation of the 'apply' command.

After 'prepare' has written new versions, apply commits them and creates
one annotated tag per package whose on-disk version has no tag yet.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from monobump.config import load_config
from monobump.core.version import ZERO_VERSION
from monobump.exceptions import MonobumpError
from monobump.project import PackageRegistry
from monobump.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from monobump.project import Package


def find_untagged_releases(
    registry: PackageRegistry, repo: GitRepository
) -> list[tuple[Package, str]]:
    """Packages whose manifest version has no release tag yet."""
    releases = []
    for package in registry.versioned():
        version = package.read_version()
        if not version or version == ZERO_VERSION:
            continue
        if not repo.tag_exists(package.tag_name(version)):
            releases.append((package, version))
    return releases


def release_commit_message(releases: list[tuple[Package, str]]) -> str:
    tags = ", ".join(package.tag_name(version) for package, version in releases)
    return f"chore(release): {tags}"


def run_apply(
    path: str | None,
    execute: bool,
    push: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the apply command.

    Args:
        path: Optional path to the workspace directory
        execute: Whether to actually commit and tag
        push: Push the release commit and tags
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
        repo = GitRepository(project_path)
        registry = PackageRegistry.discover(project_path, config)
        releases = find_untagged_releases(registry, repo)
    except MonobumpError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not releases:
        console.print("[yellow]Every package version is already tagged. Nothing to do.[/]")
        return

    listing = "\n".join(f"  • [cyan]{p.tag_name(v)}[/]" for p, v in releases)
    if not execute:
        console.print(
            Panel(
                "[bold]Would create the following tags:[/]\n\n" + listing,
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    try:
        if repo.is_dirty():
            repo.add_all()
            sha = repo.commit(release_commit_message(releases))
            console.print(f"  [green]✓[/] Created release commit {sha}")

        for package, version in releases:
            tag = package.tag_name(version)
            repo.create_tag(tag, f"Release {package.name} {version}")
            console.print(f"  [green]✓[/] Created tag {tag}")

        if push:
            repo.push(follow_tags=True)
            console.print("  [green]✓[/] Pushed commit and tags")
    except MonobumpError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    console.print(
        Panel(
            "[green]Release tags created:[/]\n\n" + listing,
            title="[green]Apply Complete[/]",
            border_style="green",
        )
    )
