"""Implementation of the 'prepare' command.

The prepare command computes the next version of each package from its
commits since the last release tag, then (with --execute) writes the new
version into the package manifest and merges the new changelog sections
into the package changelog.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from monobump.config import load_config
from monobump.core.changelog import ChangelogAggregator
from monobump.exceptions import MonobumpError
from monobump.project import PackageRegistry
from monobump.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from monobump.config.models import MonobumpConfig
    from monobump.project import Package


def run_prepare(
    path: str | None,
    package_names: tuple[str, ...],
    from_ref: str | None,
    to_ref: str,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the prepare command.

    Args:
        path: Optional path to the workspace directory
        package_names: Packages to prepare; all versioned packages when empty
        from_ref: Start of the range; defaults to each package's latest tag
        to_ref: End of the range
        execute: Whether to actually write changes
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        config = load_config(project_path)
    except MonobumpError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    # Initialize git repository
    try:
        repo = GitRepository(project_path)
    except MonobumpError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if execute and not config.allow_dirty and repo.is_dirty():
        err_console.print(
            "[red]Error:[/] Repository has uncommitted changes.\n"
            "Commit or stash them, or use [cyan]allow_dirty = true[/] in config."
        )
        raise SystemExit(1)

    try:
        registry = PackageRegistry.discover(project_path, config)
        if package_names:
            packages = [registry.get(name) for name in package_names]
        else:
            packages = registry.versioned()
    except MonobumpError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not packages:
        console.print("[yellow]No versioned packages found. Nothing to do.[/]")
        return

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(f"\n{mode_str} - preparing {len(packages)} package(s)\n")

    prepared: list[tuple[Package, str]] = []
    for package in packages:
        try:
            target = _prepare_package(
                package, repo, registry, config, from_ref, to_ref, execute, console
            )
        except MonobumpError as e:
            err_console.print(f"[red]Error:[/] {package.name}: {e}")
            raise SystemExit(1) from e
        if target:
            prepared.append((package, target))

    if not prepared:
        console.print("[yellow]No releasable changes found. Nothing to do.[/]")
        return

    tags = "\n".join(f"  • [cyan]{p.tag_name(v)}[/]" for p, v in prepared)
    if not execute:
        console.print(
            Panel(
                "[bold]Would prepare the following releases:[/]\n\n"
                f"{tags}\n\n"
                "Version and changelog files would be updated for each package.",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    console.print(
        Panel(
            "[green]Prepared releases:[/]\n\n"
            f"{tags}\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            "  2. Release: [cyan]monobump apply --execute[/]",
            title="[green]Prepare Complete[/]",
            border_style="green",
        )
    )


def _prepare_package(
    package: Package,
    repo: GitRepository,
    registry: PackageRegistry,
    config: MonobumpConfig,
    from_ref: str | None,
    to_ref: str,
    execute: bool,
    console: Console,
) -> str | None:
    """Prepare one package and return its target version, if it needs a release."""
    aggregator = ChangelogAggregator.for_package(package, repo, registry, config)
    base = aggregator.tags.get_base_tag_sha_for_package(from_ref)
    aggregator.calculate_range(base, to_ref)
    decision = aggregator.get_version_data()

    if not decision.should_bump:
        console.print(f"  [dim]{package.name}:[/] {decision.reason}")
        return None

    console.print(
        f"  [bold]{package.name}:[/] [cyan]{decision.current_version}[/] → "
        f"[green]{decision.target_version}[/] ({decision.bump_type}, "
        f"{aggregator.get_commit_count()} commit(s))"
    )
    if not execute:
        return decision.target_version

    content = aggregator.generate_merged_changelog()
    package.write_version(decision.target_version)
    console.print(f"    [green]✓[/] Updated version in {package.manifest_git_path}")
    package.write_changelog(content)
    console.print(f"    [green]✓[/] Updated {package.path / package.changelog_filename}")
    return decision.target_version
