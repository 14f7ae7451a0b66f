"""CLI entry point for monobump."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from monobump import __version__

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="monobump")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Version and changelog bookkeeping for multi-package repositories."""
    _setup_logging(verbose)


@cli.command()
@click.argument("packages", nargs=-1)
@click.option("--path", type=click.Path(file_okay=False), help="Workspace directory.")
@click.option("--from", "from_ref", help="Start of the range (default: latest release tag).")
@click.option("--to", "to_ref", default="HEAD", show_default=True, help="End of the range.")
@click.option("--execute", is_flag=True, help="Write versions and changelogs.")
def prepare(
    packages: tuple[str, ...],
    path: str | None,
    from_ref: str | None,
    to_ref: str,
    execute: bool,
) -> None:
    """Compute the next version and changelog of each package."""
    from monobump.cli.commands.prepare import run_prepare

    run_prepare(path, packages, from_ref, to_ref, execute, console, err_console)


@cli.command()
@click.option("--path", type=click.Path(file_okay=False), help="Workspace directory.")
@click.option("--execute", is_flag=True, help="Create the release commit and tags.")
@click.option("--push", is_flag=True, help="Push the commit and tags afterwards.")
def apply(path: str | None, execute: bool, push: bool) -> None:
    """Commit prepared versions and tag every package that has an untagged version."""
    from monobump.cli.commands.apply import run_apply

    run_apply(path, execute, push, console, err_console)


@cli.command()
@click.argument("message", required=False)
@click.option(
    "--file",
    "message_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read the commit message from a file (commit-msg hook).",
)
@click.option("--path", type=click.Path(file_okay=False), help="Workspace directory.")
def check(message: str | None, message_file: str | None, path: str | None) -> None:
    """Validate a commit message against the configured conventions."""
    from monobump.cli.commands.check import run_check

    run_check(message, message_file, path, console, err_console)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
