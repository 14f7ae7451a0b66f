"""Implementation of the 'check' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from monobump.config import load_config
from monobump.config.models import ValidationConfig
from monobump.core.commits import validate_commit_message
from monobump.exceptions import ConfigNotFoundError, MonobumpError

if TYPE_CHECKING:
    from rich.console import Console


def _strip_comments(message: str) -> str:
    # git leaves "#" lines from the commit template in the message file.
    return "\n".join(line for line in message.splitlines() if not line.startswith("#"))


def run_check(
    message: str | None,
    message_file: str | None,
    path: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the check command.

    Args:
        message: Commit message given on the command line
        message_file: File holding the commit message
        path: Optional path to the workspace directory
        console: Console for standard output
        err_console: Console for error output
    """
    if message_file:
        message = _strip_comments(Path(message_file).read_text(encoding="utf-8"))
    if message is None:
        err_console.print("[red]Error:[/] Provide a commit message or --file.")
        raise SystemExit(1)

    try:
        validation = load_config(Path(path) if path else None).validation
    except ConfigNotFoundError:
        validation = ValidationConfig()
    except MonobumpError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    errors = validate_commit_message(message, validation)
    if errors:
        err_console.print("[red]Invalid commit message:[/]")
        for error in errors:
            err_console.print(f"  • {error}")
        raise SystemExit(1)

    console.print("[green]✓[/] Commit message is valid")
