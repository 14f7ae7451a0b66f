"""Locate and load monobump configuration from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from monobump.config.models import MonobumpConfig
from monobump.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_KEY = "monobump"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Walk up from ``start`` until a pyproject.toml is found.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigValidationError: If the file is not valid TOML.
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"pyproject.toml not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_monobump_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.monobump]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> MonobumpConfig:
    """Load and validate configuration for the workspace containing ``path``.

    Args:
        path: Workspace directory or a pyproject.toml file. Defaults to cwd.

    Returns:
        Validated configuration with defaults filled in.
    """
    if path is not None and path.is_file():
        pyproject_path = path
    else:
        pyproject_path = find_pyproject_toml(path)

    raw = extract_monobump_config(load_pyproject_toml(pyproject_path))
    try:
        return MonobumpConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] configuration:\n{e}") from e

