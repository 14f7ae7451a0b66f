"""pyproject.toml version manipulation.

This module reads and updates the version number in a package's
pyproject.toml. Reading goes through tomllib; writing uses a targeted
regex replacement inside the ``[project]`` table so that formatting,
comments and every other key are preserved byte for byte.
"""

from __future__ import annotations

import re
import tomllib
from typing import TYPE_CHECKING

from monobump.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

# The [project] table, up to the next table header or end of file.
_PROJECT_TABLE_RE = re.compile(r"^\[project\][^\S\n]*$.*?(?=^\[|\Z)", re.MULTILINE | re.DOTALL)
_VERSION_LINE_RE = re.compile(r"""^(version\s*=\s*)(["'])[^"']*\2""", re.MULTILINE)


def parse_manifest(content: str, source: str = "pyproject.toml") -> dict:
    """Parse manifest text, wrapping TOML errors in ProjectError."""
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ProjectError(f"Invalid TOML in {source}: {e}") from e


def version_from_manifest(content: str, source: str = "pyproject.toml") -> str:
    """Extract ``[project].version`` from manifest text.

    Raises:
        VersionNotFoundError: If the manifest has no static version.
    """
    version = parse_manifest(content, source).get("project", {}).get("version")
    if not version:
        raise VersionNotFoundError(f"Could not find [project].version in {source}")
    return str(version)


def get_pyproject_version(path: Path) -> str:
    """Get the version from a pyproject.toml file.

    Raises:
        ProjectError: If the file does not exist or is not valid TOML.
        VersionNotFoundError: If version cannot be found.
    """
    if not path.is_file():
        raise ProjectError(f"Manifest not found: {path}")
    return version_from_manifest(path.read_text(encoding="utf-8"), str(path))


def replace_manifest_version(content: str, new_version: str, source: str = "pyproject.toml") -> str:
    """Return ``content`` with the ``[project]`` version set to ``new_version``.

    Only the first ``version = "..."`` line inside the ``[project]`` table
    is touched; the original quote style is kept.

    Raises:
        VersionNotFoundError: If there is no version line to replace.
    """
    replaced = False

    def replace_in_table(match: re.Match[str]) -> str:
        nonlocal replaced
        table, count = _VERSION_LINE_RE.subn(
            lambda m: f"{m.group(1)}{m.group(2)}{new_version}{m.group(2)}",
            match.group(0),
            count=1,
        )
        replaced = count > 0
        return table

    new_content = _PROJECT_TABLE_RE.sub(replace_in_table, content, count=1)
    if not replaced:
        raise VersionNotFoundError(
            f"Could not find version to update in {source}. Expected [project].version."
        )
    return new_content


def update_pyproject_version(path: Path, new_version: str) -> Path:
    """Write ``new_version`` into the pyproject.toml at ``path``.

    Returns:
        The path that was written.

    Raises:
        ProjectError: If the file does not exist.
        VersionNotFoundError: If version cannot be found.
    """
    if not path.is_file():
        raise ProjectError(f"Manifest not found: {path}")

    content = path.read_text(encoding="utf-8")
    new_content = replace_manifest_version(content, new_version, str(path))
    if new_content != content:
        path.write_text(new_content, encoding="utf-8")
    return path
