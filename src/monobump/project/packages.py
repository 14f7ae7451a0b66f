"""Workspace package discovery.

A workspace is a directory whose pyproject.toml is the ``root`` package,
plus every directory matched by ``[tool.monobump.packages].paths`` that
contains its own pyproject.toml. Each package owns one tag series:
``v1.2.3`` for the root and ``<name>-v1.2.3`` for everything else.

The PackageRegistry is built once per invocation and handed to whatever
needs it; nothing in the library reaches for a global package list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from monobump.config.models import MonobumpConfig
from monobump.exceptions import (
    ChangelogError,
    PackageNotFoundError,
    ProjectError,
    VersionNotFoundError,
)
from monobump.project.pyproject import (
    get_pyproject_version,
    parse_manifest,
    update_pyproject_version,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

ROOT_TAG_PREFIX = "v"


@dataclass(frozen=True)
class Package:
    """One versioned unit of the workspace.

    Attributes:
        name: Registry name (``root`` for the workspace root, otherwise
            the ``[project].name`` of the package).
        path: Package directory relative to the workspace root.
        workspace: Absolute workspace root.
        changelog_filename: Changelog file name inside the package directory.
    """

    name: str
    path: PurePosixPath
    workspace: Path
    is_root: bool = False
    changelog_filename: str = "CHANGELOG.md"

    @property
    def directory(self) -> Path:
        return self.workspace / self.path

    @property
    def manifest_path(self) -> Path:
        return self.directory / "pyproject.toml"

    @property
    def manifest_git_path(self) -> str:
        """Manifest path as git expects it in ``<ref>:<path>``."""
        return str(self.path / "pyproject.toml")

    @property
    def changelog_path(self) -> Path:
        return self.directory / self.changelog_filename

    @property
    def git_path(self) -> str:
        return str(self.path)

    @property
    def tag_prefix(self) -> str:
        return ROOT_TAG_PREFIX if self.is_root else f"{self.name}-{ROOT_TAG_PREFIX}"

    def tag_name(self, version: str) -> str:
        return f"{self.tag_prefix}{version}"

    def read_version(self) -> str | None:
        """Version currently on disk, or None when the manifest has none."""
        try:
            return get_pyproject_version(self.manifest_path)
        except VersionNotFoundError:
            return None

    def write_version(self, version: str) -> None:
        update_pyproject_version(self.manifest_path, version)

    @property
    def should_version(self) -> bool:
        return self.read_version() is not None

    def read_changelog(self) -> str:
        """Existing changelog text; empty when the file does not exist yet."""
        try:
            return self.changelog_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise ChangelogError(f"Could not read {self.changelog_path}: {e}") from e

    def write_changelog(self, content: str) -> None:
        try:
            self.changelog_path.parent.mkdir(parents=True, exist_ok=True)
            self.changelog_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ChangelogError(f"Could not write {self.changelog_path}: {e}") from e


class PackageRegistry:
    """All packages of a workspace, in discovery order (root first)."""

    def __init__(self, packages: list[Package]) -> None:
        self._packages: dict[str, Package] = {}
        for package in packages:
            if package.name in self._packages:
                other = self._packages[package.name]
                raise ProjectError(
                    f"Duplicate package name {package.name!r}: "
                    f"{other.git_path} and {package.git_path}"
                )
            self._packages[package.name] = package

    @classmethod
    def discover(cls, workspace: Path, config: MonobumpConfig | None = None) -> PackageRegistry:
        """Scan ``workspace`` according to the packages configuration."""
        config = config or MonobumpConfig()
        workspace = workspace.resolve()
        changelog = config.changelog.filename
        packages: list[Package] = []

        if config.packages.include_root and (workspace / "pyproject.toml").is_file():
            packages.append(
                Package(
                    name=config.packages.root_name,
                    path=PurePosixPath("."),
                    workspace=workspace,
                    is_root=True,
                    changelog_filename=changelog,
                )
            )

        for pattern in config.packages.paths:
            for directory in sorted(workspace.glob(pattern)):
                manifest = directory / "pyproject.toml"
                if not manifest.is_file():
                    continue
                data = parse_manifest(manifest.read_text(encoding="utf-8"), str(manifest))
                name = data.get("project", {}).get("name") or directory.name
                packages.append(
                    Package(
                        name=str(name),
                        path=PurePosixPath(directory.relative_to(workspace).as_posix()),
                        workspace=workspace,
                        changelog_filename=changelog,
                    )
                )

        logger.debug("Discovered packages: %s", ", ".join(p.name for p in packages))
        return cls(packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    @property
    def names(self) -> list[str]:
        return list(self._packages)

    def get(self, name: str) -> Package:
        try:
            return self._packages[name]
        except KeyError:
            raise PackageNotFoundError(
                f"Unknown package {name!r}. Known packages: {', '.join(self.names) or 'none'}"
            ) from None

    def versioned(self) -> list[Package]:
        return [p for p in self if p.should_version]

    def by_tag_prefix(self, prefix: str) -> Package | None:
        return next((p for p in self if p.tag_prefix == prefix), None)

    def member_paths(self, exclude: Package | None = None) -> list[str]:
        """Git paths of every non-root package, optionally minus one."""
        return [p.git_path for p in self if not p.is_root and p is not exclude]
