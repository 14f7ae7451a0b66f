"""Configuration models for monobump.

All settings live under ``[tool.monobump]`` in the workspace root
pyproject.toml. Every field has a default so an empty section (or no
section at all) yields a working configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEPENDENCY_SCOPES = ["deps", "dependencies", "dep", "renovate", "dependabot"]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CommitsConfig(_Section):
    """How commits map onto version bumps.

    Attributes:
        types_major: Commit types that always trigger a major bump.
        types_minor: Commit types that add features (minor bump).
        types_patch: Commit types eligible for a patch bump.
        breaking_pattern: Regex searched in the commit body to flag
            a breaking change.
        dependency_scopes: Scopes that mark a commit as a dependency update.
        dependency_patch: Whether dependency commits alone warrant a patch.
    """

    types_major: list[str] = Field(default_factory=list)
    types_minor: list[str] = Field(default_factory=lambda: ["feat"])
    types_patch: list[str] = Field(default_factory=lambda: ["fix", "perf"])
    breaking_pattern: str = r"BREAKING[ -]CHANGE:"
    dependency_scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_DEPENDENCY_SCOPES))
    dependency_patch: bool = True


class ValidationConfig(_Section):
    """Rules used by ``monobump check`` to validate commit messages."""

    types: list[str] = Field(
        default_factory=lambda: [
            "feat",
            "fix",
            "perf",
            "refactor",
            "docs",
            "test",
            "build",
            "ci",
            "chore",
            "style",
            "revert",
        ]
    )
    breaking_types: list[str] = Field(default_factory=lambda: ["feat", "fix", "refactor", "perf"])
    scopes: list[str] = Field(default_factory=list)
    description_min_length: int | None = 3
    description_max_length: int | None = 100
    no_trailing_period: bool = True
    no_type_prefix: bool = True


class ChangelogConfig(_Section):
    """Changelog rendering options."""

    filename: str = "CHANGELOG.md"
    version_mode: bool = True
    unreleased_label: str = "[Unreleased]"
    repo_url: str | None = None


class PackagesConfig(_Section):
    """Which workspace directories hold versioned packages.

    The workspace root is always a package (named ``root``); every
    directory matching one of ``paths`` that contains a pyproject.toml
    is added alongside it.
    """

    paths: list[str] = Field(default_factory=lambda: ["packages/*"])
    include_root: bool = True
    root_name: str = "root"
    isolate_root: bool = False
    """Leave changes under member package paths out of the root history."""


class MonobumpConfig(_Section):
    """Top level monobump configuration."""

    allow_dirty: bool = False
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
