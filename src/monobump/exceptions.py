"""Exception hierarchy for monobump.

Every error raised by the library derives from MonobumpError so the CLI
can report it uniformly. Errors that indicate corrupted release state
(version integrity, unresolvable tags) are never caught internally.
"""

from __future__ import annotations


class MonobumpError(Exception):
    """Base class for all monobump errors."""


# =============================================================================
# Usage errors
# =============================================================================


class UsageError(MonobumpError):
    """An API was called without its preconditions being met."""


class ChangelogNotCalculatedError(UsageError):
    """Rendering was requested before calculate_range() ran."""

    def __init__(self, what: str = "Changelog data") -> None:
        super().__init__(f"{what} not determined. Call calculate_range() first.")


class TemplateNotSetError(UsageError):
    """No template engine was supplied to the changelog aggregator."""

    def __init__(self) -> None:
        super().__init__("Template engine not set.")


# =============================================================================
# Version errors
# =============================================================================


class VersionError(MonobumpError):
    """Base class for version related errors."""


class InvalidVersionError(VersionError):
    """A version string could not be interpreted."""


class VersionIntegrityError(VersionError):
    """The on-disk version is ahead of the version implied by the tags."""

    def __init__(self, disk_version: str, tag_version: str) -> None:
        self.disk_version = disk_version
        self.tag_version = tag_version
        super().__init__(
            f"Package version on disk ({disk_version}) is higher than current git tag "
            f"version ({tag_version}). Revert the manifest to version {tag_version} "
            "before preparing a new version."
        )


# =============================================================================
# Tag errors
# =============================================================================


class TagError(MonobumpError):
    """Base class for tag related errors."""


class TagLookupError(TagError):
    """Version data was requested for a tag that cannot be resolved."""

    def __init__(self, tag: str, package: str, detail: str | None = None) -> None:
        self.tag = tag
        self.package = package
        message = f"Could not get version for tag {tag} in package {package}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidTagPrefixError(TagError):
    """A tag does not belong to any known package series."""


# =============================================================================
# Git errors
# =============================================================================


class GitError(MonobumpError):
    """A git command failed."""

    def __init__(
        self, message: str, stderr: str | None = None, returncode: int | None = None
    ) -> None:
        self.stderr = stderr
        self.returncode = returncode
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigError(MonobumpError):
    """Base class for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigError):
    """The configuration failed validation."""


# =============================================================================
# Project errors
# =============================================================================


class ProjectError(MonobumpError):
    """A package manifest could not be read or written."""


class VersionNotFoundError(ProjectError):
    """A manifest carries no version field."""


class PackageNotFoundError(ProjectError):
    """A package name is not part of the workspace."""


class ChangelogError(MonobumpError):
    """The changelog file could not be read or written."""
