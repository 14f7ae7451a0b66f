"""Semantic version parsing, comparison and bumping.

Versions are plain ``major.minor.patch`` triples. Comparison is lenient:
missing trailing components count as zero (``"1.0" == "1.0.0"``) and
components that are not integers also count as zero, so any two strings
can be ordered. Bumping is strict and rejects anything it cannot parse.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from monobump.exceptions import InvalidVersionError

ZERO_VERSION = "0.0.0"
FIRST_VERSION = "0.1.0"

_STRICT_VERSION_RE = re.compile(r"^\d+(\.\d+){0,2}$")


class BumpType(StrEnum):
    """Severity of a version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"
    SYNCED = "synced"

    @property
    def is_release(self) -> bool:
        """Whether this bump type changes the version."""
        return self in (BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH)


def _component(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def version_key(version: str) -> tuple[int, int, int]:
    """Lenient ``(major, minor, patch)`` key for ordering version strings."""
    parts = [_component(p) for p in version.strip().split(".")[:3]] if version else []
    parts.extend([0] * (3 - len(parts)))
    return parts[0], parts[1], parts[2]


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        -1 if ``a < b``, 0 if equal, 1 if ``a > b``.
    """
    key_a, key_b = version_key(a), version_key(b)
    return (key_a > key_b) - (key_a < key_b)


@dataclass(frozen=True, order=True)
class Version:
    """A ``major.minor.patch`` version."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string, padding missing components with zero.

        Raises:
            InvalidVersionError: If the string is not 1-3 dot separated integers.
        """
        text = value.strip().removeprefix("v")
        if not _STRICT_VERSION_RE.match(text):
            raise InvalidVersionError(f"Invalid version: {value!r}")
        major, minor, patch = version_key(text)
        return cls(major, minor, patch)

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for ``bump_type``.

        Major resets minor and patch; minor resets patch. ``none`` and
        ``synced`` return the version unchanged.
        """
        if bump_type is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type is BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(value: str) -> Version:
    return Version.parse(value)


def bump_version(version: str, bump_type: BumpType) -> str:
    """String convenience wrapper around Version.bump."""
    return str(Version.parse(version).bump(bump_type))
