"""Version bump decisions.

calculate_version_data() compares the version on disk with the version
implied by the latest release tag and, from the commits since that tag,
decides whether a new release is due and what its version is.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass

from monobump.config.models import CommitsConfig
from monobump.core.commits import ParsedCommit, calculate_bump
from monobump.core.version import (
    FIRST_VERSION,
    ZERO_VERSION,
    BumpType,
    bump_version,
    compare_versions,
)
from monobump.exceptions import VersionIntegrityError


@dataclass(frozen=True)
class VersionDecision:
    """Outcome of a version calculation."""

    current_version: str
    bump_type: BumpType
    should_bump: bool
    target_version: str
    reason: str


def calculate_version_data(
    disk_version: str,
    tag_version: str,
    commits: Sequence[ParsedCommit],
    *,
    config: CommitsConfig | None = None,
    released_versions: Collection[str] = (),
) -> VersionDecision:
    """Decide whether and how to bump a package.

    Args:
        disk_version: Version currently written in the manifest.
        tag_version: Version of the latest release tag (``0.0.0`` if none).
        commits: Commits since that release.
        config: Which commit types map to which bump.
        released_versions: Versions that already have a tag.

    Raises:
        VersionIntegrityError: If the manifest is ahead of the tags.
    """
    if compare_versions(disk_version, tag_version) > 0:
        raise VersionIntegrityError(disk_version, tag_version)

    if compare_versions(tag_version, ZERO_VERSION) == 0:
        return VersionDecision(
            current_version=tag_version,
            bump_type=BumpType.MINOR,
            should_bump=True,
            target_version=FIRST_VERSION,
            reason="First version bump from 0.0.0",
        )

    if not commits:
        return VersionDecision(
            current_version=tag_version,
            bump_type=BumpType.NONE,
            should_bump=False,
            target_version=tag_version,
            reason="No commits in range",
        )

    bump_type = calculate_bump(commits, config)
    if bump_type is BumpType.NONE:
        return VersionDecision(
            current_version=tag_version,
            bump_type=BumpType.NONE,
            should_bump=False,
            target_version=tag_version,
            reason="No version bump needed",
        )

    target = bump_version(tag_version, bump_type)
    if target in released_versions:
        return VersionDecision(
            current_version=tag_version,
            bump_type=BumpType.NONE,
            should_bump=False,
            target_version=tag_version,
            reason=f"Version {target} already exists in git tags",
        )

    return VersionDecision(
        current_version=disk_version,
        bump_type=bump_type,
        should_bump=True,
        target_version=target,
        reason=f"New {bump_type} version bump to {target}",
    )
