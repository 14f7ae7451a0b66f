"""Per-package release tag series.

Every package owns exactly one tag series: ``v<major>.<minor>.<patch>``
for the workspace root and ``<name>-v<major>.<minor>.<patch>`` for any
other package. A tag either matches that pattern in full or does not
belong to a series at all.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from monobump.core.version import compare_versions, version_key
from monobump.exceptions import GitError, InvalidTagPrefixError, TagError, TagLookupError

if TYPE_CHECKING:
    from datetime import datetime

    from monobump.project.packages import Package, PackageRegistry
    from monobump.vcs.git import GitRepository

logger = logging.getLogger(__name__)

TAG_RE = re.compile(r"(?P<prefix>(?:.+-)?v)(?P<version>\d+\.\d+\.\d+)")


def detect_tag_prefix(tag: str) -> str | None:
    """Series prefix of a release tag.

    Examples:
        ``"v1.0.0"`` → ``"v"``; ``"api-v2.1.3"`` → ``"api-v"``;
        ``"1.0.0"``, ``"invalid"`` and ``""`` → None.
    """
    match = TAG_RE.fullmatch(tag or "")
    return match.group("prefix") if match else None


def version_from_tag(tag: str) -> str | None:
    match = TAG_RE.fullmatch(tag or "")
    return match.group("version") if match else None


@dataclass(frozen=True)
class ReleaseTag:
    """A resolved release tag."""

    tag: str
    version: str
    prefix: str
    sha: str
    date: datetime | None = None


@dataclass(frozen=True)
class TagRange:
    """A release tag and the release before it in the same series."""

    tag: str
    previous_tag: str | None = None


class TagRegistry:
    """Tag lookups for one package's series."""

    detect_tag_prefix = staticmethod(detect_tag_prefix)
    compare_versions = staticmethod(compare_versions)

    def __init__(
        self,
        package: Package,
        repo: GitRepository,
        registry: PackageRegistry | None = None,
    ) -> None:
        self.package = package
        self.repo = repo
        self.registry = registry

    @property
    def prefix(self) -> str:
        return self.package.tag_prefix

    def tag_name(self, version: str) -> str:
        return f"{self.prefix}{version}"

    def is_series_tag(self, tag: str) -> bool:
        return detect_tag_prefix(tag) == self.prefix

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_tags(self) -> list[str]:
        """Tags of this series, highest version first."""
        try:
            candidates = self.repo.list_tags(f"{self.prefix}*")
        except GitError as e:
            logger.warning("Could not list tags for %s: %s", self.package.name, e)
            return []
        tags = [t for t in candidates if self.is_series_tag(t)]
        tags.sort(key=lambda t: version_key(version_from_tag(t) or ""), reverse=True)
        return tags

    def latest_tag(self) -> str | None:
        tags = self.list_tags()
        return tags[0] if tags else None

    def tag_exists(self, tag: str) -> bool:
        return self.repo.tag_exists(tag)

    def released_versions(self) -> set[str]:
        return {v for t in self.list_tags() if (v := version_from_tag(t))}

    def latest_version_in_history(self) -> str | None:
        latest = self.latest_tag()
        return version_from_tag(latest) if latest else None

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def get_base_tag_sha_for_package(self, from_ref: str | None = None) -> str:
        """Reference the next release should be computed from.

        Without ``from_ref`` this is the latest tag of the series or, when
        the package was never released, the commit that introduced it.
        An explicit ``from_ref`` is returned as is when it names a tag and
        resolved to a commit sha otherwise.

        Raises:
            TagError: If ``from_ref`` is not a tag, branch or commit.
        """
        if from_ref is None:
            latest = self.latest_tag()
            if latest:
                return latest
            path = None if self.package.is_root else self.package.git_path
            return self.repo.first_commit(path)

        if self.tag_exists(from_ref):
            return from_ref
        try:
            return self.repo.rev_parse(from_ref)
        except GitError as e:
            raise TagError(
                f"Invalid reference: {from_ref}. Not found as tag, branch, or commit."
            ) from e

    def get_release_tag(self, tag: str) -> ReleaseTag:
        """Resolve a tag of this series.

        Raises:
            TagLookupError: If the tag is not part of the series or does
                not exist.
        """
        version = version_from_tag(tag)
        if version is None or not self.is_series_tag(tag):
            raise TagLookupError(tag, self.package.name, f"not a {self.prefix}<version> tag")
        try:
            sha = self.repo.rev_parse(tag)
        except GitError as e:
            raise TagLookupError(tag, self.package.name, "tag does not exist") from e
        try:
            date = self.repo.tag_date(tag)
        except GitError:
            date = None
        return ReleaseTag(tag=tag, version=version, prefix=self.prefix, sha=sha, date=date)

    def get_package_version_at_tag(self, tag: str) -> str:
        return self.get_release_tag(tag).version

    def version_history(self) -> list[ReleaseTag]:
        """Every resolvable release of the series, newest first."""
        history = []
        for tag in self.list_tags():
            try:
                history.append(self.get_release_tag(tag))
            except TagLookupError as e:
                logger.warning("Skipping tag %s: %s", tag, e)
        return history

    def get_tags_in_range_for_package(self, from_ref: str, to_ref: str) -> list[TagRange]:
        """Release tags whose commit lies in ``(from_ref, to_ref]``.

        Each tag is paired with the next older tag of the series, which
        is None for the package's first release. Tags are returned newest
        first.
        """
        try:
            from_sha = self.repo.rev_parse(from_ref)
            to_sha = self.repo.rev_parse(to_ref)
        except GitError as e:
            logger.warning("Could not resolve range %s..%s: %s", from_ref, to_ref, e)
            return []

        tags = self.list_tags()
        in_range: list[TagRange] = []
        for index, tag in enumerate(tags):
            try:
                sha = self.repo.rev_parse(tag)
                if sha == from_sha:
                    continue
                if self.repo.is_ancestor(from_sha, sha) and self.repo.is_ancestor(sha, to_sha):
                    previous = tags[index + 1] if index + 1 < len(tags) else None
                    in_range.append(TagRange(tag=tag, previous_tag=previous))
            except GitError as e:
                logger.warning("Failed to process tag %s: %s", tag, e)
        return in_range

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_tag_prefix(self, tag: str) -> Package:
        """Find the package owning ``tag`` and make sure it is versioned.

        Raises:
            InvalidTagPrefixError: If the tag matches no versioned package.
        """
        prefix = detect_tag_prefix(tag)
        if prefix is None:
            raise InvalidTagPrefixError(
                f'Invalid tag "{tag}". Expected v<version> (root) or <package>-v<version>'
            )
        if self.registry is None:
            if prefix != self.prefix:
                raise InvalidTagPrefixError(f'Tag "{tag}" does not belong to {self.package.name}')
            return self.package

        owner = self.registry.by_tag_prefix(prefix)
        if owner is None:
            raise InvalidTagPrefixError(f'No package found with tag prefix "{prefix}"')
        if not owner.should_version:
            raise InvalidTagPrefixError(f'Package "{owner.name}" is not versioned')
        return owner
