"""Changelog aggregation.

ChangelogAggregator slices a package's history at its release tags,
computes the pending version bump and collects the commits of every
release into a ChangelogDocument. Rendering and parsing are delegated
to a template engine (see monobump.core.template).

Within a section, pull request merges are listed together with the
commits that were not merged through one of them; a commit that is part
of a merged pull request is represented by that merge only. Entries are
ordered newest first by author date, undated entries last.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from monobump.config.models import MonobumpConfig
from monobump.core.document import ChangelogDocument, ChangelogSection
from monobump.core.history import RangeResolver
from monobump.core.tags import TagRegistry
from monobump.core.template import MarkdownChangelogTemplate
from monobump.core.version import ZERO_VERSION
from monobump.core.versioning import VersionDecision, calculate_version_data
from monobump.exceptions import ChangelogNotCalculatedError, TemplateNotSetError, UsageError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from monobump.core.commits import ParsedCommit
    from monobump.core.template import TemplateEngine
    from monobump.project.packages import Package, PackageRegistry
    from monobump.vcs.git import GitRepository

logger = logging.getLogger(__name__)


def sort_by_date(commits: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    """Newest first; commits without a date keep their order at the end."""
    commits = list(commits)
    dated = [c for c in commits if c.date is not None]
    undated = [c for c in commits if c.date is None]
    dated.sort(key=lambda c: c.date.timestamp(), reverse=True)
    return dated + undated


def order_section_commits(commits: Iterable[ParsedCommit]) -> list[ParsedCommit]:
    """Deduplicate and order the commits of one changelog section.

    Merge commits are kept. Other commits are kept only if no merge in
    the same list already subsumes them (the orphans). The union is then
    sorted by date, newest first.
    """
    commits = list(commits)
    merges = [c for c in commits if c.is_merge]
    subsumed: set[str] = set()
    for merge in merges:
        subsumed.update(merge.subsumed)
    orphans = [c for c in commits if not c.is_merge and c.sha not in subsumed]
    return sort_by_date([*merges, *orphans])


class ChangelogAggregator:
    """Build, render and merge the changelog of one package.

    Args:
        package: The package whose history is aggregated.
        template: Engine used to render and parse changelog text.
        tag_registry: Tag lookups for the package's series.
        resolver: History queries.
        registry: All workspace packages, used to isolate root history.
        config: Project configuration.
        version_mode: Label the pending section with the target version
            (default) or with the unreleased marker.
    """

    def __init__(
        self,
        package: Package,
        template: TemplateEngine | None,
        *,
        tag_registry: TagRegistry,
        resolver: RangeResolver,
        registry: PackageRegistry | None = None,
        config: MonobumpConfig | None = None,
        version_mode: bool | None = None,
    ) -> None:
        self.package = package
        self.template = template
        self.tags = tag_registry
        self.resolver = resolver
        self.registry = registry
        self.config = config or MonobumpConfig()
        self.version_mode = (
            self.config.changelog.version_mode if version_mode is None else version_mode
        )

        self._document: ChangelogDocument | None = None
        self._decision: VersionDecision | None = None

    @classmethod
    def for_package(
        cls,
        package: Package,
        repo: GitRepository,
        registry: PackageRegistry,
        config: MonobumpConfig,
        template: TemplateEngine | None = None,
    ) -> ChangelogAggregator:
        """Wire an aggregator with the default collaborators."""
        if template is None:
            template = MarkdownChangelogTemplate(
                package.name,
                package.tag_prefix,
                repo_url=config.changelog.repo_url,
            )
        return cls(
            package,
            template,
            tag_registry=TagRegistry(package, repo, registry),
            resolver=RangeResolver(repo, config.commits),
            registry=registry,
            config=config,
        )

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def calculate_range(self, from_ref: str, to_ref: str = "HEAD") -> None:
        """Compute the version decision and the document for a range.

        Raises:
            UsageError: If either end of the range is empty.
            VersionIntegrityError: If the manifest is ahead of the tags.
            TagLookupError: If a release tag in range cannot be resolved.
        """
        if not from_ref or not to_ref:
            raise UsageError(f"Range not set: from={from_ref!r}, to={to_ref!r}")

        commits = self._commits(from_ref, to_ref)
        tag_version = self._tag_version(from_ref)
        disk_version = self.package.read_version() or ZERO_VERSION

        decision = calculate_version_data(
            disk_version,
            tag_version,
            commits,
            config=self.config.commits,
            released_versions=self.tags.released_versions(),
        )
        logger.debug("%s: %s", self.package.name, decision.reason)

        tag_ranges = self.tags.get_tags_in_range_for_package(from_ref, to_ref)
        document = ChangelogDocument()

        if decision.should_bump:
            if tag_ranges:
                pending = self._commits(tag_ranges[0].tag, to_ref)
            else:
                pending = commits
            if pending:
                label = (
                    decision.target_version
                    if self.version_mode
                    else self.config.changelog.unreleased_label
                )
                document.set(ChangelogSection(label, order_section_commits(pending)))

        for tag_range in tag_ranges:
            release = self.tags.get_release_tag(tag_range.tag)
            released = self._commits(tag_range.previous_tag, tag_range.tag)
            document.set(
                ChangelogSection(
                    release.version,
                    order_section_commits(released),
                    date=release.date.date() if release.date else None,
                )
            )

        self._decision = decision
        self._document = document

    def _tag_version(self, from_ref: str) -> str:
        if self.tags.is_series_tag(from_ref):
            return self.tags.get_package_version_at_tag(from_ref)
        latest = self.tags.latest_version_in_history()
        if latest:
            return latest
        return self.package.read_version() or ZERO_VERSION

    def _commits(self, from_ref: str | None, to_ref: str) -> list[ParsedCommit]:
        include: list[str] = []
        exclude: list[str] = []
        if not self.package.is_root:
            include = [self.package.git_path]
        elif self.registry is not None and self.config.packages.isolate_root:
            exclude = self.registry.member_paths()
        return self.resolver.get_commits_in_range(
            from_ref, to_ref, include_paths=include, exclude_paths=exclude
        )

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    @property
    def document(self) -> ChangelogDocument:
        if self._document is None:
            raise ChangelogNotCalculatedError("Changelog data")
        return self._document

    def get_version_data(self) -> VersionDecision:
        if self._decision is None:
            raise ChangelogNotCalculatedError("Version data")
        return self._decision

    def get_commit_count(self) -> int:
        """Entries in the document, counting each merged PR commit too."""
        return sum(1 + len(c.pr_commits) for section in self.document for c in section.commits)

    def _require_template(self) -> TemplateEngine:
        if self.template is None:
            raise TemplateNotSetError()
        return self.template

    def generate_changelog(self) -> str:
        """Render only the freshly calculated sections."""
        document = self.document
        self.get_version_data()
        return self._require_template().generate_content(document)

    def generate_merged_changelog(self, existing: str | None = None) -> str:
        """Render the persisted changelog with the new sections merged in.

        Args:
            existing: Current changelog text; read from the package's
                changelog file when omitted.
        """
        document = self.document
        self.get_version_data()
        template = self._require_template()

        if existing is None:
            existing = self.package.read_changelog()
        previous = template.parse_versions(existing)
        return template.generate_content(previous.merged(document))
