"""Core business logic for monobump.

This module contains the release bookkeeping engine:
- Version parsing, comparison and bump decisions
- Conventional commit classification
- Per-package tag series and history ranges
- Changelog aggregation, rendering and merging
"""

from __future__ import annotations

from monobump.core.changelog import ChangelogAggregator, order_section_commits
from monobump.core.commits import (
    ParsedCommit,
    PRCategory,
    calculate_bump,
    classify_commit,
    format_commit_subject,
    group_commits_by_type,
    parse_commits,
    validate_commit_message,
)
from monobump.core.document import ChangelogDocument, ChangelogSection
from monobump.core.history import RangeResolver
from monobump.core.tags import ReleaseTag, TagRange, TagRegistry, detect_tag_prefix
from monobump.core.template import MarkdownChangelogTemplate, TemplateEngine
from monobump.core.version import BumpType, Version, compare_versions, parse_version
from monobump.core.versioning import VersionDecision, calculate_version_data

__all__ = [
    # Version
    "BumpType",
    # Changelog
    "ChangelogAggregator",
    "ChangelogDocument",
    "ChangelogSection",
    "MarkdownChangelogTemplate",
    # Commits
    "PRCategory",
    "ParsedCommit",
    # History
    "RangeResolver",
    # Tags
    "ReleaseTag",
    "TagRange",
    "TagRegistry",
    "TemplateEngine",
    "Version",
    "VersionDecision",
    "calculate_bump",
    "calculate_version_data",
    "classify_commit",
    "compare_versions",
    "detect_tag_prefix",
    "format_commit_subject",
    "group_commits_by_type",
    "order_section_commits",
    "parse_commits",
    "parse_version",
    "validate_commit_message",
]
