"""Changelog templates.

A template engine turns a ChangelogDocument into text and back. The
default MarkdownChangelogTemplate writes one ``## [version] - date``
section per release, grouping entries under emoji headings::

    ## [1.2.0] - 2024-05-01

    ### 🚀 Feature Releases

    - Merge pull request #12 from acme/feat-login (`1a2b3c4`)
      - feat(auth): add login endpoint (`5d6e7f8`)

    ### 🐛 Bug Fixes

    - fix(api): handle empty payloads (`9a8b7c6`)

Each entry carries its normalised conventional subject and commit hash,
so parse_versions() can rebuild every field the renderer uses and
rendering a parsed document reproduces the original text.
"""

from __future__ import annotations

import dataclasses
import re
from datetime import date
from typing import TYPE_CHECKING, Protocol

from monobump.core.commits import (
    ParsedCommit,
    PRCategory,
    classify_commit,
    format_commit_subject,
)
from monobump.core.document import ChangelogDocument, ChangelogSection
from monobump.vcs.git import Commit

if TYPE_CHECKING:
    from collections.abc import Iterable

PR_CATEGORY_LABELS: dict[PRCategory, str] = {
    PRCategory.FEATURES: "### 🚀 Feature Releases",
    PRCategory.INFRASTRUCTURE: "### 🛠️ Infrastructure & Tooling",
    PRCategory.BUGFIXES: "### 🐛 Bug Fixes & Improvements",
    PRCategory.REFACTORING: "### 🔄 Code Quality & Refactoring",
    PRCategory.DOCUMENTATION: "### 📚 Documentation Updates",
    PRCategory.DEPENDENCIES: "### 📦 Dependency Updates",
    PRCategory.OTHER: "### 🔀 Other Pull Requests",
}

BREAKING_LABEL = "### ⚠️ Breaking Changes"

TYPE_LABELS: dict[str, str] = {
    "feat": "### ✨ Features",
    "fix": "### 🐛 Bug Fixes",
    "perf": "### ⚡ Performance",
    "refactor": "### ♻️ Refactoring",
    "docs": "### 📚 Documentation",
    "test": "### 🧪 Tests",
    "build": "### 📦 Build",
    "ci": "### 🔧 CI",
    "style": "### 💄 Style",
    "chore": "### 🔨 Chores",
}

OTHER_LABEL = "### 📝 Other"

NO_CHANGES = "_No notable changes._"

_SECTION_RE = re.compile(r"^## \[(?P<label>[^\]]+)\](?: - (?P<date>\d{4}-\d{2}-\d{2}))?\s*$")
_ENTRY_RE = re.compile(
    r"^(?P<indent>\s*)- (?P<subject>.*?)"
    r"(?: \((?:\[`(?P<short>[0-9a-f]+)`\]\((?P<url>[^)\s]*)\)|`(?P<sha>[0-9a-f]+)`)\))?$"
)


class TemplateEngine(Protocol):
    """Renders changelog documents and parses them back."""

    def generate_content(self, document: ChangelogDocument) -> str: ...

    def parse_versions(self, content: str) -> ChangelogDocument: ...


def _heading(label: str) -> str:
    inner = label.strip("[]")
    return f"[{inner}]"


def _label(inner: str) -> str:
    return inner if inner[:1].isdigit() else f"[{inner}]"


class MarkdownChangelogTemplate:
    """Keep-a-changelog flavoured Markdown with commit-type groups.

    Args:
        package_name: Shown in the document header.
        tag_prefix: Tag prefix of the package series, used for compare links.
        repo_url: Base URL of the repository web UI; when set, hashes
            link to ``<repo_url>/commit/<sha>``.
    """

    def __init__(
        self,
        package_name: str,
        tag_prefix: str = "v",
        repo_url: str | None = None,
    ) -> None:
        self.package_name = package_name
        self.tag_prefix = tag_prefix
        self.repo_url = repo_url.rstrip("/") if repo_url else None

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def generate_content(self, document: ChangelogDocument) -> str:
        lines = [
            "# Changelog",
            "",
            f"All notable changes to {self.package_name} are documented in this file.",
        ]
        for section in document:
            lines.append("")
            lines.extend(self._render_section(section))
        return "\n".join(lines) + "\n"

    def _render_section(self, section: ChangelogSection) -> list[str]:
        heading = f"## {_heading(section.label)}"
        if section.date:
            heading += f" - {section.date.isoformat()}"
        lines = [heading, ""]

        groups = self._group(section.commits)
        if not groups:
            lines.append(NO_CHANGES)
            return lines

        for index, (label, commits) in enumerate(groups):
            if index:
                lines.append("")
            lines.extend([label, ""])
            for commit in commits:
                lines.append(f"- {self._render_entry(commit)}")
                lines.extend(f"  - {self._render_entry(c)}" for c in commit.pr_commits)
        return lines

    def _group(self, commits: Iterable[ParsedCommit]) -> list[tuple[str, list[ParsedCommit]]]:
        order = [
            *PR_CATEGORY_LABELS.values(),
            BREAKING_LABEL,
            *TYPE_LABELS.values(),
            OTHER_LABEL,
        ]
        buckets: dict[str, list[ParsedCommit]] = {}
        for commit in commits:
            buckets.setdefault(self._group_label(commit), []).append(commit)
        return [(label, buckets[label]) for label in order if label in buckets]

    @staticmethod
    def _group_label(commit: ParsedCommit) -> str:
        if commit.is_merge:
            return PR_CATEGORY_LABELS[commit.pr_category or PRCategory.OTHER]
        if commit.is_breaking:
            return BREAKING_LABEL
        return TYPE_LABELS.get(commit.commit_type, OTHER_LABEL)

    def _render_entry(self, commit: ParsedCommit) -> str:
        subject = format_commit_subject(commit)
        if not commit.sha:
            return subject
        if self.repo_url:
            return f"{subject} ([`{commit.short_sha}`]({self.repo_url}/commit/{commit.sha}))"
        return f"{subject} (`{commit.short_sha}`)"

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def parse_versions(self, content: str) -> ChangelogDocument:
        """Rebuild a document from text produced by generate_content().

        Text before the first ``## [...]`` heading is ignored, as are
        lines that are neither headings nor entries.
        """
        document = ChangelogDocument()
        section: ChangelogSection | None = None
        group: str | None = None
        pending: list[tuple[ParsedCommit, list[ParsedCommit]]] = []

        def flush() -> None:
            if section is not None:
                section.commits.extend(
                    dataclasses.replace(parent, pr_commits=tuple(children)) if children else parent
                    for parent, children in pending
                )
            pending.clear()

        for line in content.splitlines():
            header = _SECTION_RE.match(line)
            if header:
                flush()
                raw_date = header.group("date")
                found_date = date.fromisoformat(raw_date) if raw_date else None
                section = ChangelogSection(label=_label(header.group("label")), date=found_date)
                document.set(section)
                group = None
                continue
            if section is None:
                continue
            if line.startswith("### "):
                group = line.strip()
                continue

            entry = _ENTRY_RE.match(line)
            if not entry:
                continue
            commit = self._parse_entry(entry)
            if entry.group("indent") and pending:
                pending[-1][1].append(commit)
                continue
            category = _category_for(group)
            if category is not None:
                commit = dataclasses.replace(commit, is_merge=True, pr_category=category)
            pending.append((commit, []))

        flush()
        return document

    @staticmethod
    def _parse_entry(entry: re.Match[str]) -> ParsedCommit:
        sha = entry.group("sha") or ""
        if entry.group("url"):
            sha = entry.group("url").rsplit("/", 1)[-1]
        return classify_commit(Commit(sha=sha, message=entry.group("subject")))


def _category_for(group: str | None) -> PRCategory | None:
    for category, label in PR_CATEGORY_LABELS.items():
        if label == group:
            return category
    return None
