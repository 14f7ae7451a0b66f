"""Conventional commit classification.

Turns raw git commits into ParsedCommit records::

    type(scope1,scope2)!: description

    body...

    BREAKING CHANGE: footer

Anything that does not match the grammar is kept as an ``unclassified``
commit whose description is the raw subject. Classification never fails
and never touches git: merge commits arrive with the commits they bring
in already attached (see RangeResolver).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from monobump.config.models import CommitsConfig, ValidationConfig
from monobump.core.version import BumpType
from monobump.vcs.git import Commit

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

UNCLASSIFIED = "unclassified"

CONVENTIONAL_COMMIT_RE = re.compile(
    r"^(?P<type>[a-z]+)(?:\((?P<scope>[a-zA-Z0-9@\-_,\s/.]+)\))?"
    r"(?P<breaking>!)?:\s(?P<description>.+)$"
)

MERGE_PREFIXES = ("Merge pull request", "Merge branch")
DEPENDENCY_BOTS = ("renovate[bot]", "dependabot[bot]")

PR_NUMBER_PATTERNS = (
    re.compile(r"Merge pull request #(\d+)"),
    re.compile(r"Merge PR #(\d+)"),
    re.compile(r"Merge.*#(\d+)"),
    re.compile(r"#(\d+)"),
)


class PRCategory(StrEnum):
    """Dominant theme of a merged pull request."""

    FEATURES = "features"
    BUGFIXES = "bugfixes"
    DEPENDENCIES = "dependencies"
    INFRASTRUCTURE = "infrastructure"
    DOCUMENTATION = "documentation"
    REFACTORING = "refactoring"
    OTHER = "other"


@dataclass(frozen=True)
class ParsedCommit:
    """A commit with its conventional-commit fields extracted."""

    sha: str
    subject: str
    commit_type: str
    description: str
    scopes: tuple[str, ...] = ()
    body_lines: tuple[str, ...] = ()
    date: datetime | None = None
    author: str | None = None
    is_breaking: bool = False
    is_merge: bool = False
    is_dependency: bool = False
    pr_number: str | None = None
    pr_category: PRCategory | None = None
    pr_commits: tuple[ParsedCommit, ...] = field(default=(), repr=False)

    @property
    def is_conventional(self) -> bool:
        return self.commit_type != UNCLASSIFIED

    @property
    def scope(self) -> str | None:
        """The first scope, if any."""
        return self.scopes[0] if self.scopes else None

    @property
    def subsumed(self) -> frozenset[str]:
        """Shas of the commits this merge commit brought in."""
        return frozenset(c.sha for c in self.pr_commits)

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @classmethod
    def from_commit(
        cls,
        commit: Commit,
        config: CommitsConfig | None = None,
    ) -> ParsedCommit:
        return classify_commit(commit, config)


def _is_merge_message(message: str) -> bool:
    return message.startswith(MERGE_PREFIXES)


def _mentions_dependency_bot(message: str) -> bool:
    return any(bot in message for bot in DEPENDENCY_BOTS)


def extract_pr_number(text: str) -> str | None:
    """Find a pull request number in a merge subject."""
    for pattern in PR_NUMBER_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def categorize_pr(
    pr_commits: Iterable[ParsedCommit],
    description: str,
    body_lines: Iterable[str] = (),
) -> PRCategory:
    """Score the commits of a pull request and pick its dominant category.

    Ties go to the category listed first in PRCategory.
    """
    if (
        "renovate" in description
        or "dependabot" in description
        or any("dependency" in line.lower() for line in body_lines)
    ):
        return PRCategory.DEPENDENCIES

    scores = dict.fromkeys(
        (
            PRCategory.FEATURES,
            PRCategory.BUGFIXES,
            PRCategory.DEPENDENCIES,
            PRCategory.INFRASTRUCTURE,
            PRCategory.DOCUMENTATION,
            PRCategory.REFACTORING,
        ),
        0,
    )
    for commit in pr_commits:
        text = commit.description
        match commit.commit_type:
            case "feat":
                scores[PRCategory.FEATURES] += 3
            case "fix":
                scores[PRCategory.BUGFIXES] += 2
            case "deps" | "chore":
                if any(word in text for word in ("dep", "update", "upgrade")):
                    scores[PRCategory.DEPENDENCIES] += 5
                elif any(word in text for word in ("ci", "build", "workflow")):
                    scores[PRCategory.INFRASTRUCTURE] += 2
            case "docs":
                scores[PRCategory.DOCUMENTATION] += 2
            case "refactor" | "style" | "perf":
                scores[PRCategory.REFACTORING] += 2
            case "ci" | "build":
                scores[PRCategory.INFRASTRUCTURE] += 3

    best = max(scores.values())
    if best == 0:
        return PRCategory.OTHER
    return next(category for category, score in scores.items() if score == best)


def classify_commit(commit: Commit, config: CommitsConfig | None = None) -> ParsedCommit:
    """Classify a raw commit.

    Args:
        commit: Raw commit; for merges, ``commit.subsumed`` holds the
            merged branch's commits.
        config: Commit settings (breaking pattern, dependency scopes).

    Returns:
        The parsed record. Malformed subjects produce an ``unclassified``
        record with the subject as description.
    """
    config = config or CommitsConfig()
    message = commit.message.strip()
    lines = message.split("\n")
    subject = lines[0].strip()
    body_lines = tuple(line for line in lines[1:] if line.strip())

    is_merge = len(commit.parents) > 1 or _is_merge_message(message)
    match = CONVENTIONAL_COMMIT_RE.match(subject)

    if match:
        commit_type = match.group("type")
        scope_text = match.group("scope") or ""
        scopes = tuple(s.strip() for s in scope_text.split(",") if s.strip())
        description = match.group("description").strip()
        body = "\n".join(body_lines)
        is_breaking = bool(match.group("breaking")) or bool(
            re.search(config.breaking_pattern, body)
        )
        is_dependency = (
            any(s in config.dependency_scopes for s in scopes)
            or _mentions_dependency_bot(message)
        )
    else:
        commit_type = UNCLASSIFIED
        scopes = ()
        description = subject
        is_breaking = False
        is_dependency = _mentions_dependency_bot(message)

    pr_commits: tuple[ParsedCommit, ...] = ()
    pr_number = None
    pr_category = None
    if is_merge:
        pr_commits = tuple(classify_commit(c, config) for c in commit.subsumed)
        pr_number = extract_pr_number(subject)
        pr_category = categorize_pr(pr_commits, description, body_lines)

    return ParsedCommit(
        sha=commit.sha,
        subject=subject,
        commit_type=commit_type,
        description=description,
        scopes=scopes,
        body_lines=body_lines,
        date=commit.date,
        author=commit.author_name or None,
        is_breaking=is_breaking,
        is_merge=is_merge,
        is_dependency=is_dependency,
        pr_number=pr_number,
        pr_category=pr_category,
        pr_commits=pr_commits,
    )


def parse_commits(
    commits: Iterable[Commit], config: CommitsConfig | None = None
) -> list[ParsedCommit]:
    return [classify_commit(c, config) for c in commits]


def format_commit_subject(commit: ParsedCommit) -> str:
    """Render a record back to a one-line subject.

    Conventional commits are normalised (``type(a,b)!: description``);
    unclassified commits keep their raw description.
    """
    if not commit.is_conventional:
        return commit.description
    scopes = f"({','.join(commit.scopes)})" if commit.scopes else ""
    breaking = "!" if commit.is_breaking else ""
    return f"{commit.commit_type}{scopes}{breaking}: {commit.description}"


def calculate_bump(
    commits: Iterable[ParsedCommit], config: CommitsConfig | None = None
) -> BumpType:
    """Highest bump signalled by a set of commits.

    Breaking changes and configured major types win over feature types,
    which win over patch-eligible types and dependency updates.
    """
    config = config or CommitsConfig()
    commits = list(commits)

    if any(c.is_breaking or c.commit_type in config.types_major for c in commits):
        return BumpType.MAJOR
    if any(c.commit_type in config.types_minor for c in commits):
        return BumpType.MINOR
    if any(
        c.commit_type in config.types_patch or (config.dependency_patch and c.is_dependency)
        for c in commits
    ):
        return BumpType.PATCH
    return BumpType.NONE


def group_commits_by_type(commits: Iterable[ParsedCommit]) -> dict[str, list[ParsedCommit]]:
    grouped: dict[str, list[ParsedCommit]] = {}
    for commit in commits:
        grouped.setdefault(commit.commit_type, []).append(commit)
    return grouped


# =============================================================================
# Commit message validation
# =============================================================================


def validate_commit_message(message: str, config: ValidationConfig | None = None) -> list[str]:
    """Check a commit message against the configured conventions.

    Returns:
        A list of human readable problems; empty when the message is valid.
    """
    if not message.strip():
        return ["commit message cannot be empty"]

    config = config or ValidationConfig()
    parsed = classify_commit(Commit(sha="", message=message))
    if parsed.is_merge:
        return []

    if not parsed.is_conventional:
        return [
            "subject: does not follow the conventional commit format "
            "'type(scope): description'"
        ]

    errors: list[str] = []
    if config.types and parsed.commit_type not in config.types:
        errors.append(
            f'type: invalid type "{parsed.commit_type}". valid types: {", ".join(config.types)}'
        )

    if config.scopes and parsed.scopes:
        invalid = [s for s in parsed.scopes if s not in config.scopes]
        if invalid:
            errors.append(
                f'scopes: invalid scope(s) "{", ".join(invalid)}". '
                f"valid scopes: {', '.join(config.scopes)}"
            )

    description = parsed.description
    min_length = config.description_min_length
    max_length = config.description_max_length
    if min_length is not None and len(description) < min_length:
        errors.append(
            f"description: should be at least {min_length} characters long"
        )
    if max_length is not None and len(description) > max_length:
        errors.append(
            f"description: should be max {max_length} chars, "
            f"received: {len(description)}"
        )
    if config.no_trailing_period and description.endswith("."):
        errors.append("description: should not end with a period")
    if config.no_type_prefix and config.types:
        first_word = description.split(" ", 1)[0].lower()
        if first_word in config.types:
            errors.append(f'description: should not start with a type "{first_word}"')

    if parsed.is_breaking:
        if parsed.commit_type not in config.breaking_types:
            errors.append(
                "breaking: breaking change is not allowed for this type, "
                f"allowed types: {', '.join(config.breaking_types)}"
            )
        if len(description) < 10:
            errors.append(
                "breaking: breaking change description should be at least 10 characters long"
            )

    return errors
