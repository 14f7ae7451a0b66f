"""Commit range resolution.

RangeResolver asks git for the commits between two references and hands
them to the classifier. A failed history query is not an error here: the
resolver logs a warning and returns an empty list, and callers treat that
as "nothing changed".
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from monobump.core.commits import ParsedCommit, classify_commit
from monobump.exceptions import GitError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from monobump.config.models import CommitsConfig
    from monobump.vcs.git import Commit, GitRepository

logger = logging.getLogger(__name__)


def format_range(from_ref: str | None, to_ref: str) -> str:
    """``from..to``, or just ``to`` when the range starts at the root."""
    return to_ref if from_ref is None else f"{from_ref}..{to_ref}"


class RangeResolver:
    """Resolve and classify the commits of a revision range."""

    def __init__(self, repo: GitRepository, config: CommitsConfig | None = None) -> None:
        self.repo = repo
        self.config = config

    def get_commits_in_range(
        self,
        from_ref: str | None,
        to_ref: str = "HEAD",
        *,
        include_paths: Sequence[str] | None = None,
        exclude_paths: Sequence[str] | None = None,
    ) -> list[ParsedCommit]:
        """Classified commits in ``(from_ref, to_ref]``, newest first.

        Args:
            from_ref: Exclusive start; None means all history up to ``to_ref``.
            to_ref: Inclusive end.
            include_paths: Only commits touching these paths.
            exclude_paths: Ignore changes under these paths.

        Returns:
            The classified commits, or an empty list if git fails.
        """
        include = [p for p in include_paths or () if p != "."]
        exclude = list(exclude_paths or ())
        rev_range = format_range(from_ref, to_ref)

        try:
            hashes = self.repo.log_hashes(rev_range, paths=include, exclude=exclude)
            if include or exclude:
                hashes = self._with_relevant_merges(rev_range, hashes, include, exclude)
            raw = [self._load(sha) for sha in hashes]
        except GitError as e:
            logger.warning("Could not read history for %s: %s", rev_range, e)
            return []

        return [classify_commit(commit, self.config) for commit in raw]

    def get_first_commit(self, path: str | None = None) -> str:
        """Oldest commit of the repository, or of ``path`` when given."""
        return self.repo.first_commit(path)

    def _with_relevant_merges(
        self,
        rev_range: str,
        hashes: list[str],
        include: list[str],
        exclude: list[str],
    ) -> list[str]:
        # Path-limited logs drop merge commits; add back the merges whose
        # branch touched the filtered paths.
        selected = set(hashes)
        added = False
        for merge in self.repo.log_hashes(rev_range, merges=True):
            if merge in selected:
                continue
            branch = self.repo.log_hashes(f"{merge}^1..{merge}^2", paths=include, exclude=exclude)
            if branch:
                selected.add(merge)
                added = True
        if not added:
            return hashes
        return [sha for sha in self.repo.log_hashes(rev_range) if sha in selected]

    def _load(self, sha: str) -> Commit:
        commit = self.repo.show_commit(sha)
        if len(commit.parents) < 2:
            return commit
        try:
            branch = self.repo.log_hashes(f"{sha}^1..{sha}^2")
            subsumed = tuple(self.repo.show_commit(h) for h in branch)
        except GitError as e:
            logger.warning("Could not read commits merged by %s: %s", sha[:7], e)
            subsumed = ()
        return dataclasses.replace(commit, subsumed=subsumed)
