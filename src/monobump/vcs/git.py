"""Git repository access.

GitRepository is a thin wrapper that runs ``git`` as a subprocess in the
repository directory. Every method either returns parsed output or
raises GitError; callers decide whether a failure is fatal.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from monobump.exceptions import GitError

if TYPE_CHECKING:
    from collections.abc import Iterable

# Fields of a single commit, NUL separated so multi-line bodies survive.
_SHOW_FORMAT = "%H%x00%P%x00%an%x00%ae%x00%aI%x00%B"


@dataclass(frozen=True)
class Commit:
    """A raw commit as reported by git.

    ``subsumed`` is only populated for merge commits: the commits brought in
    by the merged branch (``<sha>^1..<sha>^2``).
    """

    sha: str
    message: str
    author_name: str = ""
    author_email: str = ""
    date: datetime | None = None
    parents: tuple[str, ...] = ()
    subsumed: tuple[Commit, ...] = field(default=(), repr=False)

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


def parse_git_date(value: str) -> datetime | None:
    """Parse a strict ISO-8601 date as printed by ``%aI``, or None."""
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


class GitRepository:
    """Run git commands against a working tree."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()
        if not self.path.is_dir():
            raise GitError(f"Not a directory: {self.path}")
        self._run("rev-parse", "--git-dir")

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
                returncode=e.returncode,
            ) from e
        return result.stdout.strip()

    # -------------------------------------------------------------------------
    # References
    # -------------------------------------------------------------------------

    def rev_parse(self, ref: str) -> str:
        """Resolve a ref (tag, branch, sha) to a full commit sha."""
        return self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")

    def first_commit(self, path: str | None = None) -> str:
        """Return the oldest commit, optionally the oldest one touching ``path``."""
        if path and path != ".":
            hashes = self._run("log", "--format=%H", "--", path).splitlines()
            if hashes:
                return hashes[-1]
        roots = self._run("rev-list", "--max-parents=0", "HEAD").splitlines()
        if not roots:
            raise GitError("Could not find first commit")
        return roots[-1]

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Whether ``ancestor`` is reachable from ``descendant``."""
        try:
            self._run("merge-base", "--is-ancestor", ancestor, descendant)
        except GitError as e:
            # Exit code 1 is a plain "no"; anything else is a real failure.
            if e.returncode == 1:
                return False
            raise
        return True

    def is_dirty(self) -> bool:
        return bool(self._run("status", "--porcelain"))

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def log_hashes(
        self,
        rev_range: str,
        *,
        merges: bool = False,
        paths: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> list[str]:
        """List commit shas in ``rev_range``, newest first.

        Args:
            rev_range: Anything ``git log`` accepts (``a..b``, ``HEAD``).
            merges: Only list merge commits.
            paths: Restrict to commits touching these paths.
            exclude: Drop changes that only touch these paths.
        """
        args = ["log", "--format=%H", rev_range]
        if merges:
            args.append("--merges")
        include = list(paths)
        excluded = [f":(exclude){p}" for p in exclude]
        if include or excluded:
            # An exclude-only pathspec needs a positive match to subtract from.
            args.extend(["--", *(include or ["."]), *excluded])
        return [line for line in self._run(*args).splitlines() if line]

    def show_commit(self, sha: str) -> Commit:
        """Read a single commit's metadata and full message."""
        output = self._run("show", "--no-patch", f"--format={_SHOW_FORMAT}", sha)
        parts = output.split("\x00", 5)
        if len(parts) != 6:
            raise GitError(f"Unexpected output while reading commit {sha}")
        full_sha, parents, name, email, date, message = parts
        return Commit(
            sha=full_sha,
            message=message.strip(),
            author_name=name,
            author_email=email,
            date=parse_git_date(date),
            parents=tuple(parents.split()),
        )

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def list_tags(self, pattern: str = "*") -> list[str]:
        """List tags matching a glob, highest version first."""
        output = self._run("tag", "--list", pattern, "--sort=-version:refname")
        return [line for line in output.splitlines() if line]

    def tag_exists(self, name: str) -> bool:
        try:
            return self._run("tag", "--list", name) == name
        except GitError:
            return False

    def tag_date(self, name: str) -> datetime | None:
        """Creation date of a tag (commit date for lightweight tags)."""
        output = self._run(
            "for-each-ref", "--format=%(creatordate:iso-strict)", f"refs/tags/{name}"
        )
        return parse_git_date(output)

    def create_tag(self, name: str, message: str, *, force: bool = False) -> None:
        args = ["tag", "-a", name, "-m", message]
        if force:
            args.insert(1, "-f")
        self._run(*args)

    # -------------------------------------------------------------------------
    # Working tree
    # -------------------------------------------------------------------------

    def add_all(self) -> None:
        self._run("add", "--all")

    def commit(self, message: str) -> str:
        """Commit the index and return the new short sha."""
        self._run("commit", "-m", message)
        return self._run("rev-parse", "--short", "HEAD")

    def push(self, *, follow_tags: bool = True) -> None:
        args = ["push"]
        if follow_tags:
            args.append("--follow-tags")
        self._run(*args)
