"""Version control access."""

from __future__ import annotations

from monobump.vcs.git import Commit, GitRepository

__all__ = ["Commit", "GitRepository"]
