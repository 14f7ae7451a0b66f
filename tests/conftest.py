"""Shared fixtures for monobump tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from monobump.config.models import MonobumpConfig
from monobump.core.commits import ParsedCommit, classify_commit
from monobump.project.packages import PackageRegistry
from monobump.vcs.git import Commit, GitRepository

BASE_DATE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _make_commit(
    message: str,
    sha: str = "a" * 40,
    *,
    days: int = 0,
    parents: tuple[str, ...] = ("p" * 40,),
    subsumed: tuple[Commit, ...] = (),
    dated: bool = True,
) -> Commit:
    """Build a raw commit dated ``days`` after BASE_DATE."""
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=BASE_DATE + timedelta(days=days) if dated else None,
        parents=parents,
        subsumed=subsumed,
    )


def _make_parsed(message: str, sha: str = "a" * 40, **kwargs) -> ParsedCommit:
    return classify_commit(_make_commit(message, sha, **kwargs))


@pytest.fixture
def make_commit():
    """Factory for raw commits."""
    return _make_commit


@pytest.fixture
def make_parsed():
    """Factory for classified commits."""
    return _make_parsed


@pytest.fixture
def config() -> MonobumpConfig:
    return MonobumpConfig()


@pytest.fixture
def mock_repo(tmp_path: Path) -> MagicMock:
    """Create a mock GitRepository."""
    repo = MagicMock(spec=GitRepository)
    repo.path = tmp_path
    return repo


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace with a root package and two member packages."""
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "acme"\nversion = "1.0.0"\n\n'
        "[tool.monobump]\nallow_dirty = true\n"
    )
    for name, version in (("api", "0.3.0"), ("web", "2.1.0")):
        package_dir = tmp_path / "packages" / name
        package_dir.mkdir(parents=True)
        (package_dir / "pyproject.toml").write_text(
            f'[project]\nname = "{name}"\nversion = "{version}"\n'
        )
    (tmp_path / "packages" / "notes").mkdir()
    return tmp_path


@pytest.fixture
def registry(workspace: Path) -> PackageRegistry:
    return PackageRegistry.discover(workspace)
