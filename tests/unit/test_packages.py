"""Tests for workspace package discovery."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from monobump.config.models import ChangelogConfig, MonobumpConfig, PackagesConfig
from monobump.exceptions import PackageNotFoundError, ProjectError
from monobump.project.packages import Package, PackageRegistry


class TestPackage:
    """Tests for Package."""

    def test_root_package(self, tmp_path: Path):
        """The root package tags with a bare v prefix."""
        package = Package(name="root", path=PurePosixPath("."), workspace=tmp_path, is_root=True)

        assert package.tag_prefix == "v"
        assert package.tag_name("1.0.0") == "v1.0.0"
        assert package.manifest_path == tmp_path / "pyproject.toml"
        assert package.manifest_git_path == "pyproject.toml"

    def test_member_package(self, tmp_path: Path):
        """Member packages tag with their name."""
        package = Package(name="api", path=PurePosixPath("packages/api"), workspace=tmp_path)

        assert package.tag_prefix == "api-v"
        assert package.tag_name("0.2.0") == "api-v0.2.0"
        assert package.git_path == "packages/api"
        assert package.changelog_path == tmp_path / "packages" / "api" / "CHANGELOG.md"

    def test_version_round_trip(self, registry: PackageRegistry):
        """Versions are read from and written to the manifest."""
        package = registry.get("api")

        assert package.read_version() == "0.3.0"
        package.write_version("0.4.0")
        assert package.read_version() == "0.4.0"

    def test_unversioned_manifest(self, tmp_path: Path):
        """A manifest without a version means the package is not versioned."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\ndynamic = ["version"]\n')
        package = Package(name="root", path=PurePosixPath("."), workspace=tmp_path, is_root=True)

        assert package.read_version() is None
        assert package.should_version is False

    def test_changelog_io(self, registry: PackageRegistry):
        """A missing changelog reads as empty; writing creates it."""
        package = registry.get("web")

        assert package.read_changelog() == ""
        package.write_changelog("# Changelog\n")
        assert package.read_changelog() == "# Changelog\n"


class TestPackageRegistry:
    """Tests for PackageRegistry.discover() and lookups."""

    def test_discover(self, registry: PackageRegistry):
        """Root first, then every directory with a manifest."""
        assert registry.names == ["root", "api", "web"]
        assert len(registry) == 3
        assert "api" in registry
        assert "notes" not in registry

    def test_get_unknown(self, registry: PackageRegistry):
        """Unknown package names are reported with the known ones."""
        with pytest.raises(PackageNotFoundError, match="root, api, web"):
            registry.get("docs")

    def test_by_tag_prefix(self, registry: PackageRegistry):
        """Packages can be found by their tag prefix."""
        assert registry.by_tag_prefix("web-v").name == "web"
        assert registry.by_tag_prefix("v").is_root
        assert registry.by_tag_prefix("cli-v") is None

    def test_member_paths(self, registry: PackageRegistry):
        """Member paths leave out the root and an optional package."""
        assert registry.member_paths() == ["packages/api", "packages/web"]
        assert registry.member_paths(exclude=registry.get("api")) == ["packages/web"]

    def test_versioned(self, registry: PackageRegistry):
        """All fixture packages carry a version."""
        assert [p.name for p in registry.versioned()] == ["root", "api", "web"]

    def test_without_root(self, workspace: Path):
        """The root package can be left out."""
        config = MonobumpConfig(packages=PackagesConfig(include_root=False))

        assert PackageRegistry.discover(workspace, config).names == ["api", "web"]

    def test_custom_changelog_name(self, workspace: Path):
        """The changelog file name comes from the configuration."""
        config = MonobumpConfig(changelog=ChangelogConfig(filename="HISTORY.md"))

        package = PackageRegistry.discover(workspace, config).get("api")

        assert package.changelog_path.name == "HISTORY.md"

    def test_name_falls_back_to_directory(self, tmp_path: Path):
        """A manifest without a name uses the directory name."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "acme"\nversion = "1.0.0"\n')
        (tmp_path / "packages" / "tools").mkdir(parents=True)
        (tmp_path / "packages" / "tools" / "pyproject.toml").write_text("[tool.x]\n")

        assert PackageRegistry.discover(tmp_path).names == ["root", "tools"]

    def test_duplicate_names_rejected(self, tmp_path: Path):
        """Two packages with the same name cannot share a registry."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "acme"\nversion = "1.0.0"\n')
        for directory in ("api", "api-legacy"):
            (tmp_path / "packages" / directory).mkdir(parents=True)
            (tmp_path / "packages" / directory / "pyproject.toml").write_text(
                '[project]\nname = "api"\nversion = "1.0.0"\n'
            )

        with pytest.raises(ProjectError, match="Duplicate package name 'api'"):
            PackageRegistry.discover(tmp_path)

    def test_member_named_like_root(self, tmp_path: Path):
        """A member may not take the root package's name."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "acme"\nversion = "1.0.0"\n')
        (tmp_path / "packages" / "core").mkdir(parents=True)
        (tmp_path / "packages" / "core" / "pyproject.toml").write_text(
            '[project]\nname = "root"\nversion = "0.1.0"\n'
        )

        with pytest.raises(ProjectError, match="packages/core"):
            PackageRegistry.discover(tmp_path)
