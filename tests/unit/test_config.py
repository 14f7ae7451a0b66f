"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from monobump.config.loader import (
    extract_monobump_config,
    find_pyproject_toml,
    load_config,
    load_pyproject_toml,
)
from monobump.config.models import (
    ChangelogConfig,
    CommitsConfig,
    MonobumpConfig,
    PackagesConfig,
    ValidationConfig,
)
from monobump.exceptions import ConfigNotFoundError, ConfigValidationError


class TestMonobumpConfig:
    """Tests for MonobumpConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = MonobumpConfig()

        assert config.allow_dirty is False
        assert config.changelog.filename == "CHANGELOG.md"

    def test_nested_defaults(self):
        """Nested configurations have defaults."""
        config = MonobumpConfig()

        assert config.commits.types_minor == ["feat"]
        assert config.commits.types_patch == ["fix", "perf"]
        assert config.commits.types_major == []
        assert config.changelog.version_mode is True
        assert config.changelog.unreleased_label == "[Unreleased]"
        assert config.packages.paths == ["packages/*"]
        assert config.packages.isolate_root is False

    def test_unknown_keys_rejected(self):
        """Typos in configuration keys are errors."""
        with pytest.raises(ValueError):
            MonobumpConfig.model_validate({"changelogs": {}})

    def test_nested_sections_are_independent(self):
        """Default lists are not shared between instances."""
        first = CommitsConfig()
        first.types_minor.append("feature")

        assert CommitsConfig().types_minor == ["feat"]

    def test_section_models(self):
        """Sections can be built directly."""
        assert ChangelogConfig(filename="HISTORY.md").filename == "HISTORY.md"
        assert PackagesConfig(paths=[]).paths == []
        assert ValidationConfig(scopes=["api"]).scopes == ["api"]


class TestLoader:
    """Tests for the pyproject.toml loader."""

    def test_find_pyproject_in_parent(self, tmp_path: Path):
        """Search walks up the directory tree."""
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_pyproject_toml(nested) == (tmp_path / "pyproject.toml").resolve()

    def test_load_invalid_toml(self, tmp_path: Path):
        """Broken TOML is a validation error."""
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\n")

        with pytest.raises(ConfigValidationError):
            load_pyproject_toml(path)

    def test_load_missing_file(self, tmp_path: Path):
        """A missing file is reported."""
        with pytest.raises(ConfigNotFoundError):
            load_pyproject_toml(tmp_path / "pyproject.toml")

    def test_extract_missing_section(self):
        """No [tool.monobump] section yields an empty dict."""
        assert extract_monobump_config({"project": {"name": "x"}}) == {}

    def test_load_config_from_directory(self, tmp_path: Path):
        """Settings from [tool.monobump] are applied."""
        (tmp_path / "pyproject.toml").write_text(
            "[project]\nname = 'x'\nversion = '1.0.0'\n\n"
            "[tool.monobump]\n"
            "allow_dirty = true\n\n"
            "[tool.monobump.commits]\n"
            "types_minor = ['feat', 'feature']\n\n"
            "[tool.monobump.changelog]\n"
            "version_mode = false\n"
            "repo_url = 'https://github.com/acme/widgets'\n"
        )

        config = load_config(tmp_path)

        assert config.allow_dirty is True
        assert config.commits.types_minor == ["feat", "feature"]
        assert config.changelog.version_mode is False
        assert config.changelog.repo_url == "https://github.com/acme/widgets"

    def test_load_config_from_file(self, tmp_path: Path):
        """A pyproject.toml path can be given directly."""
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.monobump]\nallow_dirty = true\n")

        assert load_config(path).allow_dirty is True

    def test_load_config_without_section(self, tmp_path: Path):
        """A pyproject.toml without our section gives defaults."""
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")

        assert load_config(tmp_path) == MonobumpConfig()

    def test_load_config_invalid_values(self, tmp_path: Path):
        """Invalid values become ConfigValidationError."""
        (tmp_path / "pyproject.toml").write_text(
            "[tool.monobump.changelog]\nversion_mode = 'sometimes'\n"
        )

        with pytest.raises(ConfigValidationError, match=r"tool\.monobump"):
            load_config(tmp_path)

