"""Configuration management for monobump."""

from __future__ import annotations

from monobump.config.loader import load_config
from monobump.config.models import (
    ChangelogConfig,
    CommitsConfig,
    MonobumpConfig,
    PackagesConfig,
    ValidationConfig,
)

__all__ = [
    "ChangelogConfig",
    "CommitsConfig",
    "MonobumpConfig",
    "PackagesConfig",
    "ValidationConfig",
    "load_config",
]
