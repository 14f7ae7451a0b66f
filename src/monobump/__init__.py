"""monobump: version and changelog bookkeeping for multi-package repositories."""

from __future__ import annotations

__version__ = "0.1.0"
