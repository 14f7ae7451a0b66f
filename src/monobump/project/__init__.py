"""Workspace packages and their manifests."""

from __future__ import annotations

from monobump.project.packages import Package, PackageRegistry

__all__ = ["Package", "PackageRegistry"]
