"""Ordered changelog documents.

A ChangelogDocument maps version labels to sections while remembering
the order in which the labels were added. Documents in this project are
kept newest release first.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from monobump.core.version import compare_versions

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from monobump.core.commits import ParsedCommit

UNRELEASED_LABEL = "[Unreleased]"


@dataclass
class ChangelogSection:
    """The commits released under one version label."""

    label: str
    commits: list[ParsedCommit] = field(default_factory=list)
    date: datetime.date | None = None


class ChangelogDocument:
    """Insertion-ordered mapping of version label to ChangelogSection.

    Backed by a list of labels plus a dict index, so lookups are O(1)
    and the timeline order survives every update.
    """

    def __init__(self, sections: Iterable[ChangelogSection] = ()) -> None:
        self._order: list[str] = []
        self._index: dict[str, ChangelogSection] = {}
        for section in sections:
            self.set(section)

    def set(self, section: ChangelogSection) -> None:
        """Add a section, replacing one with the same label in place."""
        if section.label not in self._index:
            self._order.append(section.label)
        self._index[section.label] = section

    def insert(self, position: int, section: ChangelogSection) -> None:
        """Add a new label at ``position``; existing labels are replaced in place."""
        if section.label in self._index:
            self._index[section.label] = section
            return
        self._order.insert(position, section.label)
        self._index[section.label] = section

    def __getitem__(self, label: str) -> ChangelogSection:
        return self._index[label]

    def get(self, label: str) -> ChangelogSection | None:
        return self._index.get(label)

    def __contains__(self, label: object) -> bool:
        return label in self._index

    def __iter__(self) -> Iterator[ChangelogSection]:
        return (self._index[label] for label in self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChangelogDocument):
            return NotImplemented
        return list(self) == list(other)

    @property
    def labels(self) -> list[str]:
        return list(self._order)

    def copy(self) -> ChangelogDocument:
        return ChangelogDocument(self)

    def merged(self, newer: ChangelogDocument) -> ChangelogDocument:
        """Return a new document with ``newer``'s sections folded in.

        Sections of ``newer`` replace same-labelled sections where they
        stand. Labels only in this document are kept. Labels only in
        ``newer`` are slotted into the newest-first timeline: an
        unreleased section goes on top, a version goes before the first
        existing version that is older than it.
        """
        result = self.copy()
        for section in newer:
            if section.label in result:
                result.set(section)
            else:
                result.insert(result._timeline_position(section.label), section)
        return result

    def _timeline_position(self, label: str) -> int:
        if not _is_version_label(label):
            return 0
        for position, existing in enumerate(self._order):
            if _is_version_label(existing) and compare_versions(label, existing) > 0:
                return position
        return len(self._order)


def _is_version_label(label: str) -> bool:
    return bool(label) and label[0].isdigit()
