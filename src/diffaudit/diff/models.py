"""Data models for the rendered diff."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class LineKind(str, Enum):
    FILE_HEADER = "file_header"
    HUNK_HEADER = "hunk_header"
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    METADATA = "metadata"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single classified line of a unified diff.

    ``index`` is the 1-based position in the original text and is the key
    issues are correlated against.
    """

    index: int
    kind: LineKind
    content: str


@dataclass(frozen=True)
class DiffSummary:
    """Line counts per kind plus the files the diff touches."""

    counts: Dict[LineKind, int] = field(default_factory=dict)
    files: Tuple[str, ...] = ()

    @property
    def total_lines(self) -> int:
        return sum(self.counts.values())

    def count(self, kind: LineKind) -> int:
        return self.counts.get(kind, 0)
