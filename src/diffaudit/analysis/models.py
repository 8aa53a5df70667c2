"""Canonical analysis models — every field is present and typed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from diffaudit.diff.models import DiffLine


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return SEVERITY_ORDER[self]


SEVERITY_ORDER: Dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
}


def severity_at_or_above(severity: Severity, threshold: Severity) -> bool:
    """Return True if *severity* is at or above *threshold*."""
    return SEVERITY_ORDER[severity] >= SEVERITY_ORDER[threshold]


@dataclass(frozen=True)
class Issue:
    """A single reported finding.

    An issue with neither ``line_number`` nor ``file_path`` is valid but can
    never be attached to a diff line.
    """

    severity: Severity = Severity.LOW
    category: str = ""
    description: str = ""
    recommendation: str = ""
    line_number: Optional[int] = None  # positive
    file_path: Optional[str] = None  # non-empty

    @property
    def is_correlatable(self) -> bool:
        return self.line_number is not None or self.file_path is not None

    @property
    def location(self) -> str:
        if self.file_path and self.line_number is not None:
            return f"{self.file_path}:{self.line_number}"
        if self.file_path:
            return self.file_path
        if self.line_number is not None:
            return f"line {self.line_number}"
        return "-"


@dataclass(frozen=True)
class Statistics:
    """Producer-supplied counts. Kept as-is, never derived from issues."""

    total_issues: int = 0
    high_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0


@dataclass(frozen=True)
class Analysis:
    summary: str = ""
    overall_risk: Severity = Severity.LOW
    issues: Tuple[Issue, ...] = ()
    statistics: Statistics = field(default_factory=Statistics)


@dataclass(frozen=True, slots=True)
class AnnotatedLine:
    line: DiffLine
    issue: Optional[Issue] = None


@dataclass(frozen=True)
class Snapshot:
    """One immutable, self-contained view of the analysis in progress."""

    analysis: Analysis
    annotated_lines: Tuple[AnnotatedLine, ...] = ()
    is_final: bool = False

    @property
    def matched_lines(self) -> Tuple[AnnotatedLine, ...]:
        return tuple(a for a in self.annotated_lines if a.issue is not None)
