"""Diff layer — line model, parser, filters."""

from diffaudit.diff.models import DiffLine, DiffSummary, LineKind
from diffaudit.diff.parser import DiffParser, filter_lines, parse_diff, summarize

__all__ = [
    "DiffLine",
    "DiffParser",
    "DiffSummary",
    "LineKind",
    "filter_lines",
    "parse_diff",
    "summarize",
]
