"""Unified diff parser — classifies every line of the diff text.

Unlike a patch applier, nothing is skipped: headers, hunk markers and
unrecognised lines are all kept so the rendered diff can be annotated line
by line. Classification depends only on the line prefix.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from diffaudit.diff.models import DiffLine, DiffSummary, LineKind

_FILE_HEADER_PREFIXES = ("diff --git", "index ", "---", "+++")
_MARKED_KINDS = (LineKind.ADDED, LineKind.REMOVED, LineKind.CONTEXT)

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_NEW_FILE_RE = re.compile(r"^\+\+\+ (?:b/)?(.+)$")


def classify(line: str) -> LineKind:
    """Return the kind of a raw diff line based on its prefix."""
    if line.startswith(_FILE_HEADER_PREFIXES):
        return LineKind.FILE_HEADER
    if line.startswith("@@"):
        return LineKind.HUNK_HEADER
    if line.startswith("+"):
        return LineKind.ADDED
    if line.startswith("-"):
        return LineKind.REMOVED
    if line.startswith(" "):
        return LineKind.CONTEXT
    return LineKind.METADATA


def _split_lines(text: str) -> List[str]:
    """Split on newlines, dropping one CR per CRLF ending and the empty tail
    after a final newline."""
    if not text:
        return []
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if text.endswith("\n"):
        lines.pop()
    return lines


class DiffParser:
    """Parse unified diff text into an ordered list of DiffLine records.

    Usage::

        lines = DiffParser(diff_text).parse()
        for line in lines:
            print(line.index, line.kind, line.content)
    """

    def __init__(self, diff_text: str) -> None:
        self._lines = _split_lines(diff_text)

    def parse(self) -> List[DiffLine]:
        """Return one DiffLine per line of the input. Never raises."""
        parsed: List[DiffLine] = []
        for position, raw_line in enumerate(self._lines, start=1):
            kind = classify(raw_line)
            # Strip the one-character marker only for +/-/space lines
            content = raw_line[1:] if kind in _MARKED_KINDS else raw_line
            parsed.append(DiffLine(index=position, kind=kind, content=content))
        return parsed


def parse_diff(diff_text: str) -> List[DiffLine]:
    """Convenience wrapper around ``DiffParser(diff_text).parse()``."""
    return DiffParser(diff_text).parse()


def _file_from_header(content: str) -> Optional[str]:
    m = _DIFF_HEADER_RE.match(content)
    if m:
        return m.group(2)
    m = _NEW_FILE_RE.match(content)
    if m and m.group(1) != "/dev/null":
        return m.group(1)
    return None


def summarize(lines: Sequence[DiffLine]) -> DiffSummary:
    """Count lines per kind and collect touched file paths in order."""
    counts = {kind: 0 for kind in LineKind}
    files: List[str] = []
    for line in lines:
        counts[line.kind] += 1
        if line.kind == LineKind.FILE_HEADER:
            path = _file_from_header(line.content)
            if path and path not in files:
                files.append(path)
    return DiffSummary(counts=counts, files=tuple(files))


def filter_lines(items: Iterable, kinds: Iterable[LineKind]) -> List:
    """Keep the items whose line kind is in *kinds*.

    Accepts plain DiffLine records or ``(line, issue)`` annotated pairs.
    Headers and metadata are only dropped when left out of *kinds*.
    """
    wanted: Tuple[LineKind, ...] = tuple(kinds)
    kept = []
    for item in items:
        line = item if isinstance(item, DiffLine) else item.line
        if line.kind in wanted:
            kept.append(item)
    return kept
