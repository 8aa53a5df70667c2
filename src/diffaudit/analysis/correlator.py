"""Issue correlation — attach at most one issue to each diff line.

Priority per line:
  1. issues whose ``line_number`` equals the line's index;
  2. only when (1) finds nothing, issues whose ``file_path`` occurs in the
     line content (typically the file header lines).

Among several candidates the highest severity wins, then the issue that
appears first in the analysis.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Tuple

from diffaudit.analysis.models import AnnotatedLine, Issue
from diffaudit.diff.models import DiffLine


def _better(candidate: Tuple[int, Issue], current: Tuple[int, Issue]) -> bool:
    """Return True if *candidate* beats *current* (pairs are (position, issue))."""
    cand_pos, cand = candidate
    cur_pos, cur = current
    if cand.severity.rank != cur.severity.rank:
        return cand.severity.rank > cur.severity.rank
    return cand_pos < cur_pos


def correlate(lines: Sequence[DiffLine], issues: Sequence[Issue]) -> Dict[int, Issue]:
    """Return ``{line.index: issue}`` for every line that has a match."""
    by_line_number: Dict[int, Tuple[int, Issue]] = {}
    path_issues: List[Tuple[int, Issue]] = []

    for position, issue in enumerate(issues):
        if issue.line_number is not None:
            entry = (position, issue)
            existing = by_line_number.get(issue.line_number)
            if existing is None or _better(entry, existing):
                by_line_number[issue.line_number] = entry
        if issue.file_path:
            path_issues.append((position, issue))

    # Best-first, so the first containing path is the winner
    path_issues.sort(key=lambda pair: (-pair[1].severity.rank, pair[0]))

    mapping: Dict[int, Issue] = {}
    for line in lines:
        hit = by_line_number.get(line.index)
        if hit is not None:
            mapping[line.index] = hit[1]
            continue
        for _, issue in path_issues:
            assert issue.file_path is not None
            if issue.file_path in line.content:
                mapping[line.index] = issue
                break
    return mapping


def annotate(
    lines: Sequence[DiffLine], mapping: Mapping[int, Issue]
) -> Tuple[AnnotatedLine, ...]:
    """Pair every line with its matched issue (or None)."""
    return tuple(AnnotatedLine(line=line, issue=mapping.get(line.index)) for line in lines)
