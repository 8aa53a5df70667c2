"""Schema coercion — turn a raw candidate into a canonical Analysis.

A structurally valid object that is missing fields is a legitimate
intermediate result: absent or wrong-typed fields take their defaults
instead of failing the whole object. Only a candidate that does not parse
at all is reported as a ParseFailure.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from diffaudit.analysis.models import Analysis, Issue, Severity, Statistics

_SEVERITY_BY_NAME = {s.value: s for s in Severity}


@dataclass(frozen=True)
class ParseFailure:
    """The candidate could not be parsed. Means "no update this chunk"."""

    reason: str


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_severity(value: Any) -> Severity:
    if isinstance(value, str):
        return _SEVERITY_BY_NAME.get(value.strip().lower(), Severity.LOW)
    return Severity.LOW


def _as_count(value: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if value >= 0 else 0
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    return 0


def _as_line_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def _as_path(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _coerce_issue(raw: Dict[str, Any]) -> Issue:
    return Issue(
        severity=_as_severity(raw.get("severity")),
        category=_as_str(raw.get("category")),
        description=_as_str(raw.get("description")),
        recommendation=_as_str(raw.get("recommendation")),
        line_number=_as_line_number(raw.get("lineNumber")),
        file_path=_as_path(raw.get("filePath")),
    )


def _coerce_statistics(raw: Any) -> Statistics:
    if not isinstance(raw, dict):
        return Statistics()
    return Statistics(
        total_issues=_as_count(raw.get("totalIssues")),
        high_risk=_as_count(raw.get("highRisk")),
        medium_risk=_as_count(raw.get("mediumRisk")),
        low_risk=_as_count(raw.get("lowRisk")),
    )


def coerce_object(raw: Dict[str, Any]) -> Analysis:
    """Build an Analysis from an already-decoded mapping."""
    raw_issues = raw.get("issues")
    issues: List[Issue] = []
    if isinstance(raw_issues, list):
        issues = [_coerce_issue(i) for i in raw_issues if isinstance(i, dict)]

    return Analysis(
        summary=_as_str(raw.get("summary")),
        overall_risk=_as_severity(raw.get("overallRisk")),
        issues=tuple(issues),
        statistics=_coerce_statistics(raw.get("statistics")),
    )


def coerce(candidate: str) -> Union[Analysis, ParseFailure]:
    """Parse *candidate* leniently and return a canonical Analysis.

    Control characters inside strings are tolerated (``strict=False``);
    trailing commas, truncated escapes and non-object documents are not.
    """
    try:
        raw = json.loads(candidate, strict=False)
    except (ValueError, RecursionError) as exc:
        return ParseFailure(reason=str(exc))

    if not isinstance(raw, dict):
        return ParseFailure(reason=f"expected an object, got {type(raw).__name__}")

    return coerce_object(raw)
