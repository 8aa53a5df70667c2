"""Analysis models, schema coercion, and issue correlation."""

from diffaudit.analysis.coercer import ParseFailure, coerce
from diffaudit.analysis.correlator import annotate, correlate
from diffaudit.analysis.models import (
    Analysis,
    AnnotatedLine,
    Issue,
    Severity,
    Snapshot,
    Statistics,
    severity_at_or_above,
)

__all__ = [
    "Analysis",
    "AnnotatedLine",
    "Issue",
    "ParseFailure",
    "Severity",
    "Snapshot",
    "Statistics",
    "annotate",
    "coerce",
    "correlate",
    "severity_at_or_above",
]
