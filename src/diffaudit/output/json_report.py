"""JSON reporter — snapshot in the generator's wire field names."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from diffaudit import __version__
from diffaudit.analysis.models import Analysis, Issue, Snapshot
from diffaudit.sources.github import PullRequestInfo


def issue_to_dict(issue: Issue) -> Dict[str, Any]:
    return {
        "severity": issue.severity.value,
        "category": issue.category,
        "description": issue.description,
        "lineNumber": issue.line_number,
        "filePath": issue.file_path,
        "recommendation": issue.recommendation,
    }


def analysis_to_dict(analysis: Analysis) -> Dict[str, Any]:
    stats = analysis.statistics
    return {
        "summary": analysis.summary,
        "overallRisk": analysis.overall_risk.value,
        "issues": [issue_to_dict(i) for i in analysis.issues],
        "statistics": {
            "totalIssues": stats.total_issues,
            "highRisk": stats.high_risk,
            "mediumRisk": stats.medium_risk,
            "lowRisk": stats.low_risk,
        },
    }


def to_dict(snapshot: Snapshot, *, pr: Optional[PullRequestInfo] = None) -> Dict[str, Any]:
    """Convert a Snapshot to a JSON-serialisable dict."""
    analysis = snapshot.analysis
    # Issues are frozen dataclasses and compare by value, so use identity
    position = {id(issue): n for n, issue in enumerate(analysis.issues)}

    annotations: List[Dict[str, Any]] = []
    for item in snapshot.annotated_lines:
        if item.issue is None:
            continue
        annotations.append({
            "line": item.line.index,
            "kind": item.line.kind.value,
            "issue_index": position.get(id(item.issue)),
        })

    return {
        "version": __version__,
        "final": snapshot.is_final,
        "diff_lines": len(snapshot.annotated_lines),
        "matched_issues": len({a["issue_index"] for a in annotations}),
        "analysis": analysis_to_dict(analysis),
        "annotations": annotations,
        **({"pull_request": {
            "owner": pr.owner,
            "repo": pr.repo,
            "number": pr.number,
            "title": pr.title,
            "author": pr.author,
            "url": pr.url,
        }} if pr else {}),
    }


def render(snapshot: Snapshot, *, pr: Optional[PullRequestInfo] = None) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(snapshot, pr=pr), indent=2)
