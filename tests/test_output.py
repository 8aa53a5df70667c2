"""Tests for the terminal and JSON reporters."""

import io
import json

from rich.console import Console

from diffaudit.analysis.coercer import coerce
from diffaudit.analysis.correlator import annotate, correlate
from diffaudit.analysis.models import Analysis, Snapshot
from diffaudit.diff.models import LineKind
from diffaudit.diff.parser import parse_diff
from diffaudit.output import json_report, terminal
from diffaudit.sources.github import PullRequestInfo


def _make_snapshot(diff_text, doc=None, *, final=True) -> Snapshot:
    """Build a Snapshot from a diff and an analysis document."""
    lines = parse_diff(diff_text)
    analysis = coerce(json.dumps(doc)) if doc is not None else Analysis()
    return Snapshot(
        analysis=analysis,
        annotated_lines=annotate(lines, correlate(lines, analysis.issues)),
        is_final=final,
    )


def _console() -> Console:
    return Console(file=io.StringIO(), record=True, width=140, color_system=None)


_PR = PullRequestInfo(
    title="Add login",
    number=42,
    author="octocat",
    url="https://github.com/o/r/pull/42",
    owner="o",
    repo="r",
)


class TestJsonReport:
    def test_wire_field_names(self, sample_diff, analysis_doc):
        data = json_report.to_dict(_make_snapshot(sample_diff, analysis_doc))
        assert data["final"] is True
        assert data["diff_lines"] == 20
        assert data["analysis"]["overallRisk"] == "high"
        assert data["analysis"]["issues"][0]["lineNumber"] == 8
        assert data["analysis"]["issues"][1]["filePath"] == "web/index.js"
        assert data["analysis"]["statistics"]["totalIssues"] == 3
        assert "pull_request" not in data

    def test_annotations_point_at_issues(self, sample_diff, analysis_doc):
        data = json_report.to_dict(_make_snapshot(sample_diff, analysis_doc))
        by_line = {a["line"]: a for a in data["annotations"]}
        assert by_line[8]["issue_index"] == 0
        assert by_line[8]["kind"] == "added"
        assert by_line[9]["issue_index"] == 2
        assert {n for n, a in by_line.items() if a["issue_index"] == 1} == {12, 16}
        assert data["matched_issues"] == 3

    def test_empty_analysis(self):
        data = json_report.to_dict(_make_snapshot("+x\n", final=False))
        assert data["final"] is False
        assert data["annotations"] == []
        assert data["matched_issues"] == 0
        assert data["analysis"]["overallRisk"] == "low"

    def test_pull_request_block(self, sample_diff):
        data = json_report.to_dict(_make_snapshot(sample_diff), pr=_PR)
        assert data["pull_request"]["number"] == 42
        assert data["pull_request"]["author"] == "octocat"

    def test_render_is_valid_json(self, sample_diff, analysis_doc):
        output = json_report.render(_make_snapshot(sample_diff, analysis_doc))
        assert json.loads(output)["analysis"]["summary"].startswith("Hardcoded secret")


class TestTerminalReport:
    def test_full_render(self, sample_diff, analysis_doc):
        console = _console()
        terminal.render(_make_snapshot(sample_diff, analysis_doc), console=console)
        text = console.export_text()
        assert "Security Scoreboard" in text
        assert "HIGH" in text
        assert 'SECRET = "hunter2"' in text
        assert "Secrets" in text
        assert "Use textContent." in text
        assert "3 issues found" in text
        assert "streaming" not in text

    def test_streaming_marker(self, sample_diff, analysis_doc):
        console = _console()
        terminal.render(_make_snapshot(sample_diff, analysis_doc, final=False), console=console)
        assert "streaming" in console.export_text()

    def test_hidden_kinds_keep_headers(self, sample_diff):
        console = _console()
        kinds = [LineKind.REMOVED, LineKind.CONTEXT]
        terminal.render(_make_snapshot(sample_diff), console=console, kinds=kinds)
        text = console.export_text()
        assert "hunter2" not in text
        assert "import os" in text
        assert "diff --git a/app/auth.py" in text
        assert "@@ -1,4 +1,5 @@" in text

    def test_no_issues_table_when_empty(self, sample_diff):
        console = _console()
        terminal.render(_make_snapshot(sample_diff), console=console)
        text = console.export_text()
        assert "Security Issues" not in text
        assert "LOW" in text

    def test_pr_header(self, sample_diff):
        console = _console()
        terminal.render(_make_snapshot(sample_diff), console=console, pr=_PR)
        text = console.export_text()
        assert "#42 Add login" in text
        assert "octocat" in text

    def test_empty_diff(self):
        console = _console()
        terminal.render(_make_snapshot(""), console=console)
        assert "(empty diff)" in console.export_text()

    def test_live_renderer_accepts_updates(self, sample_diff, analysis_doc):
        renderer = terminal.LiveRenderer(console=_console())
        with renderer:
            renderer.update(_make_snapshot(sample_diff, analysis_doc, final=False))
            renderer.update(_make_snapshot(sample_diff, analysis_doc))
