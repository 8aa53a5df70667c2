"""Tests for issue-to-line correlation."""

import json

from diffaudit.analysis.coercer import coerce
from diffaudit.analysis.correlator import annotate, correlate
from diffaudit.analysis.models import Issue, Severity
from diffaudit.diff.models import DiffLine, LineKind
from diffaudit.diff.parser import parse_diff


def _lines():
    return parse_diff("+++ b/a.js\n+const x = 1;\n+eval(x);\n")


class TestLineNumberMatch:
    def test_higher_severity_wins(self):
        high = Issue(severity=Severity.HIGH, category="h", line_number=2)
        low = Issue(severity=Severity.LOW, category="l", line_number=2)
        assert correlate(_lines(), [low, high]) == {2: high}
        assert correlate(_lines(), [high, low]) == {2: high}

    def test_first_occurrence_breaks_ties(self):
        first = Issue(severity=Severity.MEDIUM, category="first", line_number=3)
        second = Issue(severity=Severity.MEDIUM, category="second", line_number=3)
        assert correlate(_lines(), [first, second])[3] is first

    def test_out_of_range_line_unmatched(self):
        issue = Issue(severity=Severity.HIGH, line_number=99)
        assert correlate(_lines(), [issue]) == {}


class TestFilePathMatch:
    def test_header_line_matches_path(self):
        issue = Issue(severity=Severity.MEDIUM, file_path="a.js")
        assert correlate(_lines(), [issue]) == {1: issue}

    def test_line_number_takes_precedence_over_path(self):
        by_path = Issue(severity=Severity.HIGH, category="path", file_path="a.js")
        by_line = Issue(severity=Severity.LOW, category="line", line_number=1)
        # Line 1 has a line-number match, so the path issue is not considered there
        assert correlate(_lines(), [by_path, by_line]) == {1: by_line}

    def test_path_ties_prefer_severity_then_order(self):
        low = Issue(severity=Severity.LOW, category="low", file_path="a.js")
        high_1 = Issue(severity=Severity.HIGH, category="h1", file_path="a.js")
        high_2 = Issue(severity=Severity.HIGH, category="h2", file_path="b/a.js")
        assert correlate(_lines(), [low, high_1, high_2])[1] is high_1

    def test_issue_can_match_several_lines(self):
        lines = parse_diff("diff --git a/a.js b/a.js\n--- a/a.js\n+++ b/a.js\n+x\n")
        issue = Issue(file_path="a.js")
        assert set(correlate(lines, [issue])) == {1, 2, 3}

    def test_content_lines_can_mention_path(self):
        lines = parse_diff('+require("./a.js")\n')
        issue = Issue(file_path="a.js")
        assert correlate(lines, [issue]) == {1: issue}


class TestOrphans:
    def test_no_location_never_matches(self):
        orphan = Issue(severity=Severity.HIGH, category="orphan")
        assert not orphan.is_correlatable
        assert correlate(_lines(), [orphan]) == {}

    def test_no_issues(self):
        assert correlate(_lines(), []) == {}


class TestDeterminism:
    def test_same_input_same_mapping(self, sample_diff, analysis_doc):
        lines = parse_diff(sample_diff)
        issues = coerce(json.dumps(analysis_doc)).issues
        assert correlate(lines, issues) == correlate(lines, issues)

    def test_sample_mapping(self, sample_diff, analysis_doc):
        lines = parse_diff(sample_diff)
        issues = coerce(json.dumps(analysis_doc)).issues
        mapping = correlate(lines, issues)
        assert mapping[8] is issues[0]
        assert mapping[9] is issues[2]
        assert mapping[1] is issues[0]  # diff --git line carries app/auth.py
        assert mapping[16] is issues[1]  # +++ b/web/index.js
        assert 18 not in mapping


class TestAnnotate:
    def test_pairs_every_line(self):
        lines = _lines()
        issue = Issue(line_number=2)
        annotated = annotate(lines, {2: issue})
        assert [a.line for a in annotated] == lines
        assert [a.issue for a in annotated] == [None, issue, None]

    def test_preserves_kinds(self):
        annotated = annotate([DiffLine(1, LineKind.METADATA, "x")], {})
        assert annotated[0].line.kind == LineKind.METADATA
