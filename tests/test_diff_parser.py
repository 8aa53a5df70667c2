"""Tests for the unified diff parser — classification and line indexing."""

from diffaudit.diff.models import DiffLine, LineKind
from diffaudit.diff.parser import DiffParser, classify, filter_lines, parse_diff, summarize


class TestClassification:
    def test_file_header_prefixes(self):
        assert classify("diff --git a/x b/x") == LineKind.FILE_HEADER
        assert classify("index abc..def 100644") == LineKind.FILE_HEADER
        assert classify("--- a/x") == LineKind.FILE_HEADER
        assert classify("+++ b/x") == LineKind.FILE_HEADER

    def test_hunk_header(self):
        assert classify("@@ -1,3 +1,4 @@ def f():") == LineKind.HUNK_HEADER

    def test_content_lines(self):
        assert classify("+added") == LineKind.ADDED
        assert classify("-removed") == LineKind.REMOVED
        assert classify(" context") == LineKind.CONTEXT

    def test_triple_markers_are_headers_not_content(self):
        assert classify("+++") == LineKind.FILE_HEADER
        assert classify("---") == LineKind.FILE_HEADER
        assert classify("++x") == LineKind.ADDED
        assert classify("--x") == LineKind.REMOVED

    def test_everything_else_is_metadata(self):
        assert classify("new file mode 100644") == LineKind.METADATA
        assert classify("\\ No newline at end of file") == LineKind.METADATA
        assert classify("") == LineKind.METADATA
        assert classify("indexing") == LineKind.METADATA


class TestParsing:
    def test_scenario_header_and_added(self):
        lines = parse_diff("+++ b/a.js\n+const x = 1;\n")
        assert lines == [
            DiffLine(index=1, kind=LineKind.FILE_HEADER, content="+++ b/a.js"),
            DiffLine(index=2, kind=LineKind.ADDED, content="const x = 1;"),
        ]

    def test_indices_strictly_increasing(self, sample_diff):
        lines = parse_diff(sample_diff)
        indices = [line.index for line in lines]
        assert indices == list(range(1, len(lines) + 1))

    def test_one_record_per_line(self, sample_diff):
        lines = parse_diff(sample_diff)
        assert len(lines) == len(sample_diff.splitlines())

    def test_markers_stripped(self, sample_diff):
        lines = parse_diff(sample_diff)
        by_index = {line.index: line for line in lines}
        assert by_index[6] == DiffLine(6, LineKind.CONTEXT, "import os")
        assert by_index[7] == DiffLine(7, LineKind.REMOVED, 'SECRET = os.environ["SECRET"]')
        assert by_index[8] == DiffLine(8, LineKind.ADDED, 'SECRET = "hunter2"')

    def test_headers_kept_verbatim(self, sample_diff):
        lines = parse_diff(sample_diff)
        assert lines[0].content == "diff --git a/app/auth.py b/app/auth.py"
        assert lines[4].kind == LineKind.HUNK_HEADER
        assert lines[4].content.startswith("@@ -1,4 +1,5 @@")

    def test_blank_line_is_metadata(self, sample_diff):
        lines = parse_diff(sample_diff)
        assert lines[9] == DiffLine(10, LineKind.METADATA, "")

    def test_crlf_stripped(self):
        lines = parse_diff("+a\r\n-b\r\n")
        assert [line.content for line in lines] == ["a", "b"]

    def test_only_one_cr_stripped(self):
        lines = parse_diff("+a\r\r\n+b\r")
        assert [line.content for line in lines] == ["a\r", "b"]

    def test_no_trailing_newline(self):
        lines = parse_diff("+a\n+b")
        assert len(lines) == 2
        assert lines[1].content == "b"

    def test_empty_input(self):
        assert parse_diff("") == []

    def test_interior_blank_lines_counted(self):
        lines = parse_diff("+a\n\n+b\n")
        assert [line.kind for line in lines] == [LineKind.ADDED, LineKind.METADATA, LineKind.ADDED]
        assert lines[2].index == 3

    def test_deterministic(self, sample_diff):
        assert DiffParser(sample_diff).parse() == DiffParser(sample_diff).parse()

    def test_garbage_never_raises(self):
        lines = parse_diff("not a diff\x00 at all\n{}\n")
        assert all(line.kind == LineKind.METADATA for line in lines)


class TestSummaryAndFilters:
    def test_summary_counts(self, sample_diff):
        summary = summarize(parse_diff(sample_diff))
        assert summary.count(LineKind.ADDED) == 4
        assert summary.count(LineKind.REMOVED) == 1
        assert summary.count(LineKind.CONTEXT) == 2
        assert summary.total_lines == len(sample_diff.splitlines())

    def test_summary_files(self, sample_diff):
        summary = summarize(parse_diff(sample_diff))
        assert summary.files == ("app/auth.py", "web/index.js")

    def test_filter_lines(self, sample_diff):
        lines = parse_diff(sample_diff)
        added = filter_lines(lines, [LineKind.ADDED])
        assert len(added) == 4
        assert all(line.kind == LineKind.ADDED for line in added)
