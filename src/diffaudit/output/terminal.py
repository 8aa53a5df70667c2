"""Rich terminal reporter — annotated diff, scoreboard, issue list."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from diffaudit.analysis.models import Analysis, AnnotatedLine, Issue, Severity, Snapshot
from diffaudit.diff.models import LineKind
from diffaudit.diff.parser import filter_lines
from diffaudit.sources.github import PullRequestInfo

ALL_KINDS: Tuple[LineKind, ...] = tuple(LineKind)

_SEVERITY_STYLE = {
    Severity.HIGH: "bold white on red",
    Severity.MEDIUM: "bold black on yellow",
    Severity.LOW: "bold black on bright_cyan",
}

_SEVERITY_ICON = {
    Severity.HIGH: "🔴",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🔵",
}

_KIND_STYLE = {
    LineKind.FILE_HEADER: "cyan",
    LineKind.HUNK_HEADER: "bold blue",
    LineKind.ADDED: "green",
    LineKind.REMOVED: "red",
    LineKind.CONTEXT: "grey62",
    LineKind.METADATA: "italic grey50",
}

_KIND_MARKER = {
    LineKind.ADDED: "+",
    LineKind.REMOVED: "-",
    LineKind.CONTEXT: " ",
}

_MATCH_STYLE = {
    Severity.HIGH: "on grey23",
    Severity.MEDIUM: "on grey15",
    Severity.LOW: "on grey11",
}


def _severity_pill(severity: Severity) -> Text:
    style = _SEVERITY_STYLE.get(severity, "")
    icon = _SEVERITY_ICON.get(severity, "")
    return Text(f" {icon} {severity.value.upper()} ", style=style)


def _diff_row(item: AnnotatedLine) -> Text:
    line = item.line
    style = _KIND_STYLE[line.kind]
    if item.issue is not None:
        style = f"{style} {_MATCH_STYLE[item.issue.severity]}"

    text = Text(f"{line.index:>5} ", style="dim")
    marker = _KIND_MARKER.get(line.kind)
    if marker is not None:
        text.append(f"{marker} ", style=style)
    text.append(line.content, style=style)

    if item.issue is not None:
        text.append("  ")
        text.append_text(_severity_pill(item.issue.severity))
        text.append(f" {item.issue.category}", style="yellow")
    return text


def diff_view(
    annotated: Iterable[AnnotatedLine],
    *,
    kinds: Iterable[LineKind] = ALL_KINDS,
    issue_count: int = 0,
) -> Panel:
    # Headers are always shown so filtered views keep their file context
    shown = set(kinds) | {LineKind.FILE_HEADER, LineKind.HUNK_HEADER}
    items = filter_lines(annotated, shown)
    body = Text("\n").join(_diff_row(item) for item in items) if items else Text("(empty diff)", style="dim")
    subtitle = f"{issue_count} issue{'s' if issue_count != 1 else ''} found" if issue_count else None
    return Panel(body, title="Code Diff", subtitle=subtitle, border_style="dim")


def scoreboard(analysis: Analysis, *, streaming: bool = False) -> Table:
    stats = analysis.statistics
    title = Text("Security Scoreboard ")
    title.append_text(_severity_pill(analysis.overall_risk))
    title.append(" risk")
    if streaming:
        title.append("  ● streaming", style="blue")

    table = Table(title=title, title_style="bold", border_style="dim", expand=False)
    table.add_column("Total Issues", justify="center")
    table.add_column("High Risk", justify="center", style="red")
    table.add_column("Medium Risk", justify="center", style="yellow")
    table.add_column("Low Risk", justify="center", style="cyan")
    table.add_row(
        str(stats.total_issues),
        str(stats.high_risk),
        str(stats.medium_risk),
        str(stats.low_risk),
    )
    return table


def _issue_row(issue: Issue) -> Tuple[RenderableType, ...]:
    return (
        _severity_pill(issue.severity),
        issue.category or "-",
        issue.location,
        issue.description,
        issue.recommendation or "-",
    )


def issues_table(analysis: Analysis) -> Table:
    table = Table(
        title="Security Issues",
        show_lines=True,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("Severity", justify="center", width=12)
    table.add_column("Category", style="cyan", min_width=12)
    table.add_column("Location", style="magenta")
    table.add_column("Finding", min_width=20)
    table.add_column("Recommendation", style="green", min_width=20)
    for issue in analysis.issues:
        table.add_row(*_issue_row(issue))
    return table


def build(
    snapshot: Snapshot,
    *,
    kinds: Iterable[LineKind] = ALL_KINDS,
    pr: Optional[PullRequestInfo] = None,
) -> Group:
    """Assemble every panel for *snapshot* into one renderable."""
    analysis = snapshot.analysis
    parts: list = []
    if pr is not None:
        parts.append(
            Text.assemble(
                (f"#{pr.number} ", "bold"),
                (pr.title, "bold"),
                (f"  by {pr.author or 'unknown'}  ", "dim"),
                (pr.url, "underline blue"),
            )
        )
    parts.append(diff_view(snapshot.annotated_lines, kinds=kinds, issue_count=len(analysis.issues)))
    parts.append(scoreboard(analysis, streaming=not snapshot.is_final))
    if analysis.summary:
        parts.append(Panel(Text(analysis.summary), title="Summary", border_style="magenta"))
    if analysis.issues:
        parts.append(issues_table(analysis))
    return Group(*parts)


def render(
    snapshot: Snapshot,
    *,
    console: Optional[Console] = None,
    kinds: Iterable[LineKind] = ALL_KINDS,
    pr: Optional[PullRequestInfo] = None,
) -> None:
    """Print *snapshot* once."""
    console = console or Console()
    console.print(build(snapshot, kinds=kinds, pr=pr))


class LiveRenderer:
    """Re-render the latest snapshot in place while the stream is running."""

    def __init__(
        self,
        *,
        console: Optional[Console] = None,
        kinds: Iterable[LineKind] = ALL_KINDS,
        pr: Optional[PullRequestInfo] = None,
    ) -> None:
        self._kinds = tuple(kinds)
        self._pr = pr
        self._live = Live(
            Text("Scanning your code...", style="bold blue"),
            console=console or Console(),
            refresh_per_second=8,
            transient=False,
        )

    def __enter__(self) -> "LiveRenderer":
        self._live.__enter__()
        return self

    def __exit__(self, *exc_info) -> None:
        self._live.__exit__(*exc_info)

    def update(self, snapshot: Snapshot) -> None:
        self._live.update(build(snapshot, kinds=self._kinds, pr=self._pr), refresh=True)
