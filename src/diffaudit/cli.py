"""diffaudit CLI — Typer application with analyze, parse, and init commands."""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import aclosing
from pathlib import Path
from typing import AsyncIterable, Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from diffaudit import __version__

app = typer.Typer(
    name="diffaudit",
    help="Stream an AI security review onto a unified diff.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

_SEVERITIES = ("low", "medium", "high")
_FORMATS = ("terminal", "json")


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug, markup=False)],
        force=True,
    )


def _fail(label: str, exc: object) -> typer.Exit:
    console.print(f"[bold red]{label}:[/bold red] {exc}")
    return typer.Exit(code=2)


def _read_diff(diff_file: str) -> str:
    if diff_file == "-":
        return sys.stdin.read()
    try:
        return Path(diff_file).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise _fail("Error", f"cannot read {diff_file}: {exc}") from exc


async def _drive(controller, source: AsyncIterable, on_snapshot: Callable) -> object:
    """Run the controller to completion and return the final snapshot."""
    final = None
    async with aclosing(controller.run(source)) as snapshots:
        async for snapshot in snapshots:
            on_snapshot(snapshot)
            final = snapshot
    return final


# ── analyze ───────────────────────────────────────────────────────────────────


@app.command()
def analyze(
    diff_file: Optional[str] = typer.Argument(None, help="Diff file to analyze, or - for stdin"),
    pr: Optional[str] = typer.Option(None, "--pr", help="GitHub pull request URL"),
    replay: Optional[str] = typer.Option(None, "--replay", help="Replay a recorded analysis stream instead of calling the generator"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .diffaudit.toml"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the JSON report to file"),
    fail_on: Optional[str] = typer.Option(None, "--fail-on", help="Exit 1 when overall risk is at or above: low | medium | high"),
    hide_added: bool = typer.Option(False, "--hide-added", help="Hide added lines"),
    hide_removed: bool = typer.Option(False, "--hide-removed", help="Hide removed lines"),
    hide_context: bool = typer.Option(False, "--hide-context", help="Hide context lines"),
    no_live: bool = typer.Option(False, "--no-live", help="Print only the final result"),
    repair: Optional[bool] = typer.Option(None, "--repair/--no-repair", help="Show partial objects before they close"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug logging"),
) -> None:
    """Analyze a diff and stream the findings onto it."""
    from diffaudit.analysis.models import Severity, severity_at_or_above
    from diffaudit.config.loader import ConfigError, load_config
    from diffaudit.diff.models import LineKind
    from diffaudit.output import json_report, terminal
    from diffaudit.sources.generator import stream_analysis
    from diffaudit.sources.github import fetch_pull_request
    from diffaudit.sources.http import SourceError
    from diffaudit.sources.replay import read_chunks
    from diffaudit.stream.controller import StreamController, TransportError

    _configure_logging(verbose, debug)

    # --- Load config ---
    try:
        cfg = load_config(Path.cwd(), config)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc

    # --- CLI overrides ---
    if format:
        if format not in _FORMATS:
            raise _fail("Invalid format", format)
        cfg.output.format = format  # type: ignore[assignment]
    if fail_on and fail_on not in _SEVERITIES:
        raise _fail("Invalid fail-on level", fail_on)
    if repair is not None:
        cfg.stream.repair_partial = repair
    if hide_added:
        cfg.output.show_added = False
    if hide_removed:
        cfg.output.show_removed = False
    if hide_context:
        cfg.output.show_context = False

    # --- Get diff ---
    pr_info = None
    if pr:
        try:
            diff_text, pr_info = asyncio.run(fetch_pull_request(pr, cfg.github))
        except SourceError as exc:
            raise _fail("GitHub error", exc) from exc
    elif diff_file:
        diff_text = _read_diff(diff_file)
    else:
        raise _fail("Error", "provide a diff file, - for stdin, or --pr URL")

    if not diff_text.strip():
        console.print("[dim]Empty diff — nothing to analyze.[/dim]")
        raise typer.Exit(code=0)

    # --- Pick the stream source ---
    if replay:
        source = read_chunks(replay, cfg.stream.chunk_size)
    elif cfg.generator.is_configured:
        source = stream_analysis(diff_text, cfg.generator)
    else:
        raise _fail("Error", "no generator endpoint configured; set DIFFAUDIT_GENERATOR_URL or use --replay")

    controller = StreamController.from_diff(diff_text, repair_partial=cfg.stream.repair_partial)
    if verbose or debug:
        console.print(f"[dim]Diff lines: {len(controller.lines)}[/dim]")

    kinds = [LineKind.FILE_HEADER, LineKind.HUNK_HEADER, LineKind.METADATA]
    if cfg.output.show_added:
        kinds.append(LineKind.ADDED)
    if cfg.output.show_removed:
        kinds.append(LineKind.REMOVED)
    if cfg.output.show_context:
        kinds.append(LineKind.CONTEXT)

    # --- Run the stream ---
    live = cfg.output.format == "terminal" and cfg.output.live and not no_live and console.is_terminal
    try:
        if live:
            with terminal.LiveRenderer(console=console, kinds=kinds, pr=pr_info) as renderer:
                final = asyncio.run(_drive(controller, source, renderer.update))
        else:
            final = asyncio.run(_drive(controller, source, lambda _snapshot: None))
    except TransportError as exc:
        raise _fail("Stream error", exc) from exc

    if verbose or debug:
        console.print(f"[dim]Chunks received: {controller.chunks_received}[/dim]")

    # --- Output ---
    if cfg.output.format == "json":
        print(json_report.render(final, pr=pr_info))
    elif not live:
        terminal.render(final, console=console, kinds=kinds, pr=pr_info)

    if output:
        Path(output).write_text(json_report.render(final, pr=pr_info), encoding="utf-8")
        if verbose:
            console.print(f"[dim]Report written to {output}[/dim]")

    # --- Exit code ---
    if fail_on and severity_at_or_above(final.analysis.overall_risk, Severity(fail_on)):
        raise typer.Exit(code=1)
    raise typer.Exit(code=0)


# ── parse ─────────────────────────────────────────────────────────────────────


@app.command()
def parse(
    diff_file: str = typer.Argument(..., help="Diff file, or - for stdin"),
) -> None:
    """Show how a diff is classified, line by line."""
    from diffaudit.analysis.correlator import annotate
    from diffaudit.diff.models import LineKind
    from diffaudit.diff.parser import parse_diff, summarize
    from diffaudit.output import terminal

    lines = parse_diff(_read_diff(diff_file))
    console.print(terminal.diff_view(annotate(lines, {})))

    summary = summarize(lines)
    console.print()
    console.print(f"[dim]Lines:[/dim]    {summary.total_lines}")
    console.print(f"[dim]Added:[/dim]    {summary.count(LineKind.ADDED)}")
    console.print(f"[dim]Removed:[/dim]  {summary.count(LineKind.REMOVED)}")
    console.print(f"[dim]Context:[/dim]  {summary.count(LineKind.CONTEXT)}")
    console.print(f"[dim]Files:[/dim]    {', '.join(summary.files) or '-'}")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing .diffaudit.toml"),
) -> None:
    """Generate a starter .diffaudit.toml in the current directory."""
    from diffaudit.config.defaults import DEFAULT_TOML
    from diffaudit.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"diffaudit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """diffaudit — Stream an AI security review onto a unified diff."""
