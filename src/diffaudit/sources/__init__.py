"""External sources — pull-request diffs, the analysis stream, recorded replays."""

from diffaudit.sources.generator import build_request, stream_analysis
from diffaudit.sources.github import (
    PullRequestInfo,
    PullRequestRef,
    fetch_pr_diff,
    fetch_pr_info,
    fetch_pull_request,
    parse_pr_url,
)
from diffaudit.sources.http import SourceError
from diffaudit.sources.replay import read_chunks, replay_chunks, replay_parts

__all__ = [
    "PullRequestInfo",
    "PullRequestRef",
    "SourceError",
    "build_request",
    "fetch_pr_diff",
    "fetch_pr_info",
    "fetch_pull_request",
    "parse_pr_url",
    "read_chunks",
    "replay_chunks",
    "replay_parts",
    "stream_analysis",
]
