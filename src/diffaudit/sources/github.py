"""GitHub pull-request source — resolve a PR URL to its diff text and metadata."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from diffaudit.config.schema import GitHubConfig
from diffaudit.sources.http import SourceError, base_headers, check_response, open_client

logger = logging.getLogger(__name__)

_PR_URL_RE = re.compile(r"github\.com/([^/\s]+)/([^/\s]+)/pull/(\d+)")


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    def diff_url(self, web_base: str) -> str:
        return f"{web_base.rstrip('/')}/{self.owner}/{self.repo}/pull/{self.number}.diff"

    def api_url(self, api_base: str) -> str:
        return f"{api_base.rstrip('/')}/repos/{self.owner}/{self.repo}/pulls/{self.number}"


@dataclass(frozen=True)
class PullRequestInfo:
    title: str
    number: int
    author: Optional[str]
    url: str
    owner: str
    repo: str


def parse_pr_url(url: str) -> PullRequestRef:
    """Parse ``https://github.com/<owner>/<repo>/pull/<n>``. Raises SourceError."""
    m = _PR_URL_RE.search(url or "")
    if not m:
        raise SourceError(f"Invalid GitHub PR URL format: {url!r}")
    return PullRequestRef(owner=m.group(1), repo=m.group(2), number=int(m.group(3)))


def _api_headers(config: GitHubConfig) -> dict:
    headers = {"Accept": "application/vnd.github+json"}
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    return base_headers(headers)


async def fetch_pr_diff(
    ref: PullRequestRef,
    config: GitHubConfig,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Return the unified diff of the pull request."""
    url = ref.diff_url(config.web_base)
    logger.debug("fetching diff %s", url)
    async with open_client(client, config.timeout) as c:
        try:
            resp = await c.get(url, headers=base_headers({"Accept": "text/plain"}))
        except httpx.HTTPError as exc:
            raise SourceError(f"Failed to fetch PR diff: {exc}") from exc
        check_response(resp, "PR diff")
        return resp.text


async def fetch_pr_info(
    ref: PullRequestRef,
    config: GitHubConfig,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> PullRequestInfo:
    """Return title, author and link of the pull request from the REST API."""
    async with open_client(client, config.timeout) as c:
        try:
            resp = await c.get(ref.api_url(config.api_base), headers=_api_headers(config))
        except httpx.HTTPError as exc:
            raise SourceError(f"Failed to fetch PR metadata: {exc}") from exc
        check_response(resp, "GitHub API")
        try:
            data = resp.json()
        except ValueError as exc:
            raise SourceError("GitHub API returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise SourceError(f"GitHub API returned {type(data).__name__}, expected an object")

    user = data.get("user")
    if not isinstance(user, dict):
        user = {}
    return PullRequestInfo(
        title=data.get("title") or "",
        number=data.get("number") or ref.number,
        author=user.get("login"),
        url=data.get("html_url") or ref.diff_url(config.web_base)[: -len(".diff")],
        owner=ref.owner,
        repo=ref.repo,
    )


async def fetch_pull_request(
    url: str,
    config: GitHubConfig,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Tuple[str, PullRequestInfo]:
    """Resolve *url* and return ``(diff_text, info)``."""
    ref = parse_pr_url(url)
    async with open_client(client, config.timeout) as c:
        diff_text = await fetch_pr_diff(ref, config, client=c)
        info = await fetch_pr_info(ref, config, client=c)
    return diff_text, info
