"""Shared httpx plumbing for the remote sources."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx

from diffaudit import __version__

USER_AGENT = f"diffaudit/{__version__}"


class SourceError(Exception):
    """Raised when a remote source is unreachable or answers with an error."""


def base_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    headers = {"User-Agent": USER_AGENT}
    if extra:
        headers.update(extra)
    return headers


@asynccontextmanager
async def open_client(
    client: Optional[httpx.AsyncClient], timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* as-is, or a fresh AsyncClient closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as fresh:
        yield fresh


def check_response(resp: httpx.Response, what: str) -> None:
    """Raise SourceError with the response body if *resp* is not 2xx."""
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        try:
            detail = resp.text.strip()[:300]
        except httpx.ResponseNotRead:
            detail = ""
        message = f"{what} returned {resp.status_code}"
        if detail:
            message = f"{message}: {detail}"
        raise SourceError(message) from exc
