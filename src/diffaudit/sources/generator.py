"""Analysis generator source — stream the raw response of a completion endpoint.

The endpoint receives the review request as JSON and answers with a plain
text stream containing the analysis object. Nothing here parses that text;
chunks are handed over untouched to the StreamController.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from diffaudit.config.schema import GeneratorConfig
from diffaudit.sources.http import SourceError, base_headers, check_response, open_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a Senior Security Engineer analyzing Git diffs for security vulnerabilities.\n"
    "Your response must be a valid JSON object matching the requested schema."
)

_SEVERITY_ENUM = {"type": "string", "enum": ["high", "medium", "low"]}

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "overallRisk": _SEVERITY_ENUM,
        "issues": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "severity": _SEVERITY_ENUM,
                    "category": {"type": "string"},
                    "description": {"type": "string"},
                    "lineNumber": {"type": ["integer", "null"]},
                    "filePath": {"type": ["string", "null"]},
                    "recommendation": {"type": "string"},
                },
                "required": [
                    "severity",
                    "category",
                    "description",
                    "lineNumber",
                    "filePath",
                    "recommendation",
                ],
            },
        },
        "statistics": {
            "type": "object",
            "properties": {
                "totalIssues": {"type": "integer"},
                "highRisk": {"type": "integer"},
                "mediumRisk": {"type": "integer"},
                "lowRisk": {"type": "integer"},
            },
        },
    },
    "required": ["summary", "overallRisk"],
}


def build_prompt(diff_text: str, max_chars: int) -> str:
    """User prompt with the diff truncated to *max_chars* characters."""
    return (
        "Analyze the following Git diff for security vulnerabilities:\n\n"
        f"{diff_text[:max_chars]}"
    )


def build_request(diff_text: str, config: GeneratorConfig) -> Dict[str, Any]:
    """JSON body sent to the generator endpoint."""
    return {
        "model": config.model,
        "system": SYSTEM_PROMPT,
        "prompt": build_prompt(diff_text, config.max_diff_chars),
        "schema": RESPONSE_SCHEMA,
        "stream": True,
    }


def _headers(config: GeneratorConfig) -> Dict[str, str]:
    headers = {"Accept": "text/plain", "Content-Type": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    return base_headers(headers)


async def stream_analysis(
    diff_text: str,
    config: GeneratorConfig,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[bytes]:
    """Yield raw byte chunks of the generator's response as they arrive."""
    if not config.is_configured:
        raise SourceError("No generator endpoint configured (set generator.endpoint)")

    payload = build_request(diff_text, config)
    logger.debug(
        "requesting analysis from %s (model=%s, %d diff chars)",
        config.endpoint,
        config.model,
        min(len(diff_text), config.max_diff_chars),
    )
    async with open_client(client, config.timeout) as c:
        try:
            async with c.stream(
                "POST", config.endpoint, json=payload, headers=_headers(config)
            ) as resp:
                if resp.status_code >= 400:
                    await resp.aread()
                    check_response(resp, "Generator")
                async for chunk in resp.aiter_bytes():
                    if chunk:
                        yield chunk
        except httpx.HTTPError as exc:
            raise SourceError(f"Generator stream failed: {exc}") from exc
