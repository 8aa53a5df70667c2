"""Replay a recorded analysis stream in fixed-size chunks."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator, Iterable, Union

from diffaudit.sources.http import SourceError


async def replay_chunks(
    data: Union[bytes, str],
    chunk_size: int = 256,
    *,
    delay: float = 0.0,
) -> AsyncIterator[bytes]:
    """Yield *data* as UTF-8 bytes in slices of *chunk_size*.

    Slicing happens on bytes, so multi-byte characters can be split across
    chunks exactly as they would be on the wire.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    raw = data.encode("utf-8") if isinstance(data, str) else data
    for offset in range(0, len(raw), chunk_size):
        yield raw[offset:offset + chunk_size]
        await asyncio.sleep(delay)


async def replay_parts(parts: Iterable[Union[bytes, str]]) -> AsyncIterator[Union[bytes, str]]:
    """Yield pre-split chunks unchanged."""
    for part in parts:
        yield part
        await asyncio.sleep(0)


async def read_chunks(
    path: Union[str, Path],
    chunk_size: int = 256,
    *,
    delay: float = 0.0,
) -> AsyncIterator[bytes]:
    """Replay the contents of a recorded stream file."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise SourceError(f"Cannot read stream file {path}: {exc}") from exc
    async for chunk in replay_chunks(data, chunk_size, delay=delay):
        yield chunk
