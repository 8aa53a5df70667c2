"""Streaming — chunk accumulation, partial object extraction, controller."""

from diffaudit.stream.accumulator import ChunkAccumulator
from diffaudit.stream.controller import (
    StreamController,
    StreamState,
    TransportError,
    collect,
)
from diffaudit.stream.extractor import PartialObjectExtractor, close_partial, extract

__all__ = [
    "ChunkAccumulator",
    "PartialObjectExtractor",
    "StreamController",
    "StreamState",
    "TransportError",
    "close_partial",
    "collect",
    "extract",
]
