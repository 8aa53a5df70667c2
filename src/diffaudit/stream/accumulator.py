"""Chunk accumulator — one growing text buffer per analysis request."""

from __future__ import annotations

import codecs
from typing import Union


class ChunkAccumulator:
    """Decode incoming chunks and keep the full text seen so far.

    Decoding is incremental, so a multi-byte UTF-8 sequence split across two
    chunks is held back until its last byte arrives instead of being
    replaced. Undecodable bytes become U+FFFD.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._text = ""
        self._finished = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def finished(self) -> bool:
        return self._finished

    def append(self, chunk: Union[bytes, bytearray, str]) -> str:
        """Add *chunk* and return the current full buffer."""
        if self._finished:
            raise RuntimeError("accumulator already finished")
        if isinstance(chunk, str):
            # flush held-back bytes first so text stays in arrival order
            self._text += self._decoder.decode(b"", final=True) + chunk
        else:
            self._text += self._decoder.decode(bytes(chunk))
        return self._text

    def finish(self) -> str:
        """Flush any bytes still held by the decoder. Call once at end of stream."""
        if not self._finished:
            self._text += self._decoder.decode(b"", final=True)
            self._finished = True
        return self._text
