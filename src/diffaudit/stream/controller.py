"""Stream controller — drives one analysis request from bytes to snapshots.

State machine::

    idle -> reading -> draining -> done
               \\          \\
                +----------+--> errored   (source failure only)

Parse problems never stop the stream: a chunk whose buffer yields no
usable candidate simply produces no snapshot. Only a failure of the byte
source itself ends the request early, as a TransportError.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import AsyncIterable, AsyncIterator, List, Optional, Sequence, Tuple, Union

from diffaudit.analysis.coercer import ParseFailure, coerce
from diffaudit.analysis.correlator import annotate, correlate
from diffaudit.analysis.models import Analysis, AnnotatedLine, Snapshot
from diffaudit.diff.models import DiffLine
from diffaudit.diff.parser import parse_diff
from diffaudit.stream.accumulator import ChunkAccumulator
from diffaudit.stream.extractor import PartialObjectExtractor, close_partial

logger = logging.getLogger(__name__)

Chunk = Union[bytes, bytearray, str]


class TransportError(Exception):
    """Raised when the byte source fails. Terminal for the request."""


class StreamState(str, Enum):
    IDLE = "idle"
    READING = "reading"
    DRAINING = "draining"
    DONE = "done"
    ERRORED = "errored"


class StreamController:
    """Turn a chunked analysis stream into a sequence of Snapshots.

    One controller serves exactly one request: it owns its accumulator and
    extractor, and ``run`` may only be called once. To cancel, stop
    iterating and close the generator (``contextlib.aclosing`` does this);
    the source is closed too. Snapshots already emitted stay valid.
    """

    def __init__(self, lines: Sequence[DiffLine], *, repair_partial: bool = False) -> None:
        self._lines: Tuple[DiffLine, ...] = tuple(lines)
        self._repair_partial = repair_partial
        self._accumulator = ChunkAccumulator()
        self._extractor = PartialObjectExtractor()
        self._state = StreamState.IDLE
        self._last_analysis: Optional[Analysis] = None
        self._last_candidate: Optional[str] = None
        self._last_annotated: Tuple[AnnotatedLine, ...] = ()
        self._chunks = 0
        self._cancelled = False

    @classmethod
    def from_diff(cls, diff_text: str, **kwargs) -> "StreamController":
        return cls(parse_diff(diff_text), **kwargs)

    # ---- inspection ----

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def lines(self) -> Tuple[DiffLine, ...]:
        return self._lines

    @property
    def buffer(self) -> str:
        return self._accumulator.text

    @property
    def last_analysis(self) -> Optional[Analysis]:
        return self._last_analysis

    @property
    def chunks_received(self) -> int:
        return self._chunks

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    # ---- per-chunk pipeline ----

    def _find_candidate(self, text: str) -> Optional[str]:
        candidate = self._extractor.extract(text)
        if candidate is None and self._repair_partial:
            candidate = close_partial(text)
        return candidate

    def _update(self, text: str) -> Optional[Snapshot]:
        """Run extract -> coerce -> correlate on *text*; None means no update."""
        candidate = self._find_candidate(text)
        if candidate is None:
            return None

        if candidate == self._last_candidate and self._last_analysis is not None:
            analysis = self._last_analysis
            annotated = self._last_annotated
        else:
            result = coerce(candidate)
            if isinstance(result, ParseFailure):
                logger.debug("chunk %d: candidate rejected (%s)", self._chunks, result.reason)
                return None
            analysis = result
            annotated = annotate(self._lines, correlate(self._lines, analysis.issues))
            self._last_candidate = candidate
            self._last_analysis = analysis
            self._last_annotated = annotated

        return Snapshot(analysis=analysis, annotated_lines=annotated, is_final=False)

    def _final_snapshot(self) -> Snapshot:
        snapshot = self._update(self._accumulator.finish())
        if snapshot is not None:
            return Snapshot(
                analysis=snapshot.analysis,
                annotated_lines=snapshot.annotated_lines,
                is_final=True,
            )
        if self._last_analysis is not None:
            return Snapshot(
                analysis=self._last_analysis,
                annotated_lines=self._last_annotated,
                is_final=True,
            )
        logger.debug("stream ended without a usable object; using defaults")
        empty = Analysis()
        return Snapshot(
            analysis=empty,
            annotated_lines=annotate(self._lines, {}),
            is_final=True,
        )

    # ---- driver ----

    async def run(self, source: AsyncIterable[Chunk]) -> AsyncIterator[Snapshot]:
        """Consume *source* and yield one snapshot per successfully parsed chunk,
        then a final snapshot with ``is_final=True``.

        Raises TransportError if *source* fails.
        """
        if self._state is not StreamState.IDLE:
            raise RuntimeError(f"controller already used (state={self._state.value})")

        self._state = StreamState.READING
        iterator = source.__aiter__()
        try:
            while True:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    self._state = StreamState.ERRORED
                    logger.warning("stream source failed after %d chunks: %s", self._chunks, exc)
                    raise TransportError(f"stream source failed: {exc}") from exc

                self._chunks += 1
                snapshot = self._update(self._accumulator.append(chunk))
                if snapshot is not None:
                    yield snapshot

            self._state = StreamState.DRAINING
            final = self._final_snapshot()
            self._state = StreamState.DONE
            logger.debug(
                "stream done: %d chunks, %d issues", self._chunks, len(final.analysis.issues)
            )
            yield final
        finally:
            if self._state in (StreamState.READING, StreamState.DRAINING):
                self._cancelled = True
            await _close_source(iterator)


async def _close_source(iterator) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as exc:
        logger.debug("error while closing stream source: %s", exc)


async def collect(controller: StreamController, source: AsyncIterable[Chunk]) -> List[Snapshot]:
    """Run *controller* over *source* and return every snapshot."""
    return [snapshot async for snapshot in controller.run(source)]
