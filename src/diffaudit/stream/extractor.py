"""Partial object extraction from a growing stream buffer.

The buffer is invalid JSON until the last chunk arrives and may be wrapped
in prose or a fenced code block. Scanning starts at the first ``{`` and
tracks brace depth while honouring string literals and escapes, so braces
inside quoted text never count. The candidate ends where the depth first
returns to zero; anything after it is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

# Characters that matter outside / inside a string literal
_OUTSIDE = re.compile(r'[{}"]')
_INSIDE = re.compile(r'["\\]')
_PARTIAL_UNICODE_ESCAPE = re.compile(r"(?<!\\)((?:\\\\)*)\\u[0-9a-fA-F]{0,3}$")


@dataclass
class _ScanState:
    start: Optional[int] = None  # index of the first '{'
    pos: int = 0  # next index to scan
    depth: int = 0
    in_string: bool = False
    escape: bool = False  # a backslash was the last char scanned
    end: Optional[int] = None  # exclusive end of the closed candidate


def _advance(text: str, st: _ScanState) -> None:
    """Scan *text* from ``st.pos`` to the end (or until the object closes)."""
    if st.end is not None:
        return
    n = len(text)
    i = st.pos
    if st.start is None:
        i = text.find("{", i)
        if i < 0:
            st.pos = n
            return
        st.start = i
    if st.escape and i < n:
        st.escape = False
        i += 1

    while i < n:
        if st.in_string:
            m = _INSIDE.search(text, i)
            if m is None:
                i = n
                break
            i = m.start()
            if text[i] == "\\":
                if i + 1 >= n:
                    st.escape = True
                    i = n
                    break
                i += 2
                continue
            st.in_string = False
            i += 1
            continue

        m = _OUTSIDE.search(text, i)
        if m is None:
            i = n
            break
        i = m.start()
        ch = text[i]
        if ch == '"':
            st.in_string = True
        elif ch == "{":
            st.depth += 1
        else:
            st.depth -= 1
            if st.depth == 0:
                st.end = i + 1
                st.pos = st.end
                return
        i += 1

    st.pos = i


def _candidate(text: str, st: _ScanState) -> Optional[str]:
    if st.end is None or st.start is None:
        return None
    return text[st.start:st.end]


def extract(text: str) -> Optional[str]:
    """Return the first brace-balanced object in *text*, or None if not closed yet."""
    st = _ScanState()
    _advance(text, st)
    return _candidate(text, st)


class PartialObjectExtractor:
    """Resumable ``extract`` for a buffer that only ever grows.

    Each call scans only the text appended since the previous call. If the
    buffer handed in is not an extension of the previous one the scan starts
    over, so the result always equals ``extract(text)``.
    """

    def __init__(self) -> None:
        self._state = _ScanState()
        self._seen = ""

    def reset(self) -> None:
        self._state = _ScanState()
        self._seen = ""

    def extract(self, text: str) -> Optional[str]:
        if len(text) < len(self._seen) or not text.startswith(self._seen):
            self.reset()
        self._seen = text
        _advance(text, self._state)
        return _candidate(text, self._state)


def close_partial(text: str) -> Optional[str]:
    """Best-effort closure of an unfinished object.

    Cuts the text back to the last complete value (or closes a string value
    still being written) and appends the closers of every open container.
    Returns the balanced candidate unchanged when the object is already
    closed, and None when there is no ``{`` at all. The result is only a
    guess and may still fail to parse.
    """
    start = text.find("{")
    if start < 0:
        return None

    # frames are [closer, expecting_key]
    stack: List[list] = []
    safe_end: Optional[int] = None
    safe_closers = ""
    in_string = escape = in_literal = False
    string_is_value = False

    def closers() -> str:
        return "".join(frame[0] for frame in reversed(stack))

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
                if string_is_value:
                    safe_end, safe_closers = i + 1, closers()
            continue

        if in_literal and (ch in ",}]" or ch.isspace()):
            in_literal = False
            safe_end, safe_closers = i, closers()

        if ch == '"':
            in_string = True
            top = stack[-1] if stack else None
            string_is_value = not (top is not None and top[0] == "}" and top[1])
        elif ch in "{[":
            stack.append(["}" if ch == "{" else "]", ch == "{"])
            safe_end, safe_closers = i + 1, closers()
        elif ch in "}]":
            if stack:
                stack.pop()
            if not stack:
                return text[start:i + 1]
            safe_end, safe_closers = i + 1, closers()
        elif ch == ",":
            if stack and stack[-1][0] == "}":
                stack[-1][1] = True
        elif ch == ":":
            if stack:
                stack[-1][1] = False
        elif not ch.isspace():
            in_literal = True

    if in_string and string_is_value:
        body = text[start:]
        if escape:
            body = body[:-1]
        # keep escaped backslashes, drop only the unfinished \u escape
        body = _PARTIAL_UNICODE_ESCAPE.sub(r"\1", body)
        return body + '"' + closers()
    if safe_end is None:
        return None
    return text[start:safe_end] + safe_closers
