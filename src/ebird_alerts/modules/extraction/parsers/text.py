"""
Marker-delimited extraction primitives.

Every primitive either returns a `Span` over the input or raises the error type
it was given. None of them ever hands back a slice computed from a missing
marker.
"""

from __future__ import annotations

from dataclasses import dataclass

from ebird_alerts.modules.extraction.errors import DigestParseError, FieldExtractionError


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    value: str


def find_marker(
    text: str,
    marker: str,
    *,
    pos: int = 0,
    error: type[DigestParseError] = FieldExtractionError,
) -> int:
    """Return the offset of the first `marker` at or after `pos`."""
    idx = text.find(marker, pos)
    if idx < 0:
        raise error(f"Marker not found: {marker!r}")
    return idx


def after(
    text: str,
    marker: str,
    *,
    pos: int = 0,
    error: type[DigestParseError] = FieldExtractionError,
    allow_empty: bool = False,
) -> Span:
    """Everything after the first `marker` at or after `pos`, stripped."""
    start = find_marker(text, marker, pos=pos, error=error) + len(marker)
    return _span(text, start, len(text), marker=marker, error=error, allow_empty=allow_empty)


def between(
    text: str,
    start_marker: str,
    end_marker: str,
    *,
    pos: int = 0,
    error: type[DigestParseError] = FieldExtractionError,
    allow_empty: bool = False,
    strip: bool = True,
) -> Span:
    """The text between `start_marker` and the next `end_marker` after it."""
    start = find_marker(text, start_marker, pos=pos, error=error) + len(start_marker)
    end = find_marker(text, end_marker, pos=start, error=error)
    return _span(
        text, start, end, marker=start_marker, error=error, allow_empty=allow_empty, strip=strip
    )


def paren_groups(text: str) -> list[Span]:
    """
    Top-level balanced parenthetical groups, in order of appearance.

    Nested parentheses stay inside the enclosing group. A stray closing
    parenthesis is ignored, and an unclosed group at the end is not reported.
    """
    groups: list[Span] = []
    depth = 0
    open_at = -1
    for idx, ch in enumerate(text):
        if ch == "(":
            if depth == 0:
                open_at = idx
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
            if depth == 0:
                groups.append(Span(open_at, idx + 1, text[open_at + 1 : idx].strip()))
    return groups


def _span(
    text: str,
    start: int,
    end: int,
    *,
    marker: str,
    error: type[DigestParseError],
    allow_empty: bool,
    strip: bool = True,
) -> Span:
    value = text[start:end]
    if strip:
        value = value.strip()
    if not value and not allow_empty:
        raise error(f"Empty value after marker: {marker!r}")
    return Span(start, end, value)
