"""Overlap detection for screenings sharing a room.

Spans are half-open: [09:00, 11:00) and [11:00, 12:00) touch but do not conflict.
"""

from typing import Iterable, List, Literal, Optional, Sequence, Tuple, Union
from pydantic import BaseModel

from cinesched.models.time_block import Span


class NoConflict(BaseModel):
    """The candidate fits."""

    conflict: Literal[False] = False

    def __bool__(self) -> bool:
        return False


class Conflict(BaseModel):
    """The candidate collides with `with_span`."""

    conflict: Literal[True] = True
    with_span: Span
    message: str

    def __bool__(self) -> bool:
        return True


ConflictResult = Union[NoConflict, Conflict]


def spans_overlap(a: Span, b: Span) -> bool:
    """Half-open interval intersection. Empty spans occupy nothing."""
    return a.start < a.end and b.start < b.end and a.start < b.end and b.start < a.end


def _is_self(candidate: Span, other: Span) -> bool:
    return candidate.ref is not None and candidate.ref == other.ref


def conflict_message(with_span: Span) -> str:
    return f"Overlaps {with_span.describe()}"


def check(candidate: Span, existing: Iterable[Span]) -> ConflictResult:
    """Check a candidate span against a room's existing spans.

    Spans sharing the candidate's `ref` are the candidate itself (e.g. an entry
    being moved) and are skipped. The earliest-starting collision is reported.

    Args:
        candidate: Span being placed
        existing: Spans already occupying the room

    Returns:
        NoConflict, or Conflict naming the existing span hit
    """
    for other in sorted(existing, key=lambda s: (s.start, s.end)):
        if _is_self(candidate, other):
            continue
        if spans_overlap(candidate, other):
            return Conflict(with_span=other, message=conflict_message(other))
    return NoConflict()


def sweep(spans: Sequence[Span]) -> List[Optional[Span]]:
    """Classify every span against all the others in O(N log N).

    Sorts by start and keeps the open span (largest end seen so far). A span
    starting before the open span's end collides with it; the open span is
    then marked as colliding too, so the per-span classification matches a
    pairwise comparison. Empty spans occupy nothing and never collide.

    Returns:
        For each input span (same order), the span it collides with, or None
    """
    order = sorted(range(len(spans)), key=lambda i: (spans[i].start, spans[i].end))
    partners: List[Optional[Span]] = [None] * len(spans)
    open_idx: Optional[int] = None

    for i in order:
        span = spans[i]
        if span.start >= span.end:
            continue
        if open_idx is not None and span.start < spans[open_idx].end:
            partners[i] = spans[open_idx]
            if partners[open_idx] is None:
                partners[open_idx] = span
        if open_idx is None or span.end > spans[open_idx].end:
            open_idx = i

    return partners


def first_conflict(spans: Sequence[Span]) -> Optional[Tuple[Span, Span]]:
    """First span (in start order) that starts before the open span ends.

    Returns:
        (span, open_span) for the first collision, or None
    """
    open_span: Optional[Span] = None
    for span in sorted(spans, key=lambda s: (s.start, s.end)):
        if span.start >= span.end:
            continue
        if open_span is not None and span.start < open_span.end:
            return span, open_span
        if open_span is None or span.end > open_span.end:
            open_span = span
    return None
