"""Screening decomposition for cinesched.

Splits a screening into contiguous, ordered sub-blocks (pre-show advertising,
feature, post-show cleaning) and derives the full span it occupies in a room.
"""

from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from cinesched.models.schedule_entry import ScheduleEntry
from cinesched.models.time_block import BlockKind, Span, TimeBlock


def decompose(start: datetime, durations: Sequence[Tuple[str, int]]) -> List[TimeBlock]:
    """Lay named durations end to end starting at `start`.

    No validation of `start` is done: blocks may roll past midnight, and the
    caller decides what that means for the calendar date.

    Args:
        start: Start instant of the first block
        durations: Ordered (name, minutes) pairs

    Returns:
        One TimeBlock per duration, each starting where the previous one ended
    """
    blocks: List[TimeBlock] = []
    cursor = start
    for name, minutes in durations:
        end = cursor + timedelta(minutes=minutes)
        blocks.append(TimeBlock(kind=name, start=cursor, end=end))
        cursor = end
    return blocks


def screening_blocks(
    start: datetime,
    feature_minutes: int,
    pre_show_minutes: int,
    post_show_minutes: int,
) -> List[TimeBlock]:
    """Decompose a screening into PRE_SHOW, FEATURE and POST_SHOW blocks."""
    return decompose(
        start,
        [
            (BlockKind.PRE_SHOW.value, pre_show_minutes),
            (BlockKind.FEATURE.value, feature_minutes),
            (BlockKind.POST_SHOW.value, post_show_minutes),
        ],
    )


def span_of(blocks: Sequence[TimeBlock], label: str = None, ref: str = None) -> Span:
    """Union of contiguous blocks: first start through last end."""
    if not blocks:
        raise ValueError("Cannot take the span of zero blocks")
    return Span(start=blocks[0].start, end=blocks[-1].end, label=label, ref=ref)


def entry_blocks(entry: ScheduleEntry) -> List[TimeBlock]:
    return screening_blocks(
        entry.starts_at,
        entry.movie_duration_min,
        entry.pre_show_min,
        entry.post_show_min,
    )


def entry_span(entry: ScheduleEntry) -> Span:
    """Full occupied span of an entry, labelled for conflict messages."""
    label = entry.movie_title or f"movie {entry.movie_id}"
    return span_of(entry_blocks(entry), label=label, ref=str(entry.id))
