"""Live placement preview for the interactive timeline.

The hover/drag position is an explicit value (InteractionState). Computing a
preview from it is pure: no working-set mutation happens until a drop is
turned into a create or move by the scheduling session.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional
from pydantic import BaseModel, Field

from cinesched.engine.coordinates import CoordinateMapper
from cinesched.engine.overlap import ConflictResult, check
from cinesched.engine.time_blocks import screening_blocks, span_of
from cinesched.models.constants import (
    DEFAULT_FEATURE_MINUTES,
    DEFAULT_POST_SHOW_MINUTES,
    DEFAULT_PRE_SHOW_MINUTES,
)
from cinesched.models.time_block import Span, TimeBlock


class DragKind(str, Enum):
    """What is being dragged over the timeline."""
    MOVIE = "movie"  # New screening from the movie sidebar
    SHOWTIME = "showtime"  # Existing screening being moved


class DragSubject(BaseModel):
    """Thing under the pointer."""

    kind: DragKind
    feature_minutes: int = Field(DEFAULT_FEATURE_MINUTES, gt=0)
    title: Optional[str] = None
    entry_ref: Optional[str] = Field(None, description="Identity of the screening being moved")

    class Config:
        """Pydantic configuration."""
        frozen = True


class InteractionState(BaseModel):
    """Pointer position over one room's row, plus what (if anything) is dragged."""

    room_id: int
    pointer: float = Field(..., description="Pointer coordinate along the time axis")
    subject: Optional[DragSubject] = None

    class Config:
        """Pydantic configuration."""
        frozen = True


class BlockGeometry(BaseModel):
    """A block's position on the spatial axis."""

    kind: str
    offset: float
    width: float


class PlacementPreview(BaseModel):
    """Phantom screening under the pointer."""

    room_id: int
    start: datetime
    blocks: List[TimeBlock]
    span: Span
    offset: float
    width: float
    geometry: List[BlockGeometry]
    title: Optional[str] = None
    conflict: ConflictResult


def compute_preview(
    state: InteractionState,
    mapper: CoordinateMapper,
    spans_by_room: Dict[int, Iterable[Span]],
    selected_feature_minutes: Optional[int] = None,
    selected_title: Optional[str] = None,
    pre_show_minutes: int = DEFAULT_PRE_SHOW_MINUTES,
    post_show_minutes: int = DEFAULT_POST_SHOW_MINUTES,
) -> Optional[PlacementPreview]:
    """Snap the pointer, decompose the screening it implies and check it for conflicts.

    A drag subject takes priority over the selected movie (hover mode). With
    neither there is nothing to preview and None is returned.
    """
    subject = state.subject
    if subject is not None:
        feature_minutes = subject.feature_minutes
        title = subject.title
        ref = subject.entry_ref if subject.kind == DragKind.SHOWTIME else None
    elif selected_feature_minutes is not None:
        feature_minutes = selected_feature_minutes
        title = selected_title
        ref = None
    else:
        return None

    start = mapper.to_instant(state.pointer)
    blocks = screening_blocks(start, feature_minutes, pre_show_minutes, post_show_minutes)
    span = span_of(blocks, label=title, ref=ref)
    geometry = [
        BlockGeometry(kind=b.kind, offset=mapper.to_spatial(b.start), width=mapper.width(b.minutes))
        for b in blocks
    ]

    return PlacementPreview(
        room_id=state.room_id,
        start=start,
        blocks=blocks,
        span=span,
        offset=mapper.to_spatial(span.start),
        width=mapper.width(span.minutes),
        geometry=geometry,
        title=title,
        conflict=check(span, spans_by_room.get(state.room_id, [])),
    )
