"""Quick-schedule (batch generation) models for cinesched."""

from datetime import date, time
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from cinesched.models.schedule_entry import ScheduleEntryPayload, ShowtimeStatus
from cinesched.models.time_block import Span, TimeBlock


class BatchSpec(BaseModel):
    """Cross-product generation request: date range x rooms x time slots.

    Deliberately permissive: an empty room list or an inverted date range is
    reported by validate_batch_spec() together with every other problem.
    """

    movie_id: Optional[int] = Field(None, description="Movie to schedule")
    room_ids: List[int] = Field(default_factory=list, description="Rooms to schedule into")
    start_date: date = Field(..., description="First date (inclusive)")
    end_date: date = Field(..., description="Last date (inclusive)")
    time_slots: List[time] = Field(default_factory=list, description="Start times-of-day")
    base_price: Optional[int] = Field(None, ge=0, description="Explicit price; overrides the room category price")
    pre_show_min: int = Field(20, ge=0, description="Advertising before the feature")
    post_show_min: int = Field(15, ge=0, description="Cleaning after the feature")

    @field_validator("room_ids")
    @classmethod
    def _dedupe_room_ids(cls, v):
        # Deduplicate but preserve order
        seen = set()
        out: List[int] = []
        for room_id in v:
            if room_id not in seen:
                seen.add(room_id)
                out.append(room_id)
        return out

    @field_validator("time_slots")
    @classmethod
    def _sort_time_slots(cls, v):
        return sorted(set(v))

    @property
    def day_count(self) -> int:
        return max(0, (self.end_date - self.start_date).days + 1)


class CandidatePreview(BaseModel):
    """One generated screening, with its derived span, price and conflict status."""

    room_id: int
    theater_id: Optional[int] = None
    movie_id: int
    show_date: date
    start_time: time
    blocks: List[TimeBlock] = Field(default_factory=list)
    span: Span
    base_price: int
    conflict: bool = False
    conflict_message: Optional[str] = None

    def to_payload(self) -> ScheduleEntryPayload:
        return ScheduleEntryPayload(
            movie_id=self.movie_id,
            room_id=self.room_id,
            theater_id=self.theater_id,
            show_date=self.show_date,
            start_time=self.start_time,
            base_price=self.base_price,
            status=ShowtimeStatus.AVAILABLE,
        )


class BatchCreateResult(BaseModel):
    """Store response to a batch-create request."""

    total_created: int = 0
    errors: List[str] = Field(default_factory=list)
