"""Request and response models for the cinesched HTTP API."""

from datetime import date, time
from typing import List, Optional
from pydantic import BaseModel, Field

from cinesched.models.batch import CandidatePreview
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntry, ShowtimeStatus


class ShowtimeResponse(BaseModel):
    """A stored showtime as sent over the wire (identity flattened to an int)."""

    id: int
    movie_id: int
    room_id: int
    theater_id: Optional[int] = None
    show_date: date
    start_time: time
    base_price: int
    status: ShowtimeStatus = ShowtimeStatus.AVAILABLE
    movie_duration_min: int
    pre_show_min: int = 20
    post_show_min: int = 15
    movie_title: Optional[str] = None
    room_name: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @classmethod
    def from_entry(cls, entry: ScheduleEntry) -> "ShowtimeResponse":
        data = entry.model_dump()
        data["id"] = entry.id.value
        return cls(**data)

    def to_entry(self) -> ScheduleEntry:
        data = self.model_dump()
        data["id"] = PersistedId(value=self.id)
        return ScheduleEntry(**data)


class BatchPreviewResponse(BaseModel):
    """Generated candidates plus every validation message."""

    candidates: List[CandidatePreview] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
