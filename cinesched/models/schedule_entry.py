"""ScheduleEntry data models for cinesched."""

from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from cinesched.models.identity import Identity


class ShowtimeStatus(str, Enum):
    """Showtime status enumeration."""
    AVAILABLE = "AVAILABLE"
    SOLD_OUT = "SOLD_OUT"
    CANCELLED = "CANCELLED"  # Does not occupy its room


class Provenance(str, Enum):
    """How a working-set entry differs from the baseline."""
    UNCHANGED = "unchanged"
    CREATED = "created"
    MOVED = "moved"
    DELETED = "deleted"


class ScheduleEntryPayload(BaseModel):
    """Fields sent to the store when creating or updating a showtime."""

    movie_id: int = Field(..., description="Movie being screened")
    room_id: int = Field(..., description="Room the screening occupies")
    theater_id: Optional[int] = Field(None, description="Theater owning the room")
    show_date: date = Field(..., description="Calendar date of the screening")
    start_time: time = Field(..., description="Start time-of-day (start of pre-show)")
    base_price: int = Field(..., ge=0, description="Base ticket price")
    status: ShowtimeStatus = Field(ShowtimeStatus.AVAILABLE, description="Showtime status")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class ScheduleEntry(BaseModel):
    """ScheduleEntry is one screening of a movie in a room."""

    id: Identity = Field(..., description="Persisted or temporary identity")
    movie_id: int = Field(..., description="Movie being screened")
    room_id: int = Field(..., description="Room the screening occupies")
    theater_id: Optional[int] = Field(None, description="Theater owning the room")
    show_date: date = Field(..., description="Calendar date of the screening")
    start_time: time = Field(..., description="Start time-of-day (start of pre-show)")
    base_price: int = Field(..., ge=0, description="Base ticket price")
    status: ShowtimeStatus = Field(ShowtimeStatus.AVAILABLE, description="Showtime status")
    movie_duration_min: int = Field(..., gt=0, description="Feature duration in minutes")
    pre_show_min: int = Field(20, ge=0, description="Advertising before the feature")
    post_show_min: int = Field(15, ge=0, description="Cleaning after the feature")
    movie_title: Optional[str] = Field(None, description="Display title of the movie")
    room_name: Optional[str] = Field(None, description="Display name of the room")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.show_date, self.start_time)

    @property
    def occupies_room(self) -> bool:
        return self.status != ShowtimeStatus.CANCELLED

    def to_payload(self) -> ScheduleEntryPayload:
        """Strip identity and display fields for submission to the store."""
        return ScheduleEntryPayload(
            movie_id=self.movie_id,
            room_id=self.room_id,
            theater_id=self.theater_id,
            show_date=self.show_date,
            start_time=self.start_time,
            base_price=self.base_price,
            status=self.status,
        )


class WorkingSetEntry(BaseModel):
    """Mutable copy of a ScheduleEntry plus its provenance tag."""

    entry: ScheduleEntry
    provenance: Provenance = Provenance.UNCHANGED

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def id(self):
        return self.entry.id

    @property
    def is_deleted(self) -> bool:
        return self.provenance == Provenance.DELETED


class ScheduleFilter(BaseModel):
    """Room/date selection a scheduling session works on."""

    start_date: date = Field(..., description="First date (inclusive)")
    end_date: date = Field(..., description="Last date (inclusive)")
    room_ids: Optional[List[int]] = Field(None, description="Rooms to include (all rooms if None)")
