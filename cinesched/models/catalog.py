"""Read-only catalog models (theaters, rooms, movies) for cinesched."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class RoomCategory(str, Enum):
    """Room category enumeration."""
    STANDARD_2D = "STANDARD_2D"
    STANDARD_3D = "STANDARD_3D"
    IMAX = "IMAX"
    IMAX_3D = "IMAX_3D"
    VIP_4DX = "VIP_4DX"


class Theater(BaseModel):
    """A cinema in the chain."""

    id: int = Field(..., description="Theater identifier")
    name: str = Field(..., description="Theater display name")


class Room(BaseModel):
    """A screening room. Read-only to the scheduling engine."""

    id: int = Field(..., description="Room identifier")
    name: str = Field(..., description="Room display name")
    category: RoomCategory = Field(RoomCategory.STANDARD_2D, description="Room category (drives price and buffers)")
    theater_id: Optional[int] = Field(None, description="Owning theater identifier")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class Movie(BaseModel):
    """A movie that can be scheduled."""

    id: int = Field(..., description="Movie identifier")
    title: str = Field(..., description="Movie title")
    duration_min: int = Field(..., gt=0, description="Feature duration in minutes")
