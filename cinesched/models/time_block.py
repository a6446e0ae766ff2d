"""TimeBlock and Span data models for cinesched."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BlockKind(str, Enum):
    """Sub-block of a screening."""
    PRE_SHOW = "PRE_SHOW"
    FEATURE = "FEATURE"
    POST_SHOW = "POST_SHOW"


class TimeBlock(BaseModel):
    """A named, contiguous piece of a screening. Derived, never stored."""

    kind: str = Field(..., description="Block name (a BlockKind for screenings)")
    start: datetime = Field(..., description="Block start instant")
    end: datetime = Field(..., description="Block end instant")

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


class Span(BaseModel):
    """Half-open time interval [start, end) a screening occupies in a room."""

    start: datetime = Field(..., description="Span start (inclusive)")
    end: datetime = Field(..., description="Span end (exclusive)")
    label: Optional[str] = Field(None, description="Human-readable owner of the span")
    ref: Optional[str] = Field(None, description="Identity of the owner, used to exclude self")

    class Config:
        """Pydantic configuration."""
        frozen = True

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def describe(self) -> str:
        window = f"{self.start:%H:%M}-{self.end:%H:%M}"
        return f"{self.label} ({window})" if self.label else window
