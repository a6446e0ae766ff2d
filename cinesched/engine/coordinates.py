"""Mapping between the time axis and the timeline's spatial axis.

Pointer-derived coordinates are snapped to the grid when converted to
instants; instants are never snapped when converted to coordinates.
"""

import math
from datetime import date, datetime, time, timedelta

from cinesched.models.constants import (
    TIMELINE_SNAP_MINUTES,
    TIMELINE_START_HOUR,
    TIMELINE_UNITS_PER_MINUTE,
)


class CoordinateMapper:
    """Linear mapping: coordinate = (instant - origin) in minutes * scale."""

    def __init__(self, origin: datetime, scale: float, snap_minutes: int = TIMELINE_SNAP_MINUTES):
        if scale <= 0:
            raise ValueError("scale must be positive")
        if snap_minutes <= 0:
            raise ValueError("snap_minutes must be positive")
        self.origin = origin
        self.scale = scale
        self.snap_minutes = snap_minutes

    def to_spatial(self, t: datetime) -> float:
        minutes = (t - self.origin).total_seconds() / 60
        return minutes * self.scale

    def to_instant(self, c: float) -> datetime:
        """Unsnapped instant for `c`, rounded to the nearest snap multiple (ties go later)."""
        minutes = c / self.scale
        steps = math.floor(minutes / self.snap_minutes + 0.5)
        return self.origin + timedelta(minutes=steps * self.snap_minutes)

    def width(self, minutes: int) -> float:
        return minutes * self.scale


def time_of_day_instant(day: date, t: time, day_start_hour: int = TIMELINE_START_HOUR) -> datetime:
    """Place a time-of-day on a timeline day.

    Times before the day start hour belong to the next calendar day
    (a 00:30 late show on day D runs in the night after D).
    """
    instant = datetime.combine(day, t)
    if t.hour < day_start_hour:
        instant = instant + timedelta(days=1)
    return instant


def timeline_mapper(
    day: date,
    start_hour: int = TIMELINE_START_HOUR,
    scale: float = TIMELINE_UNITS_PER_MINUTE,
    snap_minutes: int = TIMELINE_SNAP_MINUTES,
) -> CoordinateMapper:
    """Mapper for the admin timeline of one day, origin at `start_hour`."""
    return CoordinateMapper(datetime.combine(day, time(start_hour, 0)), scale, snap_minutes)
