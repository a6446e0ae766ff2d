"""Copy one day's schedule onto a range of dates, optionally into another theater."""

import logging
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence
from pydantic import BaseModel, Field

from cinesched.engine.batch_generator import daterange
from cinesched.engine.commit import BatchCommitExecutor
from cinesched.engine.errors import ScheduleValidationError
from cinesched.engine.store import ScheduleStore
from cinesched.models.catalog import Room
from cinesched.models.operation import CommitResult, CreateOperation
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload, ShowtimeStatus

logger = logging.getLogger(__name__)


class CopySkip(BaseModel):
    """A source screening that could not be copied to a date."""

    entry_id: str
    show_date: date
    reason: str


class CopyPlan(BaseModel):
    """Payloads to create plus the screenings that were skipped."""

    payloads: List[ScheduleEntryPayload] = Field(default_factory=list)
    skipped: List[CopySkip] = Field(default_factory=list)

    def operations(self) -> List[CreateOperation]:
        return [CreateOperation(payload=payload) for payload in self.payloads]


def plan_copy(
    source_entries: Sequence[ScheduleEntry],
    source_date: date,
    target_start: date,
    target_end: date,
    source_theater_id: Optional[int],
    target_theater_id: Optional[int],
    target_rooms: Optional[Sequence[Room]] = None,
    source_rooms: Optional[Mapping[int, Room]] = None,
) -> CopyPlan:
    """Plan a copy of `source_date`'s screenings onto every date in [target_start, target_end].

    Within the same theater rooms are kept and the source date itself is
    skipped. Into another theater, rooms are matched by name; screenings whose
    room has no namesake there are skipped.

    Raises:
        ScheduleValidationError: invalid range or nothing to copy
    """
    sources = [
        e for e in source_entries
        if e.show_date == source_date and e.status != ShowtimeStatus.CANCELLED
    ]
    errors: List[str] = []
    if target_end < target_start:
        errors.append("End date must not be before start date")
    if not sources:
        errors.append(f"No screenings on {source_date} to copy")
    if errors:
        raise ScheduleValidationError(errors)

    same_theater = target_theater_id == source_theater_id
    rooms_by_name: Dict[str, Room] = {room.name: room for room in (target_rooms or [])}
    source_rooms = source_rooms or {}

    plan = CopyPlan()
    for day in daterange(target_start, target_end):
        if same_theater and day == source_date:
            continue
        for entry in sources:
            room_id = entry.room_id
            if not same_theater:
                room_name = entry.room_name or (source_rooms[entry.room_id].name if entry.room_id in source_rooms else None)
                match = rooms_by_name.get(room_name) if room_name else None
                if match is None:
                    plan.skipped.append(
                        CopySkip(
                            entry_id=str(entry.id),
                            show_date=day,
                            reason=f"No room named {room_name!r} in target theater" if room_name else "Source room name unknown",
                        )
                    )
                    continue
                room_id = match.id
            plan.payloads.append(
                ScheduleEntryPayload(
                    movie_id=entry.movie_id,
                    room_id=room_id,
                    theater_id=target_theater_id,
                    show_date=day,
                    start_time=entry.start_time,
                    base_price=entry.base_price,
                    status=ShowtimeStatus.AVAILABLE,
                )
            )

    logger.debug(f"Copy plan from {source_date}: {len(plan.payloads)} creates, {len(plan.skipped)} skipped")
    return plan


async def copy_schedule(store: ScheduleStore, plan: CopyPlan) -> CommitResult:
    """Create every planned screening; individual rejections are tallied, not fatal."""
    return await BatchCommitExecutor(store).commit(plan.operations())
