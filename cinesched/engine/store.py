"""Persistence boundary consumed by the scheduling engine."""

from typing import List, Protocol

from cinesched.models.batch import BatchCreateResult, BatchSpec
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload, ScheduleFilter


class ScheduleStore(Protocol):
    """Async showtime store. Implementations raise on a rejected operation."""

    async def list_schedule(self, schedule_filter: ScheduleFilter) -> List[ScheduleEntry]:
        ...

    async def create_entry(self, payload: ScheduleEntryPayload) -> ScheduleEntry:
        ...

    async def update_entry(self, entry_id: PersistedId, payload: ScheduleEntryPayload) -> ScheduleEntry:
        ...

    async def delete_entry(self, entry_id: PersistedId) -> None:
        ...

    async def batch_create(self, spec: BatchSpec) -> BatchCreateResult:
        ...
