"""ScheduleStore backed by the local SQLAlchemy database."""

from typing import Callable, List

from sqlalchemy.orm import Session

from cinesched.database.showtime_repository import ShowtimeRepository
from cinesched.engine.errors import UnknownEntryError
from cinesched.models.batch import BatchCreateResult, BatchSpec
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload, ScheduleFilter


class LocalScheduleStore:
    """Async adapter over ShowtimeRepository.

    Each call opens its own session from `session_factory` so concurrently
    dispatched operations never share one. Calls run on the event loop
    thread; SQLite sessions are not shared across threads.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _run(self, fn):
        db = self.session_factory()
        try:
            return fn(ShowtimeRepository(db))
        finally:
            db.close()

    async def list_schedule(self, schedule_filter: ScheduleFilter) -> List[ScheduleEntry]:
        return self._run(lambda repo: repo.list(schedule_filter))

    async def create_entry(self, payload: ScheduleEntryPayload) -> ScheduleEntry:
        return self._run(lambda repo: repo.create(payload))

    async def update_entry(self, entry_id: PersistedId, payload: ScheduleEntryPayload) -> ScheduleEntry:
        entry = self._run(lambda repo: repo.update(entry_id.value, payload))
        if entry is None:
            raise UnknownEntryError(entry_id)
        return entry

    async def delete_entry(self, entry_id: PersistedId) -> None:
        if not self._run(lambda repo: repo.delete(entry_id.value)):
            raise UnknownEntryError(entry_id)

    async def batch_create(self, spec: BatchSpec) -> BatchCreateResult:
        return self._run(lambda repo: repo.batch_create(spec))
