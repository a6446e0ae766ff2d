"""Working-set reconciliation for interactive schedule editing.

The reconciler owns the last fetched baseline and a working copy of it.
Interactive edits (create, move, remove) mutate only the working copy and tag
each entry with its provenance; diff() derives the operations that turn the
baseline into the working set.
"""

import itertools
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from cinesched.engine.errors import UnknownEntryError
from cinesched.engine.time_blocks import entry_span
from cinesched.models.identity import PersistedId, TemporaryId, is_persisted
from cinesched.models.operation import CreateOperation, DeleteOperation, Operation, UpdateOperation
from cinesched.models.schedule_entry import (
    Provenance,
    ScheduleEntry,
    ScheduleEntryPayload,
    WorkingSetEntry,
)
from cinesched.models.time_block import Span

logger = logging.getLogger(__name__)


class WorkingSetReconciler:
    """Baseline vs. working copy of one scheduling session's entries."""

    def __init__(self):
        self.baseline: Dict[PersistedId, ScheduleEntry] = {}
        self.working: Dict[object, WorkingSetEntry] = {}
        # Read-only spans from outside the filter (e.g. late shows of the previous day).
        self.occupancy: Dict[int, List[Span]] = {}
        # Survives initialize()/reset() so temporary tokens are never reused.
        self._tokens = itertools.count(1)

    def initialize(
        self,
        entries: Iterable[ScheduleEntry],
        occupancy: Optional[Dict[int, List[Span]]] = None,
    ) -> None:
        """Set the baseline and seed the working set with an identical copy.

        `occupancy` holds spans per room that block placements but are never
        edited or committed. It is kept across reset().
        """
        baseline: Dict[PersistedId, ScheduleEntry] = {}
        for entry in entries:
            if not is_persisted(entry.id):
                raise ValueError(f"Baseline entry {entry.id} has no persisted identity")
            baseline[entry.id] = entry
        self.baseline = baseline
        self.occupancy = {room_id: list(spans) for room_id, spans in (occupancy or {}).items()}
        self._seed_working()
        logger.debug(f"Initialized working set with {len(self.baseline)} baseline entries")

    def reset(self) -> None:
        """Discard all pending edits and start again from the last baseline."""
        self._seed_working()

    def _seed_working(self) -> None:
        self.working = {
            entry_id: WorkingSetEntry(entry=entry.model_copy(deep=True), provenance=Provenance.UNCHANGED)
            for entry_id, entry in self.baseline.items()
        }

    def _get(self, entry_id) -> WorkingSetEntry:
        item = self.working.get(entry_id)
        if item is None:
            raise UnknownEntryError(entry_id)
        return item

    def get(self, entry_id) -> Optional[ScheduleEntry]:
        item = self.working.get(entry_id)
        return item.entry if item else None

    def provenance(self, entry_id) -> Provenance:
        return Provenance(self._get(entry_id).provenance)

    def create(
        self,
        payload: ScheduleEntryPayload,
        *,
        movie_duration_min: int,
        pre_show_min: int = 20,
        post_show_min: int = 15,
        movie_title: Optional[str] = None,
        room_name: Optional[str] = None,
    ) -> TemporaryId:
        """Add a new entry under a fresh temporary identity and return it."""
        temp_id = TemporaryId(token=next(self._tokens))
        entry = ScheduleEntry(
            id=temp_id,
            **payload.model_dump(),
            movie_duration_min=movie_duration_min,
            pre_show_min=pre_show_min,
            post_show_min=post_show_min,
            movie_title=movie_title,
            room_name=room_name,
        )
        self.working[temp_id] = WorkingSetEntry(entry=entry, provenance=Provenance.CREATED)
        return temp_id

    def move(
        self,
        entry_id,
        new_room_id: int,
        new_start: datetime,
        *,
        theater_id: Optional[int] = None,
        room_name: Optional[str] = None,
    ) -> ScheduleEntry:
        """Change an entry's room and start in place.

        Baseline-derived entries become MOVED; created entries stay CREATED
        (only their payload changes).
        """
        item = self._get(entry_id)
        if item.is_deleted:
            raise UnknownEntryError(f"Entry {entry_id} is marked for deletion")

        changes = {
            "room_id": new_room_id,
            "show_date": new_start.date(),
            "start_time": new_start.time(),
        }
        if theater_id is not None:
            changes["theater_id"] = theater_id
        if room_name is not None:
            changes["room_name"] = room_name
        item.entry = item.entry.model_copy(update=changes)
        if item.provenance == Provenance.UNCHANGED:
            item.provenance = Provenance.MOVED
        return item.entry

    def remove(self, entry_id) -> None:
        """Drop a created entry outright; mark a baseline-derived one for deletion."""
        item = self._get(entry_id)
        if not is_persisted(entry_id):
            del self.working[entry_id]
            return
        item.provenance = Provenance.DELETED

    def entries(self, include_deleted: bool = False) -> List[WorkingSetEntry]:
        """Working entries in start order (deleted ones only if asked for)."""
        items = [
            item for item in self.working.values()
            if include_deleted or not item.is_deleted
        ]
        return sorted(items, key=lambda item: (item.entry.starts_at, item.entry.room_id, str(item.entry.id)))

    def spans_by_room(self) -> Dict[int, List[Span]]:
        """Occupied spans of visible, non-cancelled entries grouped by room, plus read-only occupancy."""
        spans: Dict[int, List[Span]] = {room_id: list(occupied) for room_id, occupied in self.occupancy.items()}
        for item in self.entries():
            if item.entry.occupies_room:
                spans.setdefault(item.entry.room_id, []).append(entry_span(item.entry))
        return spans

    def diff(self) -> List[Operation]:
        """Operations turning the baseline into the working set.

        Creates come first (by temporary token), then updates and deletes (by
        persisted id). Commit order is decided by the executor, not here.
        """
        creates: List[CreateOperation] = []
        updates: List[UpdateOperation] = []
        deletes: List[DeleteOperation] = []

        for entry_id, item in self.working.items():
            if item.provenance == Provenance.CREATED:
                creates.append(CreateOperation(payload=item.entry.to_payload(), temp_id=entry_id))
            elif item.provenance == Provenance.MOVED:
                updates.append(UpdateOperation(id=entry_id, payload=item.entry.to_payload()))
            elif item.provenance == Provenance.DELETED and entry_id in self.baseline:
                deletes.append(DeleteOperation(id=entry_id))

        creates.sort(key=lambda op: op.temp_id.token)
        updates.sort(key=lambda op: op.id.value)
        deletes.sort(key=lambda op: op.id.value)
        return [*creates, *updates, *deletes]

    def is_dirty(self) -> bool:
        return any(item.provenance != Provenance.UNCHANGED for item in self.working.values())
