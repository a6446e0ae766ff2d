"""Scheduling session: one room/date filter selection and its working set.

States: EMPTY (no filter or nothing fetched yet) -> LOADED (baseline fetched,
not dirty) -> EDITING (dirty) -> COMMITTING (commit in flight) -> LOADED
(resync after commit, whatever its outcome).

Every async request is tagged with the epoch that issued it. Changing the
filter or forcing a refresh bumps the epoch, and a response arriving under
an older epoch is discarded instead of being applied to the working set.
"""

import asyncio
import logging
import os
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from cinesched.engine.commit import BatchCommitExecutor
from cinesched.engine.errors import PlacementConflictError, SessionStateError, UnknownEntryError
from cinesched.engine.overlap import ConflictResult, check
from cinesched.engine.pricing import buffers_for_category, price_for_room
from cinesched.engine.reconciler import WorkingSetReconciler
from cinesched.engine.store import ScheduleStore
from cinesched.engine.time_blocks import entry_span, screening_blocks, span_of
from cinesched.models.catalog import Movie, Room
from cinesched.models.constants import DEFAULT_COMMIT_TIMEOUT_SEC
from cinesched.models.operation import CommitResult
from cinesched.models.schedule_entry import ScheduleEntryPayload, ScheduleFilter, ShowtimeStatus
from cinesched.models.time_block import Span

load_dotenv()

logger = logging.getLogger(__name__)

COMMIT_TIMEOUT_SEC = float(os.getenv("CINESCHED_COMMIT_TIMEOUT_SEC", str(DEFAULT_COMMIT_TIMEOUT_SEC)))


class SessionState(str, Enum):
    """Scheduling session state."""
    EMPTY = "empty"
    LOADED = "loaded"
    EDITING = "editing"
    COMMITTING = "committing"


class SchedulingSession:
    """Owns the baseline/working set for one filter selection at a time."""

    def __init__(self, store: ScheduleStore, commit_timeout_sec: Optional[float] = None):
        self.store = store
        self.executor = BatchCommitExecutor(store)
        self.commit_timeout_sec = commit_timeout_sec if commit_timeout_sec is not None else COMMIT_TIMEOUT_SEC
        self.state = SessionState.EMPTY
        self.epoch = 0
        self.schedule_filter: Optional[ScheduleFilter] = None
        self.reconciler = WorkingSetReconciler()
        self.last_result: Optional[CommitResult] = None

    # Filter / loading

    def select_filter(
        self,
        schedule_filter: Optional[ScheduleFilter],
        confirm: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """Switch to a new filter, discarding the working set.

        Unsaved edits (or a commit in flight) are only discarded if `confirm`
        returns True. Returns whether the switch happened.
        """
        if self.state in (SessionState.EDITING, SessionState.COMMITTING):
            if confirm is None or not confirm():
                logger.debug(f"Filter change refused in state {self.state.value}")
                return False
        self.epoch += 1
        self.schedule_filter = schedule_filter
        self.reconciler = WorkingSetReconciler()
        self.state = SessionState.EMPTY
        return True

    async def load(self) -> bool:
        """Fetch the baseline for the current filter.

        Returns:
            False if the response was stale (the filter changed meanwhile) and was discarded
        """
        if self.schedule_filter is None:
            raise SessionStateError("No filter selected")
        epoch = self.epoch
        schedule_filter = self.schedule_filter
        entries = await self.store.list_schedule(schedule_filter)
        if epoch != self.epoch:
            logger.warning(f"Discarding stale baseline for epoch {epoch} (current epoch {self.epoch})")
            return False
        occupancy = await self._previous_day_occupancy(schedule_filter)
        if epoch != self.epoch:
            logger.warning(f"Discarding stale baseline for epoch {epoch} (current epoch {self.epoch})")
            return False
        self.reconciler.initialize(entries, occupancy=occupancy)
        self.state = SessionState.LOADED
        return True

    async def _previous_day_occupancy(self, schedule_filter: ScheduleFilter) -> Dict[int, List[Span]]:
        """Spans of the previous day's screenings still running at midnight of the first date."""
        previous_day = schedule_filter.start_date - timedelta(days=1)
        spill = await self.store.list_schedule(
            ScheduleFilter(start_date=previous_day, end_date=previous_day, room_ids=schedule_filter.room_ids)
        )
        midnight = datetime.combine(schedule_filter.start_date, time.min)
        occupancy: Dict[int, List[Span]] = {}
        for entry in spill:
            if not entry.occupies_room:
                continue
            span = entry_span(entry)
            if span.end > midnight:
                occupancy.setdefault(entry.room_id, []).append(span)
        if occupancy:
            logger.debug(f"Previous-day screenings occupy rooms {sorted(occupancy)} past midnight")
        return occupancy

    async def refresh(self) -> bool:
        """Manual escape hatch: invalidate anything in flight and refetch."""
        if self.schedule_filter is None:
            raise SessionStateError("No filter selected")
        self.epoch += 1
        self.reconciler = WorkingSetReconciler()
        self.state = SessionState.EMPTY
        return await self.load()

    # Local edits

    def _require_editable(self) -> None:
        if self.state not in (SessionState.LOADED, SessionState.EDITING):
            raise SessionStateError(f"Cannot edit in state {self.state.value}")

    def _sync_dirty_state(self) -> None:
        self.state = SessionState.EDITING if self.reconciler.is_dirty() else SessionState.LOADED

    @property
    def is_dirty(self) -> bool:
        return self.reconciler.is_dirty()

    def check_placement(
        self,
        room_id: int,
        start: datetime,
        feature_minutes: int,
        pre_show_minutes: int = 20,
        post_show_minutes: int = 15,
        exclude=None,
    ) -> ConflictResult:
        """Conflict check of a prospective screening against the visible working set."""
        blocks = screening_blocks(start, feature_minutes, pre_show_minutes, post_show_minutes)
        candidate = span_of(blocks, ref=str(exclude) if exclude is not None else None)
        return check(candidate, self.reconciler.spans_by_room().get(room_id, []))

    def place(
        self,
        movie: Movie,
        room: Room,
        show_date: date,
        start_time: time,
        base_price: Optional[int] = None,
    ):
        """Create a screening in the working set. Refuses overlapping placements."""
        self._require_editable()
        pre_show, post_show = buffers_for_category(room.category)
        start = datetime.combine(show_date, start_time)
        result = self.check_placement(room.id, start, movie.duration_min, pre_show, post_show)
        if result:
            raise PlacementConflictError(result)

        payload = ScheduleEntryPayload(
            movie_id=movie.id,
            room_id=room.id,
            theater_id=room.theater_id,
            show_date=show_date,
            start_time=start_time,
            base_price=price_for_room(room, base_price),
            status=ShowtimeStatus.AVAILABLE,
        )
        temp_id = self.reconciler.create(
            payload,
            movie_duration_min=movie.duration_min,
            pre_show_min=pre_show,
            post_show_min=post_show,
            movie_title=movie.title,
            room_name=room.name,
        )
        self._sync_dirty_state()
        return temp_id

    def move(self, entry_id, room: Room, start: datetime):
        """Move a screening to another room and/or start. Refuses overlapping moves."""
        self._require_editable()
        entry = self.reconciler.get(entry_id)
        if entry is None:
            raise UnknownEntryError(entry_id)
        result = self.check_placement(
            room.id,
            start,
            entry.movie_duration_min,
            entry.pre_show_min,
            entry.post_show_min,
            exclude=entry_id,
        )
        if result:
            raise PlacementConflictError(result)
        moved = self.reconciler.move(entry_id, room.id, start, theater_id=room.theater_id, room_name=room.name)
        self._sync_dirty_state()
        return moved

    def remove(self, entry_id) -> None:
        self._require_editable()
        self.reconciler.remove(entry_id)
        self._sync_dirty_state()

    def cancel_edits(self) -> None:
        """Drop every pending edit."""
        self._require_editable()
        self.reconciler.reset()
        self._sync_dirty_state()

    # Commit

    async def save(self) -> CommitResult:
        """Commit the pending diff, then resync from the store.

        The resync happens whatever the commit outcome (including a timeout),
        unless the filter changed while the commit was in flight.
        """
        if self.state != SessionState.EDITING:
            raise SessionStateError(f"Nothing to save in state {self.state.value}")
        operations = self.reconciler.diff()
        epoch = self.epoch
        self.state = SessionState.COMMITTING

        result = CommitResult()
        try:
            await asyncio.wait_for(self.executor.commit(operations, result), timeout=self.commit_timeout_sec)
        except asyncio.TimeoutError:
            logger.warning(
                f"Commit of {len(operations)} operations timed out after {self.commit_timeout_sec}s "
                f"({result.succeeded} succeeded, {result.failed} failed)"
            )
            result.timed_out = True

        self.last_result = result
        if epoch != self.epoch:
            logger.warning(f"Filter changed during commit (epoch {epoch} -> {self.epoch}); skipping resync")
            return result

        self.state = SessionState.EMPTY
        await self.load()
        return result

    def visible_entries(self) -> List:
        return [item.entry for item in self.reconciler.entries()]
