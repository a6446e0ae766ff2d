"""Repository layer for showtime database operations."""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple
from sqlalchemy import and_
from sqlalchemy.orm import Session

from cinesched.database.models import MovieDB, RoomDB, ShowtimeDB, enum_to_value
from cinesched.engine.batch_generator import generate, validate_batch_spec
from cinesched.engine.errors import ScheduleValidationError
from cinesched.engine.pricing import buffers_for_category
from cinesched.models.batch import BatchCreateResult, BatchSpec, CandidatePreview
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload, ScheduleFilter, ShowtimeStatus
from cinesched.models.time_block import Span

logger = logging.getLogger(__name__)


class ShowtimeConflictError(ValueError):
    """The requested slot is already occupied in the room."""


class ShowtimeRepository:
    """Repository for showtime database operations.

    Every write is checked against the non-cancelled showtimes of the same
    room: occupied spans (pre-show, feature and post-show) may touch but
    never overlap.
    """

    def __init__(self, db: Session):
        self.db = db

    def _movie(self, movie_id: int) -> MovieDB:
        movie_db = self.db.query(MovieDB).filter(MovieDB.id == movie_id).first()
        if not movie_db:
            raise ValueError(f"Movie {movie_id} not found")
        return movie_db

    def _room(self, room_id: int) -> RoomDB:
        room_db = self.db.query(RoomDB).filter(RoomDB.id == room_id).first()
        if not room_db:
            raise ValueError(f"Room {room_id} not found")
        return room_db

    def _occupied(self, payload: ScheduleEntryPayload, movie_db: MovieDB, room_db: RoomDB) -> Tuple[datetime, datetime, int, int]:
        pre_show, post_show = buffers_for_category(room_db.category)
        start = datetime.combine(payload.show_date, payload.start_time)
        end = start + timedelta(minutes=pre_show + movie_db.duration_min + post_show)
        return start, end, pre_show, post_show

    def _find_overlap(self, room_id: int, start: datetime, end: datetime, exclude_id: Optional[int] = None) -> Optional[ShowtimeDB]:
        query = self.db.query(ShowtimeDB).filter(
            ShowtimeDB.room_id == room_id,
            ShowtimeDB.status != ShowtimeStatus.CANCELLED.value,
            ShowtimeDB.occupied_start < end,
            ShowtimeDB.occupied_end > start,
        )
        if exclude_id is not None:
            query = query.filter(ShowtimeDB.id != exclude_id)
        return query.order_by(ShowtimeDB.occupied_start).first()

    def _ensure_free(self, payload: ScheduleEntryPayload, start: datetime, end: datetime, exclude_id: Optional[int] = None) -> None:
        if enum_to_value(payload.status) == ShowtimeStatus.CANCELLED.value:
            return
        clash = self._find_overlap(payload.room_id, start, end, exclude_id)
        if clash:
            raise ShowtimeConflictError(
                f"Room is occupied by movie '{clash.movie.title}' "
                f"from {clash.occupied_start:%H:%M} to {clash.occupied_end:%H:%M}"
            )

    def list(self, schedule_filter: ScheduleFilter) -> List[ScheduleEntry]:
        """Showtimes dated within the filter range, ordered by start."""
        query = self.db.query(ShowtimeDB).filter(
            ShowtimeDB.show_date >= schedule_filter.start_date,
            ShowtimeDB.show_date <= schedule_filter.end_date,
        )
        if schedule_filter.room_ids:
            query = query.filter(ShowtimeDB.room_id.in_(schedule_filter.room_ids))
        showtimes_db = query.order_by(ShowtimeDB.occupied_start, ShowtimeDB.id).all()
        return [showtime_db.to_pydantic() for showtime_db in showtimes_db]

    def get(self, showtime_id: int) -> Optional[ScheduleEntry]:
        """Get showtime by ID."""
        showtime_db = self.db.query(ShowtimeDB).filter(ShowtimeDB.id == showtime_id).first()
        return showtime_db.to_pydantic() if showtime_db else None

    def create(self, payload: ScheduleEntryPayload) -> ScheduleEntry:
        """Create a showtime, rejecting it if its slot is taken."""
        movie_db = self._movie(payload.movie_id)
        room_db = self._room(payload.room_id)
        start, end, pre_show, post_show = self._occupied(payload, movie_db, room_db)
        self._ensure_free(payload, start, end)

        try:
            showtime_db = ShowtimeDB(
                movie_id=payload.movie_id,
                room_id=payload.room_id,
                theater_id=payload.theater_id if payload.theater_id is not None else room_db.theater_id,
                show_date=payload.show_date,
                start_time=payload.start_time,
                base_price=payload.base_price,
                status=enum_to_value(payload.status),
                pre_show_min=pre_show,
                post_show_min=post_show,
                occupied_start=start,
                occupied_end=end,
            )
            self.db.add(showtime_db)
            self.db.commit()
            self.db.refresh(showtime_db)
            logger.debug(f"Created showtime {showtime_db.id}: room={payload.room_id} {start:%Y-%m-%d %H:%M}")
            return showtime_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create showtime in room {payload.room_id}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, showtime_id: int, payload: ScheduleEntryPayload) -> Optional[ScheduleEntry]:
        """Replace a showtime's fields. Returns None if it does not exist."""
        showtime_db = self.db.query(ShowtimeDB).filter(ShowtimeDB.id == showtime_id).first()
        if not showtime_db:
            return None

        movie_db = self._movie(payload.movie_id)
        room_db = self._room(payload.room_id)
        start, end, pre_show, post_show = self._occupied(payload, movie_db, room_db)
        self._ensure_free(payload, start, end, exclude_id=showtime_id)

        showtime_db.movie_id = payload.movie_id
        showtime_db.room_id = payload.room_id
        showtime_db.theater_id = payload.theater_id if payload.theater_id is not None else room_db.theater_id
        showtime_db.show_date = payload.show_date
        showtime_db.start_time = payload.start_time
        showtime_db.base_price = payload.base_price
        showtime_db.status = enum_to_value(payload.status)
        showtime_db.pre_show_min = pre_show
        showtime_db.post_show_min = post_show
        showtime_db.occupied_start = start
        showtime_db.occupied_end = end

        try:
            self.db.commit()
            self.db.refresh(showtime_db)
            logger.debug(f"Updated showtime {showtime_id}: room={payload.room_id} {start:%Y-%m-%d %H:%M}")
            return showtime_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update showtime {showtime_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, showtime_id: int) -> bool:
        """Delete a showtime by ID."""
        showtime_db = self.db.query(ShowtimeDB).filter(ShowtimeDB.id == showtime_id).first()
        if not showtime_db:
            return False

        try:
            self.db.delete(showtime_db)
            self.db.commit()
            logger.debug(f"Deleted showtime {showtime_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete showtime {showtime_id}: {type(e).__name__}: {str(e)}")
            raise

    def existing_spans(self, room_ids: List[int], start_date: date, end_date: date) -> Dict[int, List[Span]]:
        """Occupied spans per room that could touch the given dates (including spill from the day before)."""
        window_start = datetime.combine(start_date - timedelta(days=1), datetime.min.time())
        window_end = datetime.combine(end_date + timedelta(days=2), datetime.min.time())
        showtimes_db = self.db.query(ShowtimeDB).filter(
            and_(
                ShowtimeDB.room_id.in_(room_ids),
                ShowtimeDB.status != ShowtimeStatus.CANCELLED.value,
                ShowtimeDB.occupied_start < window_end,
                ShowtimeDB.occupied_end > window_start,
            )
        ).all()
        spans: Dict[int, List[Span]] = {}
        for showtime_db in showtimes_db:
            spans.setdefault(showtime_db.room_id, []).append(
                Span(
                    start=showtime_db.occupied_start,
                    end=showtime_db.occupied_end,
                    label=showtime_db.movie.title,
                    ref=str(showtime_db.id),
                )
            )
        return spans

    def preview_batch(self, spec: BatchSpec) -> Tuple[List[CandidatePreview], List[str]]:
        """Generate the batch candidates and every validation message, without writing."""
        rooms = {
            room_db.id: room_db.to_pydantic()
            for room_db in self.db.query(RoomDB).filter(RoomDB.id.in_(spec.room_ids)).all()
        } if spec.room_ids else {}
        movie_db = self.db.query(MovieDB).filter(MovieDB.id == spec.movie_id).first() if spec.movie_id is not None else None
        movie = movie_db.to_pydantic() if movie_db else None

        previews: List[CandidatePreview] = []
        if movie is not None and rooms and spec.end_date >= spec.start_date:
            existing = self.existing_spans(list(rooms), spec.start_date, spec.end_date)
            previews = generate(spec, movie, rooms, existing)
        return previews, validate_batch_spec(spec, rooms, movie=movie)

    def batch_create(self, spec: BatchSpec) -> BatchCreateResult:
        """Create every non-conflicting batch candidate in one transaction.

        Conflicting candidates are skipped and reported in `errors`.

        Raises:
            ScheduleValidationError: the request itself is invalid (nothing is written)
        """
        previews, errors = self.preview_batch(spec)
        if errors:
            raise ScheduleValidationError(errors)

        result = BatchCreateResult()
        try:
            for preview in previews:
                if preview.conflict:
                    result.errors.append(f"{preview.show_date} {preview.start_time:%H:%M} {preview.conflict_message}")
                    continue
                self.db.add(
                    ShowtimeDB(
                        movie_id=preview.movie_id,
                        room_id=preview.room_id,
                        theater_id=preview.theater_id,
                        show_date=preview.show_date,
                        start_time=preview.start_time,
                        base_price=preview.base_price,
                        status=ShowtimeStatus.AVAILABLE.value,
                        pre_show_min=spec.pre_show_min,
                        post_show_min=spec.post_show_min,
                        occupied_start=preview.span.start,
                        occupied_end=preview.span.end,
                    )
                )
                result.total_created += 1
            self.db.commit()
            logger.debug(f"Batch created {result.total_created} showtimes for movie {spec.movie_id}")
            return result
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to batch create showtimes for movie {spec.movie_id}: {type(e).__name__}: {str(e)}")
            raise
