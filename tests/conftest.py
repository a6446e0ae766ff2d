"""Pytest fixtures and configuration for cinesched tests."""

import pytest
from datetime import date, time
from typing import Dict, List
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from cinesched.database.database import Base, get_db
from cinesched.database.catalog_repository import CatalogRepository
from cinesched.database.local_store import LocalScheduleStore
from cinesched.database.showtime_repository import ShowtimeRepository
from cinesched.engine.errors import UnknownEntryError
from cinesched.engine.time_blocks import screening_blocks, span_of
from cinesched.models.batch import BatchCreateResult, BatchSpec
from cinesched.models.catalog import Movie, Room, RoomCategory
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload, ScheduleFilter, ShowtimeStatus


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Import models so they register on Base.metadata
    from cinesched.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db_session: Session):
    """Seed two theaters, three rooms and two movies.

    Downtown has "Room 1" (standard 2D) and "Room 2" (IMAX); Riverside has
    its own "Room 1".
    """
    repo = CatalogRepository(db_session)
    downtown = repo.create_theater("Downtown")
    riverside = repo.create_theater("Riverside")
    room1 = repo.create_room("Room 1", downtown.id, RoomCategory.STANDARD_2D)
    room2 = repo.create_room("Room 2", downtown.id, RoomCategory.IMAX)
    river_room1 = repo.create_room("Room 1", riverside.id, RoomCategory.STANDARD_2D)
    dune = repo.create_movie("Dune", 128)
    short = repo.create_movie("Short Film", 90)
    return {
        "downtown": downtown,
        "riverside": riverside,
        "room1": room1,
        "room2": room2,
        "river_room1": river_room1,
        "dune": dune,
        "short": short,
    }


@pytest.fixture
def showtime_repository(db_session: Session):
    """Create a ShowtimeRepository instance for testing."""
    return ShowtimeRepository(db_session)


@pytest.fixture
def local_store(session_factory):
    return LocalScheduleStore(session_factory)


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from cinesched.api.app import app

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def show_day():
    return date(2024, 6, 1)


@pytest.fixture
def dune():
    return Movie(id=1, title="Dune", duration_min=128)


@pytest.fixture
def room_a():
    return Room(id=1, name="Room A", category=RoomCategory.STANDARD_2D, theater_id=1)


@pytest.fixture
def room_b():
    return Room(id=2, name="Room B", category=RoomCategory.IMAX, theater_id=1)


def make_entry(entry_id: int, room_id: int, show_date: date, start: time, duration: int = 128, **overrides) -> ScheduleEntry:
    """Persisted entry with default buffers."""
    data = {
        "id": PersistedId(value=entry_id),
        "movie_id": 1,
        "room_id": room_id,
        "theater_id": 1,
        "show_date": show_date,
        "start_time": start,
        "base_price": 60000,
        "status": ShowtimeStatus.AVAILABLE,
        "movie_duration_min": duration,
        "movie_title": "Dune",
    }
    data.update(overrides)
    return ScheduleEntry(**data)


class InMemoryStore:
    """ScheduleStore keeping entries in a dict and recording every call.

    Rejects writes whose occupied span overlaps another non-cancelled entry in
    the same room, like the real service does.
    """

    def __init__(self, entries=None, durations=None):
        self.entries: Dict[int, ScheduleEntry] = {e.id.value: e for e in (entries or [])}
        self.durations: Dict[int, int] = durations or {1: 128}
        self.calls: List[tuple] = []
        self._next_id = max(self.entries, default=0) + 1
        self.list_hook = None

    def _entry(self, entry_id: int, payload: ScheduleEntryPayload) -> ScheduleEntry:
        return ScheduleEntry(
            id=PersistedId(value=entry_id),
            **payload.model_dump(),
            movie_duration_min=self.durations.get(payload.movie_id, 120),
            movie_title=f"movie {payload.movie_id}",
        )

    def _ensure_free(self, candidate: ScheduleEntry) -> None:
        if not candidate.occupies_room:
            return
        blocks = screening_blocks(candidate.starts_at, candidate.movie_duration_min, candidate.pre_show_min, candidate.post_show_min)
        span = span_of(blocks)
        for other in self.entries.values():
            if other.id == candidate.id or other.room_id != candidate.room_id or not other.occupies_room:
                continue
            o_blocks = screening_blocks(other.starts_at, other.movie_duration_min, other.pre_show_min, other.post_show_min)
            o_span = span_of(o_blocks)
            if span.start < o_span.end and o_span.start < span.end:
                raise ValueError(f"Room {candidate.room_id} is occupied")

    async def list_schedule(self, schedule_filter: ScheduleFilter) -> List[ScheduleEntry]:
        self.calls.append(("list", schedule_filter))
        if self.list_hook is not None:
            await self.list_hook()
        return [
            e for e in sorted(self.entries.values(), key=lambda e: e.starts_at)
            if schedule_filter.start_date <= e.show_date <= schedule_filter.end_date
            and (not schedule_filter.room_ids or e.room_id in schedule_filter.room_ids)
        ]

    async def create_entry(self, payload: ScheduleEntryPayload) -> ScheduleEntry:
        self.calls.append(("create", payload))
        entry = self._entry(self._next_id, payload)
        self._ensure_free(entry)
        self._next_id += 1
        self.entries[entry.id.value] = entry
        return entry

    async def update_entry(self, entry_id: PersistedId, payload: ScheduleEntryPayload) -> ScheduleEntry:
        self.calls.append(("update", entry_id))
        if entry_id.value not in self.entries:
            raise UnknownEntryError(entry_id)
        entry = self._entry(entry_id.value, payload)
        self._ensure_free(entry)
        self.entries[entry_id.value] = entry
        return entry

    async def delete_entry(self, entry_id: PersistedId) -> None:
        self.calls.append(("delete", entry_id))
        if self.entries.pop(entry_id.value, None) is None:
            raise UnknownEntryError(entry_id)

    async def batch_create(self, spec: BatchSpec) -> BatchCreateResult:
        self.calls.append(("batch", spec))
        return BatchCreateResult(total_created=spec.day_count * len(spec.room_ids) * len(spec.time_slots))


@pytest.fixture
def memory_store():
    return InMemoryStore()
