"""Tests for copying one day's schedule to other dates."""

import asyncio
import pytest
from datetime import date, time

from cinesched.engine.copy_schedule import copy_schedule, plan_copy
from cinesched.engine.errors import ScheduleValidationError
from cinesched.models.catalog import Room

from conftest import InMemoryStore, make_entry

SOURCE = date(2024, 6, 1)


@pytest.fixture
def source_entries():
    return [
        make_entry(5, 1, SOURCE, time(9, 0), room_name="Room 1"),
        make_entry(6, 2, SOURCE, time(14, 0), room_name="Room 2", base_price=100000),
        make_entry(7, 1, SOURCE, time(18, 0), room_name="Room 1", status="CANCELLED"),
        make_entry(8, 1, date(2024, 6, 2), time(9, 0), room_name="Room 1"),
    ]


class TestPlanCopy:
    """Test planning a copy."""

    def test_same_theater_skips_source_date(self, source_entries):
        plan = plan_copy(source_entries, SOURCE, date(2024, 6, 1), date(2024, 6, 3), 1, 1)
        assert len(plan.payloads) == 4  # 2 screenings x (Jun 2, Jun 3)
        assert {p.show_date for p in plan.payloads} == {date(2024, 6, 2), date(2024, 6, 3)}
        assert {p.room_id for p in plan.payloads} == {1, 2}
        assert {p.base_price for p in plan.payloads if p.room_id == 2} == {100000}

    def test_other_theater_maps_rooms_by_name(self, source_entries):
        target_rooms = [Room(id=31, name="Room 1", theater_id=3)]
        plan = plan_copy(source_entries, SOURCE, date(2024, 6, 1), date(2024, 6, 1), 1, 3, target_rooms=target_rooms)

        assert len(plan.payloads) == 1
        assert plan.payloads[0].room_id == 31
        assert plan.payloads[0].theater_id == 3
        assert plan.payloads[0].show_date == SOURCE
        assert len(plan.skipped) == 1
        assert plan.skipped[0].entry_id == "6"
        assert "Room 2" in plan.skipped[0].reason

    def test_room_name_from_lookup(self, source_entries):
        entries = [e.model_copy(update={"room_name": None}) for e in source_entries]
        source_rooms = {1: Room(id=1, name="Room 1"), 2: Room(id=2, name="Room 2")}
        target_rooms = [Room(id=31, name="Room 1"), Room(id=32, name="Room 2")]
        plan = plan_copy(entries, SOURCE, SOURCE, SOURCE, 1, 3, target_rooms=target_rooms, source_rooms=source_rooms)
        assert sorted(p.room_id for p in plan.payloads) == [31, 32]

    def test_invalid_range_and_empty_source(self):
        with pytest.raises(ScheduleValidationError) as exc:
            plan_copy([], SOURCE, date(2024, 6, 5), date(2024, 6, 3), 1, 1)
        assert exc.value.errors == [
            "End date must not be before start date",
            "No screenings on 2024-06-01 to copy",
        ]


class TestCopySchedule:
    """Test committing a copy plan."""

    def test_conflicting_copies_are_tallied(self, source_entries):
        # Jun 2 already has a 09:00 screening in room 1
        store = InMemoryStore([make_entry(8, 1, date(2024, 6, 2), time(9, 0))])
        plan = plan_copy(source_entries, SOURCE, date(2024, 6, 2), date(2024, 6, 3), 1, 1)

        result = asyncio.run(copy_schedule(store, plan))

        assert result.succeeded == 3
        assert result.failed == 1
