"""Quick-schedule generation for cinesched.

Expands a BatchSpec (date range x rooms x time slots) into candidate
screenings, prices them and checks each for conflicts against the room's
existing screenings and against the other candidates. Generation is
read-only: nothing is submitted from here.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Mapping, Optional, Sequence

from cinesched.engine.overlap import check, conflict_message, sweep
from cinesched.engine.pricing import price_for_room
from cinesched.engine.time_blocks import screening_blocks, span_of
from cinesched.models.batch import BatchSpec, CandidatePreview
from cinesched.models.catalog import Movie, Room
from cinesched.models.time_block import Span


def daterange(start: date, end_inclusive: date) -> Iterable[date]:
    cur = start
    while cur <= end_inclusive:
        yield cur
        cur = cur + timedelta(days=1)


def generate(
    spec: BatchSpec,
    movie: Movie,
    rooms: Mapping[int, Room],
    existing: Optional[Mapping[int, Sequence[Span]]] = None,
) -> List[CandidatePreview]:
    """Generate one candidate per (date, room, time slot).

    Args:
        spec: Generation request
        movie: Movie being scheduled (its duration drives the feature block)
        rooms: Room lookup by id; rooms missing from it are skipped
        existing: Occupied spans already in each room, keyed by room id

    Returns:
        Candidates ordered by date, then room (spec order), then time slot
    """
    existing = existing or {}
    candidates: List[CandidatePreview] = []

    for day in daterange(spec.start_date, spec.end_date):
        for room_id in spec.room_ids:
            room = rooms.get(room_id)
            if room is None:
                continue
            price = price_for_room(room, spec.base_price)
            for slot in spec.time_slots:
                start = datetime.combine(day, slot)
                blocks = screening_blocks(start, movie.duration_min, spec.pre_show_min, spec.post_show_min)
                span = span_of(blocks, label=movie.title)
                candidates.append(
                    CandidatePreview(
                        room_id=room_id,
                        theater_id=room.theater_id,
                        movie_id=movie.id,
                        show_date=day,
                        start_time=slot,
                        blocks=blocks,
                        span=span,
                        base_price=price,
                    )
                )

    # Late slots can spill into the next day, so conflicts are checked per room across all dates.
    for room_id in spec.room_ids:
        group = [c for c in candidates if c.room_id == room_id]
        if group:
            _flag_conflicts(group, existing.get(room_id, []), rooms[room_id])

    return candidates


def _flag_conflicts(group: List[CandidatePreview], existing: Sequence[Span], room: Room) -> None:
    """Mark candidates colliding with persisted screenings or with each other."""
    partners = sweep([c.span for c in group])
    for candidate, partner in zip(group, partners):
        result = check(candidate.span, existing)
        if result:
            candidate.conflict = True
            candidate.conflict_message = f"{room.name}: {result.message}"
        elif partner is not None:
            candidate.conflict = True
            candidate.conflict_message = f"{room.name}: {conflict_message(partner)}"


def validate_batch_spec(
    spec: BatchSpec,
    rooms: Mapping[int, Room],
    movie: Optional[Movie] = None,
    previews: Optional[Sequence[CandidatePreview]] = None,
) -> List[str]:
    """Collect every violated rule; an empty list means the batch may be submitted."""
    errors: List[str] = []
    if spec.movie_id is None or movie is None:
        errors.append("Select a movie")
    if not spec.room_ids:
        errors.append("Select at least one room")
    if not spec.time_slots:
        errors.append("Add at least one time slot")
    if spec.end_date < spec.start_date:
        errors.append("End date must not be before start date")
    unknown = [room_id for room_id in spec.room_ids if room_id not in rooms]
    if unknown:
        errors.append(f"Unknown rooms: {', '.join(str(r) for r in unknown)}")
    for preview in previews or []:
        if preview.conflict:
            errors.append(f"{preview.show_date} {preview.start_time:%H:%M} {preview.conflict_message}")
    return errors
