"""FastAPI web application for cinesched."""

import logging
from datetime import date
from typing import List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query, Response
from sqlalchemy.orm import Session

from cinesched import __version__
from cinesched.api.schemas import BatchPreviewResponse, ShowtimeResponse
from cinesched.database.catalog_repository import CatalogRepository
from cinesched.database.database import get_db
from cinesched.database.showtime_repository import ShowtimeConflictError, ShowtimeRepository
from cinesched.engine.errors import ScheduleValidationError
from cinesched.models.batch import BatchCreateResult, BatchSpec
from cinesched.models.catalog import Movie, Room, Theater
from cinesched.models.schedule_entry import ScheduleEntryPayload, ScheduleFilter

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="cinesched API",
    description="Showtime scheduling for a cinema chain",
    version=__version__,
)


def _write_error(e: ValueError) -> HTTPException:
    if isinstance(e, ShowtimeConflictError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=[str(e)])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/theaters", response_model=List[Theater])
async def list_theaters(db: Session = Depends(get_db)):
    return CatalogRepository(db).list_theaters()


@app.get("/rooms", response_model=List[Room])
async def list_rooms(theater_id: Optional[int] = None, db: Session = Depends(get_db)):
    """List rooms, optionally for one theater."""
    return CatalogRepository(db).list_rooms(theater_id)


@app.get("/movies", response_model=List[Movie])
async def list_movies(db: Session = Depends(get_db)):
    return CatalogRepository(db).list_movies()


@app.get("/showtimes", response_model=List[ShowtimeResponse])
async def list_showtimes(
    start_date: date,
    end_date: date,
    room_ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db),
):
    """List showtimes dated within [start_date, end_date], optionally for some rooms."""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail=["End date must not be before start date"])
    schedule_filter = ScheduleFilter(start_date=start_date, end_date=end_date, room_ids=room_ids)
    entries = ShowtimeRepository(db).list(schedule_filter)
    return [ShowtimeResponse.from_entry(entry) for entry in entries]


@app.get("/showtimes/{showtime_id}", response_model=ShowtimeResponse)
async def get_showtime(showtime_id: int, db: Session = Depends(get_db)):
    entry = ShowtimeRepository(db).get(showtime_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Showtime {showtime_id} not found")
    return ShowtimeResponse.from_entry(entry)


@app.post("/showtimes", response_model=ShowtimeResponse, status_code=201)
async def create_showtime(payload: ScheduleEntryPayload, db: Session = Depends(get_db)):
    """Create a showtime. 409 if the room is occupied at that time."""
    try:
        entry = ShowtimeRepository(db).create(payload)
    except ValueError as e:
        raise _write_error(e) from e
    return ShowtimeResponse.from_entry(entry)


@app.put("/showtimes/{showtime_id}", response_model=ShowtimeResponse)
async def update_showtime(showtime_id: int, payload: ScheduleEntryPayload, db: Session = Depends(get_db)):
    """Replace a showtime. 404 if unknown, 409 if the new slot is occupied."""
    try:
        entry = ShowtimeRepository(db).update(showtime_id, payload)
    except ValueError as e:
        raise _write_error(e) from e
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Showtime {showtime_id} not found")
    return ShowtimeResponse.from_entry(entry)


@app.delete("/showtimes/{showtime_id}", status_code=204)
async def delete_showtime(showtime_id: int, db: Session = Depends(get_db)):
    if not ShowtimeRepository(db).delete(showtime_id):
        raise HTTPException(status_code=404, detail=f"Showtime {showtime_id} not found")
    return Response(status_code=204)


@app.post("/showtimes/batch/preview", response_model=BatchPreviewResponse)
async def preview_batch(spec: BatchSpec, db: Session = Depends(get_db)):
    """Generate quick-schedule candidates with their conflict status. Writes nothing."""
    candidates, errors = ShowtimeRepository(db).preview_batch(spec)
    errors = errors + [
        f"{c.show_date} {c.start_time:%H:%M} {c.conflict_message}" for c in candidates if c.conflict
    ]
    return BatchPreviewResponse(candidates=candidates, errors=errors)


@app.post("/showtimes/batch", response_model=BatchCreateResult)
async def create_batch(spec: BatchSpec, db: Session = Depends(get_db)):
    """Create every non-conflicting quick-schedule candidate. 400 if the request is invalid."""
    try:
        result = ShowtimeRepository(db).batch_create(spec)
    except ScheduleValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors) from e
    logger.info(f"Batch for movie {spec.movie_id}: {result.total_created} created, {len(result.errors)} skipped")
    return result
