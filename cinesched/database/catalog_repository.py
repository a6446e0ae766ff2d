"""Repository layer for the theater, room and movie catalog."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from cinesched.database.models import MovieDB, RoomDB, TheaterDB, enum_to_value
from cinesched.models.catalog import Movie, Room, RoomCategory, Theater

logger = logging.getLogger(__name__)


class CatalogRepository:
    """Read access to the catalog, plus the inserts used for seeding."""

    def __init__(self, db: Session):
        self.db = db

    def list_theaters(self) -> List[Theater]:
        theaters_db = self.db.query(TheaterDB).order_by(TheaterDB.name).all()
        return [theater_db.to_pydantic() for theater_db in theaters_db]

    def list_rooms(self, theater_id: Optional[int] = None) -> List[Room]:
        """Rooms ordered by name, optionally restricted to one theater."""
        query = self.db.query(RoomDB)
        if theater_id is not None:
            query = query.filter(RoomDB.theater_id == theater_id)
        return [room_db.to_pydantic() for room_db in query.order_by(RoomDB.name).all()]

    def list_movies(self) -> List[Movie]:
        movies_db = self.db.query(MovieDB).order_by(MovieDB.title).all()
        return [movie_db.to_pydantic() for movie_db in movies_db]

    def _add(self, row, description: str):
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created {description} {row.id}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create {description}: {type(e).__name__}: {str(e)}")
            raise

    def create_theater(self, name: str) -> Theater:
        return self._add(TheaterDB(name=name), "theater")

    def create_room(self, name: str, theater_id: Optional[int] = None, category=RoomCategory.STANDARD_2D) -> Room:
        return self._add(RoomDB(name=name, theater_id=theater_id, category=enum_to_value(category)), "room")

    def create_movie(self, title: str, duration_min: int) -> Movie:
        if duration_min <= 0:
            raise ValueError("Movie duration must be positive")
        return self._add(MovieDB(title=title, duration_min=duration_min), "movie")
