"""SQLAlchemy database models for cinesched."""

from datetime import datetime
from typing import Type, TypeVar, Union
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship

from cinesched.database.database import Base
from cinesched.models.catalog import Movie, Room, RoomCategory, Theater
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntry, ShowtimeStatus

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.upper())
    except (ValueError, AttributeError):
        return default


class TheaterDB(Base):
    """Database model for Theater."""

    __tablename__ = "theaters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)

    def to_pydantic(self) -> Theater:
        return Theater(id=self.id, name=self.name)


class RoomDB(Base):
    """Database model for Room."""

    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    theater_id = Column(Integer, ForeignKey("theaters.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default=RoomCategory.STANDARD_2D.value)

    def to_pydantic(self) -> Room:
        return Room(
            id=self.id,
            name=self.name,
            category=value_to_enum(self.category, RoomCategory, RoomCategory.STANDARD_2D),
            theater_id=self.theater_id,
        )


class MovieDB(Base):
    """Database model for Movie."""

    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    duration_min = Column(Integer, nullable=False)

    def to_pydantic(self) -> Movie:
        return Movie(id=self.id, title=self.title, duration_min=self.duration_min)


class ShowtimeDB(Base):
    """Database model for a showtime (ScheduleEntry with a persisted identity)."""

    __tablename__ = "showtimes"
    # Deleted ids are never reused
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    theater_id = Column(Integer, ForeignKey("theaters.id", ondelete="SET NULL"), nullable=True, index=True)

    show_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    base_price = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default=ShowtimeStatus.AVAILABLE.value)

    # Buffers captured at write time; the occupied span is denormalized for overlap queries.
    pre_show_min = Column(Integer, nullable=False, default=20)
    post_show_min = Column(Integer, nullable=False, default=15)
    occupied_start = Column(DateTime, nullable=False, index=True)
    occupied_end = Column(DateTime, nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    movie = relationship("MovieDB")
    room = relationship("RoomDB")

    def to_pydantic(self) -> ScheduleEntry:
        """Convert database model to Pydantic model."""
        return ScheduleEntry(
            id=PersistedId(value=self.id),
            movie_id=self.movie_id,
            room_id=self.room_id,
            theater_id=self.theater_id,
            show_date=self.show_date,
            start_time=self.start_time,
            base_price=self.base_price,
            status=value_to_enum(self.status, ShowtimeStatus, ShowtimeStatus.AVAILABLE),
            movie_duration_min=self.movie.duration_min,
            pre_show_min=self.pre_show_min,
            post_show_min=self.post_show_min,
            movie_title=self.movie.title,
            room_name=self.room.name if self.room else None,
        )
