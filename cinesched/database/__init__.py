"""SQLAlchemy-backed showtime store for cinesched."""
