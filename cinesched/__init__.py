"""cinesched: showtime scheduling engine for cinema back-office tools."""

__version__ = "0.1.0"
