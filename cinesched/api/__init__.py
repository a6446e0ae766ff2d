"""HTTP service for cinesched."""
