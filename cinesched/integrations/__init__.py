"""External integrations for cinesched."""
