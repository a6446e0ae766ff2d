"""Error taxonomy for the scheduling engine."""

from typing import List


class ScheduleValidationError(ValueError):
    """Pre-submission validation failed. Carries every violated rule at once."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class PlacementConflictError(ValueError):
    """A placement would overlap another screening in the same room."""

    def __init__(self, conflict):
        self.conflict = conflict
        super().__init__(conflict.message)


class UnknownEntryError(KeyError):
    """No working-set entry has the given identity."""


class SessionStateError(RuntimeError):
    """The requested action is not valid in the session's current state."""
