"""Data models for cinesched."""

from cinesched.models.catalog import Movie, Room, RoomCategory, Theater
from cinesched.models.identity import Identity, PersistedId, TemporaryId, is_persisted
from cinesched.models.schedule_entry import (
    Provenance,
    ScheduleEntry,
    ScheduleEntryPayload,
    ScheduleFilter,
    ShowtimeStatus,
    WorkingSetEntry,
)
from cinesched.models.time_block import BlockKind, Span, TimeBlock
from cinesched.models.operation import (
    CommitFailure,
    CommitResult,
    CreateOperation,
    DeleteOperation,
    Operation,
    OperationType,
    UpdateOperation,
)
from cinesched.models.batch import BatchCreateResult, BatchSpec, CandidatePreview

__all__ = [
    "Movie",
    "Room",
    "RoomCategory",
    "Theater",
    "Identity",
    "PersistedId",
    "TemporaryId",
    "is_persisted",
    "Provenance",
    "ScheduleEntry",
    "ScheduleEntryPayload",
    "ScheduleFilter",
    "ShowtimeStatus",
    "WorkingSetEntry",
    "BlockKind",
    "Span",
    "TimeBlock",
    "CommitFailure",
    "CommitResult",
    "CreateOperation",
    "DeleteOperation",
    "Operation",
    "OperationType",
    "UpdateOperation",
    "BatchCreateResult",
    "BatchSpec",
    "CandidatePreview",
]
