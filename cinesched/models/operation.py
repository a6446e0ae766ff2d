"""Operation and commit result models for cinesched."""

from enum import Enum
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field

from cinesched.models.identity import PersistedId, TemporaryId
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload


class OperationType(str, Enum):
    """Operation kind. Declaration order is the commit tier order."""
    DELETE = "delete"
    UPDATE = "update"
    CREATE = "create"


class CreateOperation(BaseModel):
    """Create a new showtime from a locally-created entry."""

    op: Literal["create"] = "create"
    payload: ScheduleEntryPayload
    temp_id: Optional[TemporaryId] = Field(None, description="Working-set identity this create came from")


class UpdateOperation(BaseModel):
    """Update an existing showtime."""

    op: Literal["update"] = "update"
    id: PersistedId
    payload: ScheduleEntryPayload


class DeleteOperation(BaseModel):
    """Delete an existing showtime."""

    op: Literal["delete"] = "delete"
    id: PersistedId


Operation = Union[CreateOperation, UpdateOperation, DeleteOperation]


def describe_operation(operation: Operation) -> str:
    if isinstance(operation, CreateOperation):
        p = operation.payload
        return f"create room={p.room_id} {p.show_date} {p.start_time:%H:%M}"
    if isinstance(operation, UpdateOperation):
        return f"update {operation.id}"
    return f"delete {operation.id}"


class CommitFailure(BaseModel):
    """One operation the store rejected."""

    operation: Operation
    reason: str


class CommitResult(BaseModel):
    """Outcome of committing a list of operations."""

    succeeded: int = 0
    failed: int = 0
    failures: List[CommitFailure] = Field(default_factory=list)
    created: List[ScheduleEntry] = Field(default_factory=list, description="Entries returned by successful creates")
    timed_out: bool = Field(False, description="Commit was abandoned before every operation settled")

    @property
    def total(self) -> int:
        return self.succeeded + self.failed
