"""Scheduling engine for cinesched."""

from cinesched.engine.time_blocks import decompose, screening_blocks, entry_span
from cinesched.engine.coordinates import CoordinateMapper, timeline_mapper, time_of_day_instant
from cinesched.engine.overlap import check, spans_overlap, sweep, first_conflict, Conflict, NoConflict
from cinesched.engine.reconciler import WorkingSetReconciler
from cinesched.engine.batch_generator import generate, validate_batch_spec
from cinesched.engine.commit import BatchCommitExecutor, order_operations, submit_batch
from cinesched.engine.session import SchedulingSession, SessionState

__all__ = [
    "decompose",
    "screening_blocks",
    "entry_span",
    "CoordinateMapper",
    "timeline_mapper",
    "time_of_day_instant",
    "check",
    "spans_overlap",
    "sweep",
    "first_conflict",
    "Conflict",
    "NoConflict",
    "WorkingSetReconciler",
    "generate",
    "validate_batch_spec",
    "BatchCommitExecutor",
    "order_operations",
    "submit_batch",
    "SchedulingSession",
    "SessionState",
]
