"""Commit of schedule operations against the store.

Operations are dispatched in tiers: every delete, then every update, then
every create. A freed slot is vacated before anything else may claim it.
Within a tier operations run concurrently and each result is collected on
its own, so one rejected operation never stops the rest.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from cinesched.engine.batch_generator import validate_batch_spec
from cinesched.engine.errors import ScheduleValidationError
from cinesched.engine.store import ScheduleStore
from cinesched.models.batch import BatchCreateResult, BatchSpec, CandidatePreview
from cinesched.models.operation import (
    CommitFailure,
    CommitResult,
    CreateOperation,
    DeleteOperation,
    Operation,
    UpdateOperation,
    describe_operation,
)

logger = logging.getLogger(__name__)


def order_operations(operations: Sequence[Operation]) -> List[List[Operation]]:
    """Split operations into [deletes, updates, creates], keeping input order inside a tier."""
    deletes = [op for op in operations if isinstance(op, DeleteOperation)]
    updates = [op for op in operations if isinstance(op, UpdateOperation)]
    creates = [op for op in operations if isinstance(op, CreateOperation)]
    return [deletes, updates, creates]


class BatchCommitExecutor:
    """Applies operations to a ScheduleStore with per-operation failure tolerance."""

    def __init__(self, store: ScheduleStore):
        self.store = store

    async def _dispatch(self, operation: Operation):
        if isinstance(operation, DeleteOperation):
            return await self.store.delete_entry(operation.id)
        if isinstance(operation, UpdateOperation):
            return await self.store.update_entry(operation.id, operation.payload)
        return await self.store.create_entry(operation.payload)

    async def commit(self, operations: Sequence[Operation], result: Optional[CommitResult] = None) -> CommitResult:
        """Dispatch every operation tier by tier and tally the outcome.

        Tallies go into `result` (a fresh CommitResult if None) as each tier
        settles, so a caller that abandons the commit keeps what already landed.

        The caller must resync the baseline afterwards whatever the result:
        after a partial failure the working set's provenance tags are stale.
        """
        if result is None:
            result = CommitResult()
        for tier in order_operations(operations):
            if not tier:
                continue
            outcomes = await asyncio.gather(
                *(self._dispatch(op) for op in tier),
                return_exceptions=True,
            )
            for operation, outcome in zip(tier, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    result.failed += 1
                    result.failures.append(CommitFailure(operation=operation, reason=str(outcome) or type(outcome).__name__))
                    logger.warning(
                        f"Commit operation failed ({describe_operation(operation)}): {type(outcome).__name__}: {outcome}"
                    )
                    continue
                result.succeeded += 1
                if isinstance(operation, CreateOperation) and outcome is not None:
                    result.created.append(outcome)

        logger.info(f"Committed {result.succeeded}/{result.total} schedule operations")
        return result


async def submit_batch(
    store: ScheduleStore,
    spec: BatchSpec,
    previews: Sequence[CandidatePreview],
    rooms,
    movie=None,
) -> BatchCreateResult:
    """Submit a quick-schedule batch, refusing it while any rule is violated.

    Raises:
        ScheduleValidationError: listing every violated rule (nothing is sent)
    """
    errors = validate_batch_spec(spec, rooms, movie=movie, previews=previews)
    if errors:
        raise ScheduleValidationError(errors)
    result = await store.batch_create(spec)
    logger.info(f"Batch create for movie {spec.movie_id}: {result.total_created} created, {len(result.errors)} errors")
    return result
