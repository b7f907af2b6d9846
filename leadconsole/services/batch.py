"""Bulk mutation of a fixed set of leads with aggregate progress.

Two execution strategies share the ``BatchJob`` contract: a sequential loop
that awaits one per-lead mutation at a time, and a single server-side batch
request for archive/restore where progress jumps from 0 to total.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from leadconsole.core.errors import LeadConsoleError
from leadconsole.schemas.batch import BatchJob
from leadconsole.services.read_modify_write import read_modify_write, set_fields

logger = logging.getLogger(__name__)

Mutate = Callable[[int], Awaitable[Any]]
BatchRequest = Callable[[list], Awaitable[Any]]
ProgressCallback = Callable[[BatchJob], Any]


class SequentialStrategy:
    """One ``mutate`` call per id, strictly in order, never fail-fast."""

    def __init__(self, mutate: Mutate):
        self.mutate = mutate

    async def execute(self, job: BatchJob, on_progress: Optional[ProgressCallback]) -> None:
        for lead_id in job.ids:
            try:
                await self.mutate(lead_id)
            except Exception as exc:
                logger.warning("Batch mutation failed for lead %s: %s", lead_id, exc)
                job.record_failure(lead_id, _reason(exc))
            else:
                job.record_success(lead_id)
            await _notify(on_progress, job)


class BatchRequestStrategy:
    """A single request carrying every id.

    A failed request fails every id. When the server reports the ids it
    actually changed, ids missing from that list fail with ``not_applied``.
    """

    def __init__(self, request: BatchRequest, not_applied: str = "Not updated"):
        self.request = request
        self.not_applied = not_applied

    async def execute(self, job: BatchJob, on_progress: Optional[ProgressCallback]) -> None:
        if not job.ids:
            return
        try:
            response = await self.request(list(job.ids))
        except Exception as exc:
            logger.warning("Batch request for %d leads failed: %s", job.total, exc)
            reason = _reason(exc)
            for lead_id in job.ids:
                job.record_failure(lead_id, reason)
        else:
            applied = _applied_ids(response)
            for lead_id in job.ids:
                if applied is None or lead_id in applied:
                    job.record_success(lead_id)
                else:
                    job.record_failure(lead_id, self.not_applied)
        await _notify(on_progress, job)


class BatchOperationRunner:
    async def run(
        self,
        ids: Iterable[int],
        mutate,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchJob:
        """Run ``mutate`` over a snapshot of ``ids``.

        ``mutate`` is either a per-id coroutine function or a strategy object
        with an ``execute(job, on_progress)`` coroutine.
        """
        job = BatchJob.for_ids(ids)
        strategy = mutate if hasattr(mutate, "execute") else SequentialStrategy(mutate)
        logger.info("Starting batch of %d leads with %s", job.total, type(strategy).__name__)
        await strategy.execute(job, on_progress)
        logger.info("Batch finished: %s", job.message)
        return job


def change_status(client, status_id: int) -> Mutate:
    async def mutate(lead_id: int) -> Any:
        return await read_modify_write(client, lead_id, set_fields(status_id=status_id))

    return mutate


def assign_to(client, user_id: Optional[int]) -> Mutate:
    async def mutate(lead_id: int) -> Any:
        return await read_modify_write(client, lead_id, set_fields(assigned_to_user_id=user_id))

    return mutate


def set_active(client, active: bool) -> Mutate:
    async def mutate(lead_id: int) -> Any:
        return await read_modify_write(client, lead_id, set_fields(is_active=active))

    return mutate


def archive_strategy(client) -> BatchRequestStrategy:
    return BatchRequestStrategy(client.batch_soft_delete, not_applied="Not archived")


def restore_strategy(client) -> BatchRequestStrategy:
    return BatchRequestStrategy(client.batch_restore, not_applied="Not restored")


def _applied_ids(response: Any) -> Optional[set]:
    """Ids the server reports as changed, or None when it does not say."""
    if not isinstance(response, dict):
        return None
    records = response.get("records")
    if isinstance(records, list) and len(records) == 1 and isinstance(records[0], dict):
        response = records[0]
    ids = response.get("ids")
    if not isinstance(ids, list):
        return None
    return {int(lead_id) for lead_id in ids}


def _reason(exc: Exception) -> str:
    if isinstance(exc, LeadConsoleError):
        return str(exc) or type(exc).__name__
    return f"{type(exc).__name__}: {exc}"


async def _notify(on_progress: Optional[ProgressCallback], job: BatchJob) -> None:
    if on_progress is None:
        return
    result = on_progress(job)
    if inspect.isawaitable(result):
        await result
