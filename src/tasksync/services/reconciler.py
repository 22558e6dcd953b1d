"""Fold remote per-item outcomes back into the task store and the outbox."""

from __future__ import annotations

from collections.abc import Sequence

from tasksync.models import ItemOutcome, OutboxEntry, SyncResult
from tasksync.repositories import OutboxRepository, TaskRepository
from tasksync.utils.logger import get_logger

logger = get_logger("reconciler")


class Reconciler:
    """Applies the result of one batch to local state.

    A synced item clears the queued entries of its task up to and including
    itself, collapsing duplicate edits. The task is marked synced only when
    no newer entry is left, e.g. one waiting in a later batch or written
    while the cycle ran. A failed item marks the task as
    errored and leaves its entries queued for the next cycle. When the same
    task has both outcomes in one batch the task stays in error and only the
    succeeded entries are dropped.
    """

    def __init__(self, task_repo: TaskRepository, outbox: OutboxRepository):
        self.task_repo = task_repo
        self.outbox = outbox

    async def apply(
        self,
        batch: Sequence[OutboxEntry],
        outcomes: Sequence[ItemOutcome],
        result: SyncResult,
    ) -> None:
        """Reconcile the outcomes of one batch and accumulate them into result."""
        entries = {entry.id: entry for entry in batch}
        resolved = [
            (entries[o.client_id].task_id if o.client_id in entries else o.task_id, o)
            for o in outcomes
        ]
        failed_tasks = {task_id for task_id, o in resolved if not o.success}
        errored: set[str] = set()

        for task_id, outcome in resolved:
            try:
                if outcome.success:
                    await self._apply_success(outcome, task_id, task_id in failed_tasks)
                    result.record_success()
                else:
                    error = outcome.error or "Rejected by server"
                    if task_id not in errored:
                        await self._apply_failure(task_id, error)
                        errored.add(task_id)
                    result.record_failure(task_id, error)
            except Exception as e:
                logger.exception("failed to reconcile task %s", task_id)
                result.record_failure(task_id, f"Reconciliation failed: {e}")

    async def fail_batch(
        self, batch: Sequence[OutboxEntry], message: str, result: SyncResult
    ) -> None:
        """Mark every item of a batch that could not be transmitted as failed."""
        errored: set[str] = set()
        for entry in batch:
            if entry.task_id not in errored:
                errored.add(entry.task_id)
                try:
                    await self._apply_failure(entry.task_id, message)
                except Exception:
                    logger.exception("failed to record error for task %s", entry.task_id)
            result.record_failure(entry.task_id, message)

    async def _apply_success(
        self, outcome: ItemOutcome, task_id: str, task_has_failures: bool
    ) -> None:
        if task_has_failures:
            await self.outbox.remove(outcome.client_id)
            return

        queued = [entry.id for entry in await self.outbox.list_for_task(task_id)]
        if outcome.client_id in queued:
            newer = queued[queued.index(outcome.client_id) + 1 :]
        else:
            newer = queued

        if not newer:
            await self.task_repo.mark_synced(task_id, outcome.server_id)
        removed = await self.outbox.remove_by_task(task_id, up_to=outcome.client_id)
        logger.debug(
            "task %s: %d queue entries cleared, %d newer kept", task_id, removed, len(newer)
        )

    async def _apply_failure(self, task_id: str, error: str) -> None:
        await self.task_repo.mark_error(task_id)
        await self.outbox.mark_error(task_id, error)
