"""Sync service - drains the outbox to the remote server in batches.

One cycle: check the server is reachable, read the whole outbox oldest
first, split it into batches, send the batches one after another and
reconcile each batch's outcomes before the next one is sent.
"""

from __future__ import annotations

import asyncio
import time

from tasksync.api.batch import RemoteSyncClient
from tasksync.config import SyncConfig
from tasksync.exceptions import (
    BatchTransmissionError,
    RemoteUnavailableError,
    SyncInProgressError,
)
from tasksync.models import OutboxEntry, SyncResult, SyncStatusReport
from tasksync.repositories import OutboxRepository, TaskRepository
from tasksync.services.batcher import partition
from tasksync.services.reconciler import Reconciler
from tasksync.utils.logger import get_logger

logger = get_logger("sync")


class SyncService:
    """Runs sync cycles and reports sync status.

    Only one cycle runs at a time per service instance; a second request
    while one is in flight is refused rather than queued, so the same
    outbox entries are never handed to the server twice concurrently.
    """

    def __init__(
        self,
        task_repo: TaskRepository,
        outbox: OutboxRepository,
        remote: RemoteSyncClient,
        config: SyncConfig | None = None,
        reconciler: Reconciler | None = None,
    ):
        """Initialize sync service.

        Args:
            task_repo: Task store updated with sync state
            outbox: Queue of pending mutations
            remote: Client for the remote batch endpoint
            config: Batch size and per-batch timeout
            reconciler: Optional reconciler; built from the repositories if omitted
        """
        self.task_repo = task_repo
        self.outbox = outbox
        self.remote = remote
        self.config = config or SyncConfig()
        self.reconciler = reconciler or Reconciler(task_repo, outbox)
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        """True while a cycle is running."""
        return self._lock.locked()

    async def check_connectivity(self) -> bool:
        return await self.remote.check_connectivity()

    async def sync(self) -> SyncResult:
        """Run one full sync cycle.

        Returns:
            Aggregate SyncResult across all batches

        Raises:
            SyncInProgressError: If another cycle is already running
            RemoteUnavailableError: If the server is unreachable; the outbox
                is left untouched
        """
        if self._lock.locked():
            raise SyncInProgressError("A sync is already in progress")

        async with self._lock:
            return await self._run_cycle()

    async def _run_cycle(self) -> SyncResult:
        start = time.monotonic()

        if not await self.remote.check_connectivity():
            logger.warning("sync skipped: server unreachable")
            raise RemoteUnavailableError("Server unreachable. Please try later.")

        entries = await self.outbox.drain_all()
        result = SyncResult()
        if not entries:
            logger.info("sync: nothing to send")
            return result

        batches = partition(entries, self.config.batch_size)
        logger.info(
            "sync started: %d queued item(s) in %d batch(es)", len(entries), len(batches)
        )

        for index, batch in enumerate(batches, start=1):
            await self._process_batch(index, batch, result)

        result.duration = time.monotonic() - start
        logger.info(
            "sync finished: %d synced, %d failed (%.3fs)",
            result.synced_items,
            result.failed_items,
            result.duration,
        )
        return result

    async def _process_batch(
        self, index: int, batch: list[OutboxEntry], result: SyncResult
    ) -> None:
        try:
            outcomes = await asyncio.wait_for(
                self.remote.send(batch), timeout=self.config.batch_timeout
            )
        except TimeoutError:
            message = f"Batch timed out after {self.config.batch_timeout:g}s"
        except BatchTransmissionError as e:
            message = str(e)
        except Exception as e:
            logger.exception("batch %d: unexpected error while sending", index)
            message = str(e) or type(e).__name__
        else:
            await self.reconciler.apply(batch, outcomes, result)
            return

        logger.error("batch %d failed (%d item(s)): %s", index, len(batch), message)
        await self.reconciler.fail_batch(batch, message, result)

    async def get_status(self) -> SyncStatusReport:
        """Pending outbox count, last successful sync and server reachability."""
        return SyncStatusReport(
            pending_count=await self.outbox.count_pending(),
            last_sync=await self.task_repo.last_synced_at(),
            online=await self.remote.check_connectivity(),
        )
