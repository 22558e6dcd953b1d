"""Repository abstraction layer for tasksync.

This module defines the abstract base classes (interfaces) for task and
outbox persistence, following the ports & adapters pattern. The sync
services only talk to these interfaces; the SQLite adapters implement them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from tasksync.models import Operation, OutboxEntry, Task, TaskCreate, TaskUpdate


class OutboxRepository(ABC):
    """Abstract base class for the durable queue of pending mutations."""

    @abstractmethod
    async def enqueue(
        self,
        task_id: str,
        operation: Operation,
        snapshot: dict[str, Any],
        *,
        commit: bool = True,
    ) -> OutboxEntry:
        """Append a new entry for a task.

        Args:
            task_id: Owning task ID
            operation: Mutation kind
            snapshot: Post-mutation task data
            commit: When False the insert joins the caller's open transaction

        Returns:
            The stored OutboxEntry
        """
        raise NotImplementedError("OutboxRepository.enqueue() must be implemented by adapter")

    @abstractmethod
    async def drain_all(self) -> list[OutboxEntry]:
        """Return every entry, oldest first."""
        raise NotImplementedError("OutboxRepository.drain_all() must be implemented by adapter")

    @abstractmethod
    async def remove_by_task(self, task_id: str, up_to: str | None = None) -> int:
        """Delete the entries of a task.

        Args:
            task_id: Owning task ID
            up_to: Entry ID; when given only that entry and the ones queued
                before it are deleted, newer entries stay

        Returns:
            Number of entries removed
        """
        raise NotImplementedError(
            "OutboxRepository.remove_by_task() must be implemented by adapter"
        )

    @abstractmethod
    async def remove(self, entry_id: str) -> bool:
        """Delete a single entry by its queue ID."""
        raise NotImplementedError("OutboxRepository.remove() must be implemented by adapter")

    @abstractmethod
    async def mark_error(self, task_id: str, message: str) -> int:
        """Record a delivery failure on every entry of a task.

        Entries stay queued so the next cycle retries them.

        Returns:
            Number of entries annotated
        """
        raise NotImplementedError(
            "OutboxRepository.mark_error() must be implemented by adapter"
        )

    @abstractmethod
    async def count_pending(self) -> int:
        """Count entries whose task is still pending or in error."""
        raise NotImplementedError(
            "OutboxRepository.count_pending() must be implemented by adapter"
        )

    @abstractmethod
    async def list_for_task(self, task_id: str) -> list[OutboxEntry]:
        """Return the entries of one task, oldest first."""
        raise NotImplementedError(
            "OutboxRepository.list_for_task() must be implemented by adapter"
        )


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    Mutating operations must enqueue an outbox entry in the same transaction
    as the task write when an outbox is attached.
    """

    @abstractmethod
    def attach_outbox(self, outbox: OutboxRepository | None) -> None:
        """Attach (or detach) the outbox that receives mutation records."""
        raise NotImplementedError(
            "TaskRepository.attach_outbox() must be implemented by adapter"
        )

    @abstractmethod
    async def list_all(self) -> list[Task]:
        """List all tasks that are not soft-deleted."""
        raise NotImplementedError("TaskRepository.list_all() must be implemented by adapter")

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a task by ID.

        Raises:
            TaskNotFoundError: If the task does not exist or is soft-deleted
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new pending task."""
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Merge updates over an existing task and reset it to pending.

        Raises:
            TaskNotFoundError: If the task does not exist or is soft-deleted
        """
        raise NotImplementedError("TaskRepository.update() must be implemented by adapter")

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Soft-delete a task.

        Raises:
            TaskNotFoundError: If the task does not exist or is soft-deleted
        """
        raise NotImplementedError("TaskRepository.delete() must be implemented by adapter")

    @abstractmethod
    async def mark_synced(self, task_id: str, server_id: str | None = None) -> None:
        """Flag a task as synced, keeping the previous server_id when none is given."""
        raise NotImplementedError(
            "TaskRepository.mark_synced() must be implemented by adapter"
        )

    @abstractmethod
    async def mark_error(self, task_id: str) -> None:
        """Flag a task as failed to sync."""
        raise NotImplementedError(
            "TaskRepository.mark_error() must be implemented by adapter"
        )

    @abstractmethod
    async def last_synced_at(self) -> datetime | None:
        """Most recent last_synced_at across all tasks."""
        raise NotImplementedError(
            "TaskRepository.last_synced_at() must be implemented by adapter"
        )

    @abstractmethod
    async def list_needing_sync(self) -> list[Task]:
        """Tasks (deleted or not) whose status is pending or error."""
        raise NotImplementedError(
            "TaskRepository.list_needing_sync() must be implemented by adapter"
        )
