"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from tasksync.adapters.sqlite.connection import get_connection, transaction
from tasksync.adapters.sqlite.utils import (
    generate_uuid,
    now_iso,
    parse_datetime,
    row_to_dict,
)
from tasksync.exceptions import TaskNotFoundError
from tasksync.models import (
    Operation,
    SyncStatus,
    Task,
    TaskCreate,
    TaskUpdate,
)
from tasksync.repositories import OutboxRepository, TaskRepository


def _row_to_task(row: sqlite3.Row) -> Task:
    task_dict = row_to_dict(row)
    task_dict["completed"] = bool(task_dict["completed"])
    task_dict["is_deleted"] = bool(task_dict["is_deleted"])
    return Task(**task_dict)


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository.

    Every mutation writes the task row and, when an outbox is attached,
    the matching outbox entry inside a single transaction.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        outbox: OutboxRepository | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        """Initialize SQLite task repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
            outbox: Optional outbox receiving a record of every mutation.
                May also be supplied later through attach_outbox().
            connection: Optional already-configured connection to share.
        """
        self.db_path = db_path
        self.outbox = outbox
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def attach_outbox(self, outbox: OutboxRepository | None) -> None:
        self.outbox = outbox

    async def list_all(self) -> list[Task]:
        """List all tasks that are not soft-deleted, in storage order."""
        cursor = self.connection.execute(
            "SELECT * FROM tasks WHERE is_deleted = 0 ORDER BY rowid"
        )
        return [_row_to_task(row) for row in cursor.fetchall()]

    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        cursor = self.connection.execute(
            "SELECT * FROM tasks WHERE id = ? AND is_deleted = 0", (task_id,)
        )
        row = cursor.fetchone()

        if not row:
            raise TaskNotFoundError(task_id)

        return _row_to_task(row)

    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new pending task and queue its create operation."""
        now = now_iso()
        task = Task(
            id=generate_uuid(),
            title=task_data.title,
            description=task_data.description,
            completed=False,
            created_at=now,
            updated_at=now,
            is_deleted=False,
            sync_status=SyncStatus.PENDING,
        )

        async with self._mutation(task, Operation.CREATE):
            self.connection.execute(
                """INSERT INTO tasks (
                    id, title, description, completed, created_at, updated_at,
                    is_deleted, sync_status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    task.id,
                    task.title,
                    task.description,
                    0,
                    now,
                    now,
                    0,
                    task.sync_status.value,
                ),
            )

        return task

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Merge provided fields over the task and reset it to pending."""
        existing = await self.get(task_id)
        now = now_iso()

        merged = existing.model_dump()
        merged.update(updates.model_dump(exclude_unset=True, exclude_none=True))
        merged["updated_at"] = now
        merged["sync_status"] = SyncStatus.PENDING
        task = Task(**merged)

        async with self._mutation(task, Operation.UPDATE):
            self.connection.execute(
                """UPDATE tasks
                   SET title = ?, description = ?, completed = ?,
                       updated_at = ?, sync_status = ?
                   WHERE id = ?""",
                (
                    task.title,
                    task.description,
                    1 if task.completed else 0,
                    now,
                    task.sync_status.value,
                    task_id,
                ),
            )

        return task

    async def delete(self, task_id: str) -> bool:
        """Soft-delete a task and queue its delete operation."""
        existing = await self.get(task_id)
        now = now_iso()

        task = existing.model_copy(
            update={
                "is_deleted": True,
                "updated_at": parse_datetime(now),
                "sync_status": SyncStatus.PENDING,
            }
        )

        async with self._mutation(task, Operation.DELETE):
            self.connection.execute(
                """UPDATE tasks
                   SET is_deleted = 1, updated_at = ?, sync_status = ?
                   WHERE id = ?""",
                (now, task.sync_status.value, task_id),
            )

        return True

    async def mark_synced(self, task_id: str, server_id: str | None = None) -> None:
        """Flag a task (deleted or not) as synced."""
        self.connection.execute(
            """UPDATE tasks
               SET sync_status = ?, last_synced_at = ?, server_id = COALESCE(?, server_id)
               WHERE id = ?""",
            (SyncStatus.SYNCED.value, now_iso(), server_id, task_id),
        )
        self.connection.commit()

    async def mark_error(self, task_id: str) -> None:
        self.connection.execute(
            "UPDATE tasks SET sync_status = ? WHERE id = ?",
            (SyncStatus.ERROR.value, task_id),
        )
        self.connection.commit()

    async def last_synced_at(self) -> datetime | None:
        cursor = self.connection.execute("SELECT MAX(last_synced_at) FROM tasks")
        return parse_datetime(cursor.fetchone()[0])

    async def list_needing_sync(self) -> list[Task]:
        cursor = self.connection.execute(
            "SELECT * FROM tasks WHERE sync_status IN (?, ?) ORDER BY rowid",
            (SyncStatus.PENDING.value, SyncStatus.ERROR.value),
        )
        return [_row_to_task(row) for row in cursor.fetchall()]

    @asynccontextmanager
    async def _mutation(self, task: Task, operation: Operation) -> AsyncIterator[None]:
        """Run the task write in the body, then queue the outbox entry, in one transaction."""
        with transaction(self.connection):
            yield
            if self.outbox is not None:
                await self.outbox.enqueue(
                    task.id,
                    operation,
                    task.model_dump(mode="json"),
                    commit=False,
                )
