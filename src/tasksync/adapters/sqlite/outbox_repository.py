"""SQLite implementation of OutboxRepository (the sync_queue table)."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from tasksync.adapters.sqlite.connection import get_connection
from tasksync.adapters.sqlite.utils import (
    dump_snapshot,
    generate_uuid,
    now_iso,
    row_to_dict,
)
from tasksync.models import Operation, OutboxEntry
from tasksync.repositories import OutboxRepository


class SqliteOutboxRepository(OutboxRepository):
    """SQLite implementation of the outbox."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        """Initialize SQLite outbox repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
            connection: Optional already-configured connection to share.
        """
        self.db_path = db_path
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    async def enqueue(
        self,
        task_id: str,
        operation: Operation,
        snapshot: dict[str, Any],
        *,
        commit: bool = True,
    ) -> OutboxEntry:
        """Append a new entry; no de-duplication against earlier entries."""
        created_at = now_iso()
        entry = OutboxEntry(
            id=generate_uuid(),
            task_id=task_id,
            operation=Operation(operation),
            data=dump_snapshot(snapshot),
            created_at=created_at,
        )

        self.connection.execute(
            """INSERT INTO sync_queue (
                id, task_id, operation, data, created_at, retry_count, error_message
            ) VALUES (?, ?, ?, ?, ?, 0, NULL)""",
            (
                entry.id,
                entry.task_id,
                entry.operation.value,
                entry.data,
                created_at,
            ),
        )
        if commit:
            self.connection.commit()

        return entry

    async def drain_all(self) -> list[OutboxEntry]:
        """Return every entry, oldest first (insertion order breaks ties)."""
        cursor = self.connection.execute(
            "SELECT * FROM sync_queue ORDER BY created_at ASC, rowid ASC"
        )
        return [OutboxEntry(**row_to_dict(row)) for row in cursor.fetchall()]

    async def list_for_task(self, task_id: str) -> list[OutboxEntry]:
        cursor = self.connection.execute(
            "SELECT * FROM sync_queue WHERE task_id = ? ORDER BY created_at ASC, rowid ASC",
            (task_id,),
        )
        return [OutboxEntry(**row_to_dict(row)) for row in cursor.fetchall()]

    async def remove_by_task(self, task_id: str, up_to: str | None = None) -> int:
        if up_to is None:
            cursor = self.connection.execute(
                "DELETE FROM sync_queue WHERE task_id = ?", (task_id,)
            )
        else:
            # same (created_at, rowid) order as drain_all
            cursor = self.connection.execute(
                """DELETE FROM sync_queue
                   WHERE task_id = ?
                     AND (created_at, rowid) <= (
                         SELECT created_at, rowid FROM sync_queue WHERE id = ?
                     )""",
                (task_id, up_to),
            )
        self.connection.commit()
        return cursor.rowcount

    async def remove(self, entry_id: str) -> bool:
        cursor = self.connection.execute(
            "DELETE FROM sync_queue WHERE id = ?", (entry_id,)
        )
        self.connection.commit()
        return cursor.rowcount > 0

    async def mark_error(self, task_id: str, message: str) -> int:
        """Store the failure message and bump retry_count; entries stay queued."""
        cursor = self.connection.execute(
            """UPDATE sync_queue
               SET error_message = ?, retry_count = retry_count + 1
               WHERE task_id = ?""",
            (message, task_id),
        )
        self.connection.commit()
        return cursor.rowcount

    async def count_pending(self) -> int:
        cursor = self.connection.execute(
            """SELECT COUNT(*) FROM sync_queue q
               JOIN tasks t ON t.id = q.task_id
               WHERE t.sync_status IN ('pending', 'error')"""
        )
        return cursor.fetchone()[0]
