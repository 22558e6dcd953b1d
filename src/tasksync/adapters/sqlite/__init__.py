"""SQLite adapter module - local task store and outbox."""

from tasksync.adapters.sqlite.connection import (
    DatabaseConnection,
    get_connection,
    transaction,
)
from tasksync.adapters.sqlite.outbox_repository import SqliteOutboxRepository
from tasksync.adapters.sqlite.task_repository import SqliteTaskRepository

__all__ = [
    "DatabaseConnection",
    "get_connection",
    "transaction",
    "SqliteTaskRepository",
    "SqliteOutboxRepository",
]
