"""Repository interfaces for tasksync.

Abstract base classes defining the persistence contracts ("ports").
The SQLite implementations live in tasksync.adapters.sqlite.
"""

from .repository import OutboxRepository, TaskRepository

__all__ = [
    "TaskRepository",
    "OutboxRepository",
]
