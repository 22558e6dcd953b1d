"""tasksync domain models.

Pydantic models for tasks, outbox entries and the sync wire format. These
models are used for validation and serialization throughout the package.
"""

from .core import (
    BatchItem,
    BatchRequest,
    ItemOutcome,
    Operation,
    OutboxEntry,
    SyncItemError,
    SyncResult,
    SyncStatus,
    SyncStatusReport,
    Task,
    TaskCreate,
    TaskUpdate,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "SyncStatus",
    # Outbox models
    "OutboxEntry",
    "Operation",
    # Wire format
    "BatchItem",
    "BatchRequest",
    "ItemOutcome",
    # Sync results
    "SyncItemError",
    "SyncResult",
    "SyncStatusReport",
]
