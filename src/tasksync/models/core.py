"""Task, outbox and sync data models."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class SyncStatus(str, Enum):
    """Synchronization state of a task."""

    PENDING = "pending"
    SYNCED = "synced"
    ERROR = "error"


class Operation(str, Enum):
    """Kind of local mutation recorded in the outbox."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Task(BaseModel):
    """Task model with its local lifecycle and sync metadata.

    Attributes:
        id: Client-generated unique identifier, never changes
        title: Short task title
        description: Free-form description
        completed: Completion flag
        created_at: Creation timestamp
        updated_at: Last local modification timestamp
        is_deleted: Soft-delete flag, the row is kept
        sync_status: pending, synced or error
        server_id: Identifier assigned by the remote server after a sync
        last_synced_at: Timestamp of the last successful sync
    """

    id: str
    title: str
    description: str = ""
    completed: bool = False
    created_at: datetime
    updated_at: datetime
    is_deleted: bool = False
    sync_status: SyncStatus = SyncStatus.PENDING
    server_id: str | None = None
    last_synced_at: datetime | None = None


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Attributes:
        title: Task title (required, not blank)
        description: Optional description
    """

    title: str = Field(min_length=1)
    description: str = ""

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, value: Any) -> Any:
        return "" if value is None else value


class TaskUpdate(BaseModel):
    """Model for updating an existing task.

    All fields are optional - only provided fields are merged.
    """

    title: str | None = None
    description: str | None = None
    completed: bool | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Title cannot be blank")
        return value


class OutboxEntry(BaseModel):
    """A queued local mutation waiting to be confirmed by the server.

    Attributes:
        id: Queue entry identifier (distinct from the task id)
        task_id: Owning task
        operation: create, update or delete
        data: JSON snapshot of the task at enqueue time
        created_at: Enqueue timestamp, defines FIFO order
        retry_count: Number of failed delivery attempts
        error_message: Last failure message
    """

    id: str
    task_id: str
    operation: Operation
    data: str
    created_at: datetime
    retry_count: int = 0
    error_message: str | None = None

    def payload(self) -> dict[str, Any]:
        """Return the parsed task snapshot."""
        return json.loads(self.data)


class BatchItem(BaseModel):
    """One outbox entry as sent to the remote batch endpoint."""

    client_id: str
    task_id: str
    operation: Operation
    data: dict[str, Any]


class BatchRequest(BaseModel):
    """Envelope POSTed to the remote batch endpoint."""

    items: list[BatchItem]
    client_timestamp: datetime


class ItemOutcome(BaseModel):
    """Remote verdict for one batch item."""

    client_id: str
    task_id: str
    success: bool
    server_id: str | None = None
    error: str | None = None


class SyncItemError(BaseModel):
    """Failure recorded for one item during a sync cycle."""

    task_id: str
    error: str


class SyncResult(BaseModel):
    """Aggregate result of one sync cycle."""

    success: bool = True
    synced_items: int = 0
    failed_items: int = 0
    errors: list[SyncItemError] = Field(default_factory=list)
    duration: float = 0.0

    def record_success(self) -> None:
        self.synced_items += 1

    def record_failure(self, task_id: str, error: str) -> None:
        self.failed_items += 1
        self.success = False
        self.errors.append(SyncItemError(task_id=task_id, error=error))


class SyncStatusReport(BaseModel):
    """Snapshot of the outbox and remote state."""

    pending_count: int
    last_sync: datetime | None = None
    online: bool
