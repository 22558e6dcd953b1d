"""Custom exceptions for tasksync."""


class TaskSyncError(Exception):
    """Base exception for all tasksync errors."""


class TaskNotFoundError(TaskSyncError):
    """Raised when a task does not exist or has been soft-deleted."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskValidationError(TaskSyncError):
    """Raised when task input is rejected before anything is written."""


class RemoteUnavailableError(TaskSyncError):
    """Raised when the remote server is unreachable before a sync cycle starts."""


class BatchTransmissionError(TaskSyncError):
    """Raised when a batch could not be delivered or was rejected as a whole."""


class SyncInProgressError(TaskSyncError):
    """Raised when a sync cycle is requested while another one is running."""
