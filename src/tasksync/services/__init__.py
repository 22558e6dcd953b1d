"""Service layer for tasksync.

Services hold the business rules and orchestrate repositories and the
remote client; commands call services, never adapters directly.
"""

from tasksync.services.batcher import partition
from tasksync.services.reconciler import Reconciler
from tasksync.services.sync_service import SyncService
from tasksync.services.task_service import TaskService

__all__ = [
    "partition",
    "Reconciler",
    "SyncService",
    "TaskService",
]
