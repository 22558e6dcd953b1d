"""Task service - Business logic for task operations.

This service layer sits between commands and the task repository. Input is
validated here, before anything reaches the store or the outbox.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from tasksync.exceptions import TaskValidationError
from tasksync.models import Task, TaskCreate, TaskUpdate
from tasksync.repositories import TaskRepository


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "input"
    message = first.get("msg", "invalid value").removeprefix("Value error, ")
    return f"{field}: {message}"


class TaskService:
    """Service for task business logic."""

    def __init__(self, task_repository: TaskRepository):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
        """
        self.repository = task_repository

    async def list_tasks(self) -> list[Task]:
        return await self.repository.list_all()

    async def get_task(self, task_id: str) -> Task:
        return await self.repository.get(task_id)

    async def add_task(self, title: str | None, description: str | None = None) -> Task:
        """Create a new task.

        Raises:
            TaskValidationError: If the title is missing or blank
        """
        if title is None or not title.strip():
            raise TaskValidationError("Title is required")
        try:
            task_data = TaskCreate(title=title, description=description)
        except ValidationError as e:
            raise TaskValidationError(_validation_message(e)) from e
        return await self.repository.add(task_data)

    async def update_task(self, task_id: str, **updates: Any) -> Task:
        """Update an existing task with the given fields.

        Raises:
            TaskValidationError: If a field value is rejected
            TaskNotFoundError: If the task does not exist or is deleted
        """
        try:
            task_update = TaskUpdate(**{k: v for k, v in updates.items() if v is not None})
        except ValidationError as e:
            raise TaskValidationError(_validation_message(e)) from e
        return await self.repository.update(task_id, task_update)

    async def delete_task(self, task_id: str) -> bool:
        return await self.repository.delete(task_id)

    async def tasks_needing_sync(self) -> list[Task]:
        return await self.repository.list_needing_sync()
