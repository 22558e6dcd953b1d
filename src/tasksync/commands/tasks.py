"""Task management commands."""

from typing import Optional

import typer

from tasksync.factory import get_factory
from tasksync.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .options import OutputOption, ProfileOption

app = typer.Typer(help="Task management commands", no_args_is_help=True)


@app.command("add")
@command_wrapper
async def add_task(
    title: str = typer.Argument(..., help="Task title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Task description"),
    output: str = OutputOption,
    profile: str = ProfileOption,
) -> None:
    """Create a task and queue it for sync."""
    factory = get_factory(profile)
    task = await factory.task_service.add_task(title, description)
    format_output(task.model_dump(mode="json"), output)


@app.command("list")
@command_wrapper
async def list_tasks(
    pending: bool = typer.Option(False, "--pending", help="Only tasks waiting to sync, deleted ones included"),
    output: str = OutputOption,
    profile: str = ProfileOption,
) -> None:
    """List tasks."""
    factory = get_factory(profile)
    if pending:
        tasks = await factory.task_service.tasks_needing_sync()
    else:
        tasks = await factory.task_service.list_tasks()
    format_output([task.model_dump(mode="json") for task in tasks], output)


@app.command("get")
@command_wrapper
async def get_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str = OutputOption,
    profile: str = ProfileOption,
) -> None:
    """Show a single task."""
    factory = get_factory(profile)
    task = await factory.task_service.get_task(task_id)
    format_output(task.model_dump(mode="json"), output)


@app.command("update")
@command_wrapper
async def update_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    completed: Optional[bool] = typer.Option(None, "--completed/--not-completed", help="Completion state"),
    output: str = OutputOption,
    profile: str = ProfileOption,
) -> None:
    """Update a task and queue the change for sync."""
    factory = get_factory(profile)
    task = await factory.task_service.update_task(
        task_id, title=title, description=description, completed=completed
    )
    format_output(task.model_dump(mode="json"), output)


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    profile: str = ProfileOption,
) -> None:
    """Soft-delete a task and queue the deletion for sync."""
    factory = get_factory(profile)
    await factory.task_service.delete_task(task_id)
    format_success(f"Task deleted: {task_id}")
