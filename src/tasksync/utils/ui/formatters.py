"""Output formatters for different formats."""

import json
from typing import Any

import yaml
from rich.table import Table

from tasksync.utils.ui.console import get_console

SYNC_STATUS_STYLES = {
    "pending": "yellow",
    "synced": "green",
    "error": "red",
}

OUTPUT_FORMATS = ("table", "wide", "json", "yaml")

TASK_COLUMNS = ["id", "title", "completed", "sync_status", "server_id", "updated_at"]


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False))
    else:
        format_table(data, wide=output_format == "wide")


def format_table(data: Any, wide: bool = False) -> None:
    """Format data as a table."""
    console = get_console()
    if isinstance(data, list):
        if not data:
            console.print("[yellow]No items found[/yellow]")
            return
        if isinstance(data[0], dict):
            format_dict_table(data, wide)
        else:
            for item in data:
                console.print(item)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def _format_value(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if value is None:
        return "-"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if key == "sync_status" and value in SYNC_STATUS_STYLES:
        return f"[{SYNC_STATUS_STYLES[value]}]{value}[/{SYNC_STATUS_STYLES[value]}]"
    return str(value)


def format_dict_table(items: list[dict], wide: bool = False) -> None:
    """Format a list of dictionaries as a table.

    Task lists show a fixed subset of columns unless wide is set.
    """
    columns = list(items[0].keys())
    if not wide and all(col in columns for col in TASK_COLUMNS):
        columns = TASK_COLUMNS

    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())

    for item in items:
        table.add_row(*(_format_value(col, item.get(col)) for col in columns))

    get_console().print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        if isinstance(value, list) and value and isinstance(value[0], dict):
            value = "; ".join(
                ", ".join(f"{k}={v}" for k, v in entry.items()) for entry in value
            )
        table.add_row(key.replace("_", " ").title(), _format_value(key, value))

    get_console().print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    get_console().print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    get_console().print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    get_console().print(f"[bold yellow]Warning:[/bold yellow] {message}")
