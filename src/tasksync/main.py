"""Main entry point for the tasksync CLI."""

import typer

from tasksync import __version__
from tasksync.commands import config, sync, tasks
from tasksync.utils.ui.console import get_console

app = typer.Typer(
    name="tasksync",
    help="Local task tracking with batched sync to a remote server",
    no_args_is_help=True,
)

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(sync.app, name="sync", help="Sync local changes with the remote server")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    get_console().print(f"[bold]tasksync[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
