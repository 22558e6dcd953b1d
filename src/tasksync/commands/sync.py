"""Sync commands for tasksync.

Pushes queued local changes to the remote server and reports sync status.
"""

import typer

from tasksync.factory import get_factory
from tasksync.utils import exit_codes
from tasksync.utils.ui.formatters import format_output, format_success, format_warning

from .decorators import command_wrapper
from .options import OutputOption, ProfileOption

app = typer.Typer(help="Sync local changes with the remote server", no_args_is_help=True)


@app.command("run")
@command_wrapper
async def run_sync(
    output: str = OutputOption,
    profile: str = ProfileOption,
) -> None:
    """Send every queued change to the server in batches.

    Exits with code 4 when the server is unreachable, 6 when another sync
    is already running and 1 when the sync ran but some items failed.
    """
    factory = get_factory(profile)
    try:
        result = await factory.sync_service.sync()
    finally:
        await factory.close()

    format_output(result.model_dump(mode="json"), output)
    if result.failed_items:
        format_warning(
            f"{result.failed_items} item(s) failed to sync and will be retried"
        )
        raise typer.Exit(code=exit_codes.ERROR_GENERAL)
    format_success(f"{result.synced_items} item(s) synced")


@app.command("status")
@command_wrapper
async def sync_status(
    output: str = OutputOption,
    profile: str = ProfileOption,
) -> None:
    """Show queued changes, last sync time and server reachability."""
    factory = get_factory(profile)
    try:
        status = await factory.sync_service.get_status()
    finally:
        await factory.close()

    format_output(status.model_dump(mode="json"), output)
