"""Options shared by the command groups."""

import typer

from tasksync.utils.ui.formatters import OUTPUT_FORMATS

OutputOption = typer.Option(
    "table", "--output", "-o", help=f"Output format ({', '.join(OUTPUT_FORMATS)})"
)
ProfileOption = typer.Option("default", "--profile", help="Configuration profile")
