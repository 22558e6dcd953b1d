"""`tasksync config` commands."""

from typing import Any, Optional

import typer
from pydantic import ValidationError

from tasksync.config import get_config_manager
from tasksync.utils import exit_codes
from tasksync.utils.ui.console import get_console
from tasksync.utils.ui.formatters import format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Configuration management commands", no_args_is_help=True)

PROFILE = typer.Option("default", "--profile", help="Profile name")

LITERALS = {"true": True, "false": False, "none": None, "null": None}


def parse_value(value: str) -> Any:
    """Interpret a command-line string as a bool, None, int or float when it reads as one."""
    if value.lower() in LITERALS:
        return LITERALS[value.lower()]
    for number in (int, float):
        try:
            return number(value)
        except ValueError:
            pass
    return value


def _unknown_key(key: str) -> AppError:
    return AppError(f"Unknown configuration key '{key}'", exit_codes.ERROR_INVALID_ARGS)


@app.command("show")
@command_wrapper
def show_config(
    profile: str = PROFILE,
    output: str = typer.Option("yaml", "--output", "-o", help="Output format"),
) -> None:
    """Show the current configuration."""
    format_output(get_config_manager(profile).config.model_dump(), output)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Dotted key, e.g. sync.batch_size"),
    profile: str = PROFILE,
) -> None:
    """Print one configuration value."""
    value = get_config_manager(profile).get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", exit_codes.ERROR_NOT_FOUND)
    get_console().print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Dotted key, e.g. api.endpoint"),
    value: str = typer.Argument(..., help="New value"),
    profile: str = PROFILE,
) -> None:
    """Change one configuration value."""
    parsed = parse_value(value)
    try:
        get_config_manager(profile).set(key, parsed)
    except KeyError as e:
        raise _unknown_key(key) from e
    except ValidationError as e:
        reason = e.errors()[0].get("msg", "invalid value")
        raise AppError(f"Invalid value for '{key}': {reason}", exit_codes.ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' set to '{parsed}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: Optional[str] = typer.Argument(None, help="Key to reset; omit to reset everything"),
    profile: str = PROFILE,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Restore defaults for one key or the whole profile."""
    target = f"'{key}'" if key else "entire configuration"
    if not yes and not typer.confirm(f"Are you sure you want to reset {target}?"):
        raise AppError("Cancelled", exit_codes.SUCCESS)

    try:
        get_config_manager(profile).reset(key)
    except KeyError as e:
        raise _unknown_key(key) from e

    format_success(f"Configuration {target} reset to defaults")
