"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
from collections.abc import Callable

import typer

from tasksync.exceptions import (
    RemoteUnavailableError,
    SyncInProgressError,
    TaskNotFoundError,
    TaskSyncError,
    TaskValidationError,
)
from tasksync.utils import exit_codes
from tasksync.utils.logger import get_logger
from tasksync.utils.ui.formatters import format_error

ERROR_EXIT_CODES: dict[type[TaskSyncError], int] = {
    TaskNotFoundError: exit_codes.ERROR_NOT_FOUND,
    TaskValidationError: exit_codes.ERROR_INVALID_ARGS,
    RemoteUnavailableError: exit_codes.ERROR_NETWORK,
    SyncInProgressError: exit_codes.ERROR_CONFLICT,
}

logger = get_logger("cli")


class AppError(Exception):
    """A user-facing failure that ends the command with a given exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(error: TaskSyncError) -> int:
    return next(
        (code for kind, code in ERROR_EXIT_CODES.items() if isinstance(error, kind)),
        exit_codes.ERROR_GENERAL,
    )


def command_wrapper(func: Callable):
    """Run a command, awaiting it when it is a coroutine function.

    Errors are printed as a single line and turned into a typer.Exit with
    the matching exit code. Tracebacks only go to the log file.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        name = func.__name__
        started = time.monotonic()
        logger.info("%s: started", name)

        def fail(error: Exception, message: str, code: int, **log_kwargs) -> typer.Exit:
            logger.error(
                "%s: failed after %.3fs with %s (%s): %s",
                name,
                time.monotonic() - started,
                exit_codes.get_exit_code_name(code),
                exit_codes.get_exit_code_description(code),
                error,
                **log_kwargs,
            )
            format_error(message)
            return typer.Exit(code=code)

        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)
        except typer.Exit:
            raise
        except TaskSyncError as e:
            raise fail(e, str(e), exit_code_for(e)) from e
        except AppError as e:
            raise fail(e, str(e), e.exit_code) from e
        except Exception as e:
            raise fail(
                e, f"An unexpected error occurred: {e}", exit_codes.ERROR_GENERAL, exc_info=True
            ) from e

        logger.info("%s: completed in %.3fs", name, time.monotonic() - started)
        return result

    return wrapper
