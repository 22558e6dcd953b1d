"""
Exit codes for the tasksync CLI.

Scripts driving the CLI can branch on these to tell an offline remote apart
from a sync that is already running or one that ran and reported failures.
"""

# Success
SUCCESS = 0

# General error, also used when a sync cycle ran but some items failed
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Remote unreachable
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Another sync cycle is already running
ERROR_CONFLICT = 6

_NAMES = {
    SUCCESS: "SUCCESS",
    ERROR_GENERAL: "ERROR_GENERAL",
    ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
    ERROR_NETWORK: "ERROR_NETWORK",
    ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
    ERROR_CONFLICT: "ERROR_CONFLICT",
}

_DESCRIPTIONS = {
    SUCCESS: "Command executed successfully",
    ERROR_GENERAL: "A general error occurred or some items failed to sync",
    ERROR_INVALID_ARGS: "Invalid arguments or validation error",
    ERROR_NETWORK: "Remote server unavailable, try again later",
    ERROR_NOT_FOUND: "Task not found",
    ERROR_CONFLICT: "A sync is already in progress",
}


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    return _NAMES.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    return _DESCRIPTIONS.get(code, "Unknown error")
