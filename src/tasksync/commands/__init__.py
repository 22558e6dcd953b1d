"""CLI command groups for tasksync."""
