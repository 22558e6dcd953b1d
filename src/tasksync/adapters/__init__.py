"""Storage adapters for tasksync."""
