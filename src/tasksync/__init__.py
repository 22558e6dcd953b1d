"""tasksync - local task store with batched outbox synchronization."""

__version__ = "0.1.0"
