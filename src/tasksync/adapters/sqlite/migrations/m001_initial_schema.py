"""Initial schema: the tasks table, the sync_queue outbox and their indexes."""

from tasksync.adapters.sqlite.schema import ALL_INDEXES, ALL_TABLES

from .runner import Migration

initial_migration = Migration(
    version=1,
    description="Tasks and sync queue",
    statements=(*ALL_TABLES, *ALL_INDEXES),
)
