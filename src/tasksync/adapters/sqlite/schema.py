"""Database schema definitions for the local task store.

Two tables: the tasks themselves and the sync_queue outbox that records
every local mutation until the remote server confirms it.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

# Tasks table - rows are soft-deleted, never removed
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    completed BOOLEAN NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    is_deleted BOOLEAN NOT NULL DEFAULT 0,
    sync_status TEXT NOT NULL DEFAULT 'pending'
        CHECK (sync_status IN ('pending', 'synced', 'error')),
    server_id TEXT,
    last_synced_at DATETIME
)
"""

# Outbox of pending mutations, drained in created_at order
CREATE_SYNC_QUEUE_TABLE = """
CREATE TABLE IF NOT EXISTS sync_queue (
    id TEXT PRIMARY KEY,
    task_id TEXT NOT NULL,
    operation TEXT NOT NULL CHECK (operation IN ('create', 'update', 'delete')),
    data TEXT NOT NULL,
    created_at DATETIME NOT NULL,
    retry_count INTEGER NOT NULL DEFAULT 0,
    error_message TEXT,
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

# Indexes for performance
CREATE_TASK_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_deleted ON tasks(is_deleted)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_sync_status ON tasks(sync_status)",
]

CREATE_SYNC_QUEUE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_sync_queue_task ON sync_queue(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_sync_queue_created ON sync_queue(created_at)",
]

ALL_TABLES = [
    CREATE_TASKS_TABLE,
    CREATE_SYNC_QUEUE_TABLE,
]

ALL_INDEXES = CREATE_TASK_INDEXES + CREATE_SYNC_QUEUE_INDEXES
