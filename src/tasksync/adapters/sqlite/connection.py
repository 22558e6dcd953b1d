"""Database connection management for the local task store.

One shared connection per process. The task repository and the outbox use
the same connection so that a task write and its outbox entry can be
committed together with transaction().
"""

from __future__ import annotations

import atexit
import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from platformdirs import user_data_dir

from tasksync.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner
from tasksync.utils.logger import get_logger

MEMORY_DB = ":memory:"

logger = get_logger("db")


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply row factory and pragmas, then bring the schema up to date."""
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    MigrationRunner(connection).upgrade(ALL_MIGRATIONS)
    return connection


def _open(db_path: Path) -> sqlite3.Connection:
    if str(db_path) == MEMORY_DB:
        return configure_connection(sqlite3.connect(MEMORY_DB, check_same_thread=False))

    db_path.parent.mkdir(parents=True, exist_ok=True)
    created = not db_path.exists()

    connection = sqlite3.connect(str(db_path), check_same_thread=False, timeout=30.0)
    connection.execute("PRAGMA journal_mode = WAL")
    configure_connection(connection)

    if created:
        # owner-only access
        os.chmod(db_path, 0o600)
        logger.info("created database at %s", db_path)
    return connection


class DatabaseConnection:
    """Process-wide holder of the SQLite connection.

    Asking for a different path closes the current connection first. The
    connection is closed at interpreter exit.
    """

    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None
    _cleanup_registered = False

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Return the connection for db_path, opening it on first use.

        Args:
            db_path: Database file, ":memory:", or None for the default location
        """
        path = Path(db_path) if db_path is not None else Path(user_data_dir("tasksync")) / "tasks.db"

        if cls._connection is not None:
            if cls._db_path == path:
                return cls._connection
            cls.close_connection()

        cls._connection = _open(path)
        cls._db_path = path

        if not cls._cleanup_registered:
            atexit.register(cls.close_connection)
            cls._cleanup_registered = True

        return cls._connection

    @classmethod
    def close_connection(cls) -> None:
        """Commit and close the current connection, if any."""
        connection, cls._connection, cls._db_path = cls._connection, None, None
        if connection is None:
            return
        try:
            connection.commit()
            connection.close()
        except sqlite3.Error as e:
            logger.warning("error while closing database: %s", e)

    @classmethod
    def get_db_path(cls) -> Path | None:
        return cls._db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get database connection."""
    return DatabaseConnection.get_connection(db_path)


@contextmanager
def transaction(connection: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Group several statements into one atomic write.

    Commits when the block exits normally, rolls back on any exception and
    re-raises it.
    """
    try:
        yield connection
        connection.commit()
    except BaseException:
        connection.rollback()
        raise
