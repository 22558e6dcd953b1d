"""Forward-only, version-numbered schema migrations.

A migration is an ordered list of DDL statements. Applied versions are
recorded in schema_version with the time they were applied; a migration
whose statements fail is rolled back as a whole, DDL included, and
nothing is recorded for it.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Iterable

from tasksync.utils.logger import get_logger

logger = get_logger("migrations")

VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    description TEXT NOT NULL,
    applied_at DATETIME NOT NULL
)
"""


@dataclass(frozen=True)
class Migration:
    """One schema step.

    Attributes:
        version: Sequential version number, starting at 1
        description: Human-readable summary stored in schema_version
        statements: SQL executed in order
    """

    version: int
    description: str
    statements: tuple[str, ...]

    def up(self, connection: sqlite3.Connection) -> None:
        for statement in self.statements:
            connection.execute(statement)


class MigrationRunner:
    """Brings a connection's schema up to the latest known version."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        connection.execute(VERSION_TABLE)
        connection.commit()

    @property
    def current_version(self) -> int:
        """Highest applied version, 0 for a fresh database."""
        row = self.connection.execute(
            "SELECT COALESCE(MAX(version), 0) FROM schema_version"
        ).fetchone()
        return row[0]

    def apply(self, migration: Migration) -> None:
        """Apply a single migration.

        Raises:
            ValueError: If the schema is already at or past this version
            RuntimeError: If one of the statements fails
        """
        current = self.current_version
        if migration.version <= current:
            raise ValueError(
                f"Migration {migration.version} is not greater than current version {current}"
            )

        # DDL does not open an implicit transaction, so start one explicitly
        self.connection.execute("BEGIN")
        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now(UTC).isoformat()),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e

        logger.info("applied migration %03d: %s", migration.version, migration.description)

    def upgrade(self, migrations: Iterable[Migration]) -> list[int]:
        """Apply every migration newer than the current version, lowest first.

        Returns:
            Versions that were applied
        """
        current = self.current_version
        pending = sorted(
            (m for m in migrations if m.version > current), key=lambda m: m.version
        )
        for migration in pending:
            self.apply(migration)
        return [m.version for m in pending]
