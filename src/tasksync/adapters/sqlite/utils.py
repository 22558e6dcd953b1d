"""Utility functions for SQLite adapter."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from typing import Any


def generate_uuid() -> str:
    """Generate a new UUID as string."""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Get current UTC timestamp in ISO format (microsecond precision)."""
    return datetime.now(UTC).isoformat(timespec="microseconds")


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary."""
    if row is None:
        return {}
    return dict(row)


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse datetime from an ISO string or pass a datetime through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    return None


def dump_snapshot(data: dict[str, Any]) -> str:
    """Serialize a task snapshot for the outbox data column."""
    return json.dumps(data, default=str)
