"""Split the outbox into fixed-size batches."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def partition(entries: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split ordered entries into consecutive groups of at most batch_size.

    Order is preserved within and across groups.

    Raises:
        ValueError: If batch_size is less than 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    return [
        list(entries[start : start + batch_size])
        for start in range(0, len(entries), batch_size)
    ]
