"""
Rate limit component ports.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Protocol for time operations (enables testing with deterministic time)."""

    def now(self) -> datetime:
        """Return current UTC time."""
        ...


class RateLimitStorePort(Protocol):
    """
    Storage for per-key request timestamps.

    Implementations must make `try_acquire` atomic for a given key: prune,
    count and append happen as one step. The in-memory store does this with
    a lock; a shared store must provide its own atomicity.
    """

    def try_acquire(
        self,
        key: str,
        now: datetime,
        window_seconds: int,
        limit: int,
    ) -> bool:
        """
        Prune timestamps at or before `now - window_seconds`, then record
        `now` if fewer than `limit` remain.

        Returns:
            True if the attempt was recorded
        """
        ...

    def count(self, key: str, now: datetime, window_seconds: int) -> int:
        """Number of recorded timestamps still inside the window."""
        ...
