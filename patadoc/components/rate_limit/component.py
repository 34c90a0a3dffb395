"""
Rate limit component.

Sliding window counter keyed by client identifier. Each accepted request
stores its timestamp; a client is blocked while the number of timestamps
inside the trailing window has reached the cap. Rejected requests are not
recorded.

The default store is process-local memory. Entries for a key disappear once
all their timestamps have aged out, but keys that keep arriving are never
evicted, and nothing is shared between processes.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from threading import Lock

from patadoc.components.rate_limit.models import (
    CheckRateLimitInput,
    CheckRateLimitOutput,
    RateLimitConfig,
)
from patadoc.components.rate_limit.ports import RateLimitStorePort, TimePort


class SystemTimeAdapter:
    """Production time adapter using system clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class InMemoryRateLimitStore:
    def __init__(self) -> None:
        self._history: dict[str, list[datetime]] = {}
        self._lock = Lock()

    def _cleanup(self, key: str, now: datetime, window: int) -> None:
        cutoff = now - timedelta(seconds=window)
        if key in self._history:
            self._history[key] = [t for t in self._history[key] if t > cutoff]
            if not self._history[key]:
                del self._history[key]

    def try_acquire(self, key: str, now: datetime, window_seconds: int, limit: int) -> bool:
        with self._lock:
            self._cleanup(key, now, window_seconds)
            if len(self._history.get(key, [])) >= limit:
                return False

            self._history.setdefault(key, []).append(now)
            return True

    def count(self, key: str, now: datetime, window_seconds: int) -> int:
        with self._lock:
            self._cleanup(key, now, window_seconds)
            return len(self._history.get(key, []))

    def __len__(self) -> int:
        return len(self._history)


class RateLimiter:
    """
    Single entry point for rate limiting.

    Callers never touch the store directly.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        store: RateLimitStorePort | None = None,
        time_port: TimePort | None = None,
    ):
        self.config = config or RateLimitConfig()
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._time = time_port if time_port is not None else SystemTimeAdapter()

    def allow(self, client_id: str) -> bool:
        """
        Check if a request from `client_id` is allowed.
        If allowed, records the attempt and returns True.
        If denied, returns False and records nothing.
        """
        if self.config.max_requests <= 0:
            return False

        return self._store.try_acquire(
            client_id,
            self._time.now(),
            self.config.window_seconds,
            self.config.max_requests,
        )

    def remaining(self, client_id: str) -> int:
        used = self._store.count(client_id, self._time.now(), self.config.window_seconds)
        return max(self.config.max_requests - used, 0)


def run(inp: CheckRateLimitInput, *, limiter: RateLimiter) -> CheckRateLimitOutput:
    """Component entry point."""
    allowed = limiter.allow(inp.client_id)
    return CheckRateLimitOutput(allowed=allowed, remaining=limiter.remaining(inp.client_id))
