"""
Dev Email Provider.

Keeps subscribers in memory instead of calling an upstream service.
Used for local development (`EMAIL_SERVICE_TYPE=dev`) and testing.

Key behaviors:
- First subscription of an address succeeds, later ones report duplicate
- Records every call for test assertions
- Can be told to fail the next calls with a given provider error
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from threading import Lock

from patadoc.core.ports.email_provider import ProviderError, SignupResult

logger = logging.getLogger(__name__)


@dataclass
class SubscribeCall:
    """Record of a subscribe call for test assertions."""

    email: str
    source: str
    duplicate: bool
    called_at: datetime


@dataclass
class InMemoryEmailProvider:
    """
    Dev provider that stores subscribers in memory.

    Implements EmailProviderPort.
    """

    name: str = "Dev"
    tags: list[str] = field(default_factory=lambda: ["PataDoc_Waitlist", "Pre_Launch"])
    subscribers: dict[str, str] = field(default_factory=dict)  # email -> source
    calls: list[SubscribeCall] = field(default_factory=list)
    fail_with: list[Exception] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def subscribe(self, email: str, source: str) -> SignupResult:
        if self.fail_with:
            error = self.fail_with.pop(0)
            logger.info("Dev provider failing subscribe for %s: %s", email, error)
            raise error

        with self._lock:
            duplicate = email in self.subscribers
            if not duplicate:
                self.subscribers[email] = source
            self.calls.append(
                SubscribeCall(
                    email=email,
                    source=source,
                    duplicate=duplicate,
                    called_at=datetime.now(UTC),
                )
            )

        logger.info(
            "Dev provider subscribe: %s (source: %s, duplicate: %s)",
            email,
            source,
            duplicate,
        )
        return SignupResult(success=True, duplicate=duplicate)

    def check_config(self) -> None:
        return None

    def close(self) -> None:
        return None

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def get_last_call(self) -> SubscribeCall | None:
        return self.calls[-1] if self.calls else None

    def fail_next(self, error: ProviderError | Exception) -> None:
        self.fail_with.append(error)
