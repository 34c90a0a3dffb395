"""
Submission client ports.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from patadoc.components.submission.models import Priority, TransportResponse


class TransportPort(Protocol):
    """Sends one signup POST to the waitlist endpoint."""

    async def send(self, payload: dict[str, Any], timeout_seconds: float) -> TransportResponse:
        """
        POST the payload and return the response, whatever its status.

        Raises:
            SubmissionTimeout: deadline passed before a response arrived
            SubmissionTransportError: any other failure to get a response
        """
        ...


class AnalyticsPort(Protocol):
    """Analytics sink. Events are fire-and-forget."""

    def track(self, event: str, data: dict[str, Any]) -> None: ...


class AnnouncerPort(Protocol):
    """Accessible status announcements (screen reader live region)."""

    def announce(self, message: str, priority: Priority = Priority.POLITE) -> None: ...


class ConnectivityPort(Protocol):
    """Reports whether the client believes it is online."""

    def is_online(self) -> bool: ...


SleepFunc = Callable[[float], Awaitable[None]]
