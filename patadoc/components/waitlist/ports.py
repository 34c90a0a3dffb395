"""
Waitlist component ports.
"""

from __future__ import annotations

from typing import Protocol

from patadoc.core.ports.email_provider import EmailProviderPort

__all__ = ["EmailProviderPort", "RateLimiterPort"]


class RateLimiterPort(Protocol):
    """
    Rate limiter interface.

    Records the attempt when it is allowed.
    """

    def allow(self, client_id: str) -> bool:
        """Return True and record the attempt if the client is under its cap."""
        ...
