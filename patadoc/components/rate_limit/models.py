"""
Rate limit component models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """Sliding window settings."""

    window_seconds: int = 60
    max_requests: int = 5


@dataclass(frozen=True)
class CheckRateLimitInput:
    """Input for a rate limit check."""

    client_id: str


@dataclass(frozen=True)
class CheckRateLimitOutput:
    """Output from a rate limit check."""

    allowed: bool
    remaining: int
