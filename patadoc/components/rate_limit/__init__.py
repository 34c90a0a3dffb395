"""
Rate limit component.

Sliding window limiter with an injectable store.
"""

from patadoc.components.rate_limit.component import (
    InMemoryRateLimitStore,
    RateLimiter,
    SystemTimeAdapter,
    run,
)
from patadoc.components.rate_limit.models import (
    CheckRateLimitInput,
    CheckRateLimitOutput,
    RateLimitConfig,
)
from patadoc.components.rate_limit.ports import RateLimitStorePort, TimePort

__all__ = [
    "run",
    "RateLimiter",
    "InMemoryRateLimitStore",
    "SystemTimeAdapter",
    "RateLimitConfig",
    "CheckRateLimitInput",
    "CheckRateLimitOutput",
    "RateLimitStorePort",
    "TimePort",
]
