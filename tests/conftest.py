from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from patadoc.adapters.dev_provider import InMemoryEmailProvider
from patadoc.api.deps import get_email_provider, get_rate_limiter, get_rules
from patadoc.api.main import app
from patadoc.components.rate_limit import (
    InMemoryRateLimitStore,
    RateLimitConfig,
    RateLimiter,
)
from patadoc.rules.models import ProjectRules, Rules


class FakeClock:
    """Deterministic clock; advance() moves time forward."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rules() -> Rules:
    return Rules(project=ProjectRules(slug="patadoc-waitlist", rules_version="test"))


@pytest.fixture
def provider() -> InMemoryEmailProvider:
    return InMemoryEmailProvider()


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(RateLimitConfig(), InMemoryRateLimitStore(), clock)


@pytest.fixture
def client(
    rules: Rules, provider: InMemoryEmailProvider, limiter: RateLimiter
) -> Iterator[TestClient]:
    """App client with in-memory provider and a fresh rate limiter."""
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_email_provider] = lambda: provider
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield TestClient(app)
    app.dependency_overrides.clear()
