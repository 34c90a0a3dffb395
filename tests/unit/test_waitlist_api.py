"""
Tests for the waitlist signup route.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from patadoc.adapters.dev_provider import InMemoryEmailProvider
from patadoc.api.deps import get_email_provider, get_rate_limiter
from patadoc.api.main import app
from patadoc.core.ports.email_provider import ProviderError, ProviderErrorKind

URL = "/api/waitlist"


def _post(client: TestClient, payload: object, ip: str = "203.0.113.10"):
    return client.post(URL, json=payload, headers={"X-Forwarded-For": ip})


class TestSignup:
    def test_valid_signup(self, client: TestClient, provider: InMemoryEmailProvider) -> None:
        response = _post(client, {"email": "test@example.com", "source": "hero"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Successfully added to waitlist"}
        assert provider.subscribers == {"test@example.com": "hero"}

    def test_email_normalized_before_provider(
        self, client: TestClient, provider: InMemoryEmailProvider
    ) -> None:
        response = _post(client, {"email": "USER@Example.com "})

        assert response.status_code == 200
        last = provider.get_last_call()
        assert last is not None
        assert last.email == "user@example.com"
        assert last.source == "unknown"

    def test_invalid_email(self, client: TestClient, provider: InMemoryEmailProvider) -> None:
        response = _post(client, {"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json() == {
            "error": "Please enter a valid email address",
            "code": "INVALID_EMAIL",
        }
        assert provider.call_count == 0

    def test_missing_email(self, client: TestClient) -> None:
        response = _post(client, {"source": "hero"})

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_EMAIL"

    def test_invalid_json(self, client: TestClient) -> None:
        response = client.post(
            URL, content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request format", "code": "INVALID_JSON"}

    def test_too_long_email(self, client: TestClient) -> None:
        response = _post(client, {"email": "a" * 250 + "@example.com"})
        assert response.json()["code"] == "INVALID_EMAIL"

    def test_duplicate(self, client: TestClient) -> None:
        assert _post(client, {"email": "dup@example.com"}).status_code == 200

        response = _post(client, {"email": "dup@example.com"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_EMAIL"


class TestMethodNotAllowed:
    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "OPTIONS"])
    def test_non_post(self, client: TestClient, method: str) -> None:
        response = client.request(method, URL)

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed", "code": "METHOD_NOT_ALLOWED"}
        assert response.headers["allow"] == "POST"

    def test_head(self, client: TestClient) -> None:
        response = client.head(URL)

        assert response.status_code == 405
        assert response.headers["allow"] == "POST"

    def test_cors_preflight_still_answered(self, client: TestClient) -> None:
        response = client.options(
            URL,
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestRateLimit:
    def test_sixth_request_rejected(self, client: TestClient) -> None:
        statuses = [
            _post(client, {"email": f"user{i}@example.com"}, ip="198.51.100.1").status_code
            for i in range(6)
        ]

        assert statuses[:5] == [200] * 5
        assert statuses[5] == 429

    def test_rate_limit_body(self, client: TestClient) -> None:
        for i in range(5):
            _post(client, {"email": f"u{i}@example.com"}, ip="198.51.100.2")

        response = _post(client, {"email": "late@example.com"}, ip="198.51.100.2")

        assert response.json() == {
            "error": "Too many requests. Please try again later.",
            "code": "RATE_LIMIT_EXCEEDED",
        }

    def test_invalid_requests_count(self, client: TestClient) -> None:
        for _ in range(5):
            assert _post(client, {"email": "bad"}, ip="198.51.100.3").status_code == 400

        assert _post(client, {"email": "bad"}, ip="198.51.100.3").status_code == 429

    def test_clients_are_separate(self, client: TestClient) -> None:
        for i in range(5):
            _post(client, {"email": f"a{i}@example.com"}, ip="198.51.100.4")

        response = _post(client, {"email": "b@example.com"}, ip="198.51.100.5")
        assert response.status_code == 200

    def test_first_forwarded_address_is_used(self, client: TestClient) -> None:
        for i in range(5):
            _post(client, {"email": f"c{i}@example.com"}, ip="192.0.2.1, 10.0.0.1")

        response = _post(client, {"email": "d@example.com"}, ip="192.0.2.1, 10.0.0.99")
        assert response.status_code == 429

    def test_window_elapses(self, client: TestClient, clock) -> None:
        for i in range(5):
            _post(client, {"email": f"e{i}@example.com"}, ip="198.51.100.6")
        assert _post(client, {"email": "f@example.com"}, ip="198.51.100.6").status_code == 429

        clock.advance(61)

        assert _post(client, {"email": "f@example.com"}, ip="198.51.100.6").status_code == 200


class TestProviderFailures:
    def test_timeout_message_is_503(
        self, client: TestClient, provider: InMemoryEmailProvider
    ) -> None:
        provider.fail_next(RuntimeError("Upstream timeout"))

        response = _post(client, {"email": "a@example.com"})

        assert response.status_code == 503
        assert response.json()["code"] == "SERVICE_UNAVAILABLE"

    def test_provider_duplicate_error_is_409(
        self, client: TestClient, provider: InMemoryEmailProvider
    ) -> None:
        provider.fail_next(
            ProviderError("Mailchimp", ProviderErrorKind.DUPLICATE, "Member Exists", 400)
        )

        response = _post(client, {"email": "a@example.com"})

        assert response.status_code == 409

    def test_other_failure_hides_upstream_detail(
        self, client: TestClient, provider: InMemoryEmailProvider
    ) -> None:
        provider.fail_next(
            ProviderError("Mailchimp", ProviderErrorKind.OTHER, "Secret internal detail", 401)
        )

        response = _post(client, {"email": "a@example.com"})

        assert response.status_code == 500
        assert response.json()["code"] == "EMAIL_SERVICE_ERROR"
        assert "Secret" not in response.text


class TestUnexpectedErrors:
    def test_pipeline_error_is_internal_error(self, client: TestClient) -> None:
        class BrokenLimiter:
            def allow(self, client_id: str) -> bool:
                raise RuntimeError("store exploded")

        app.dependency_overrides[get_rate_limiter] = lambda: BrokenLimiter()

        response = _post(client, {"email": "a@example.com"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "An unexpected error occurred. Please try again later.",
            "code": "INTERNAL_ERROR",
        }

    def test_dependency_error_is_internal_error(self, client: TestClient) -> None:
        def broken_provider() -> InMemoryEmailProvider:
            raise RuntimeError("cannot build provider")

        app.dependency_overrides[get_email_provider] = broken_provider
        safe_client = TestClient(app, raise_server_exceptions=False)

        response = safe_client.post(URL, json={"email": "a@example.com"})

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "waitlist"}
