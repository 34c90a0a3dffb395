"""
Waitlist component unit tests.
"""

from __future__ import annotations

import json

import pytest

from patadoc.components.waitlist import (
    ERROR_RESPONSES,
    ErrorKind,
    MalformedRequest,
    SignupInput,
    SignupRequest,
    WaitlistConfig,
    classify_provider_failure,
    coerce_source,
    derive_client_id,
    parse_body,
    run,
    validate_signup,
)
from patadoc.core.ports.email_provider import (
    ProviderConfigError,
    ProviderError,
    ProviderErrorKind,
    SignupResult,
)

# --- Mocks ---


class MockRateLimiter:
    def __init__(self, allowed: bool = True) -> None:
        self.allowed = allowed
        self.calls: list[str] = []

    def allow(self, client_id: str) -> bool:
        self.calls.append(client_id)
        return self.allowed


class MockProvider:
    name = "Mock"

    def __init__(self, result: SignupResult | None = None, error: Exception | None = None):
        self.result = result or SignupResult(success=True)
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def subscribe(self, email: str, source: str) -> SignupResult:
        self.calls.append((email, source))
        if self.error is not None:
            raise self.error
        return self.result


def _input(payload: object, client_id: str = "10.0.0.1") -> SignupInput:
    return SignupInput(client_id=client_id, body=json.dumps(payload).encode())


# --- Pure functions ---


class TestDeriveClientId:
    def test_first_forwarded_address(self) -> None:
        assert derive_client_id("203.0.113.5, 10.0.0.1", "10.0.0.2") == "203.0.113.5"

    def test_forwarded_address_is_trimmed(self) -> None:
        assert derive_client_id("  203.0.113.5 ,10.0.0.1", None) == "203.0.113.5"

    def test_falls_back_to_real_ip(self) -> None:
        assert derive_client_id(None, "198.51.100.7") == "198.51.100.7"
        assert derive_client_id("", "198.51.100.7") == "198.51.100.7"

    def test_sentinel_when_no_headers(self) -> None:
        assert derive_client_id(None, None) == "unknown"
        assert derive_client_id(" , ", "  ") == "unknown"


class TestParseBody:
    def test_object(self) -> None:
        assert parse_body(b'{"email": "a@b.co"}') == {"email": "a@b.co"}

    @pytest.mark.parametrize("body", [b"", b"not json", b"{", b"\xff\xfe", b"[1, 2]", b'"x"'])
    def test_rejects_non_objects(self, body: bytes) -> None:
        with pytest.raises(MalformedRequest):
            parse_body(body)


class TestCoerceSource:
    @pytest.mark.parametrize("source", ["hero", "footer_cta", "unknown"])
    def test_allowed_sources_kept(self, source: str) -> None:
        assert coerce_source(source, WaitlistConfig()) == source

    @pytest.mark.parametrize("source", [None, "", "modal", "HERO", "sidebar", 7])
    def test_others_become_unknown(self, source: object) -> None:
        assert coerce_source(source, WaitlistConfig()) == "unknown"


class TestValidateSignup:
    def test_missing_email(self) -> None:
        assert validate_signup({}, WaitlistConfig()) == ErrorKind.MISSING_FIELD
        assert validate_signup({"email": ""}, WaitlistConfig()) == ErrorKind.MISSING_FIELD
        assert validate_signup({"email": None}, WaitlistConfig()) == ErrorKind.MISSING_FIELD

    def test_whitespace_email_is_invalid_not_missing(self) -> None:
        assert validate_signup({"email": "   "}, WaitlistConfig()) == ErrorKind.INVALID_FORMAT

    def test_non_string_email_is_invalid(self) -> None:
        assert validate_signup({"email": 42}, WaitlistConfig()) == ErrorKind.INVALID_FORMAT

    def test_normalizes(self) -> None:
        result = validate_signup({"email": "USER@Example.com ", "source": "hero"}, WaitlistConfig())
        assert result == SignupRequest(email="user@example.com", source="hero")


class TestClassifyProviderFailure:
    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (ProviderErrorKind.DUPLICATE, ErrorKind.DUPLICATE),
            (ProviderErrorKind.UNAVAILABLE, ErrorKind.UPSTREAM_UNAVAILABLE),
            (ProviderErrorKind.OTHER, ErrorKind.UPSTREAM_ERROR),
        ],
    )
    def test_provider_error_kind(self, kind: ProviderErrorKind, expected: ErrorKind) -> None:
        # Kind wins even when the text suggests otherwise
        error = ProviderError("Mock", kind, "timeout duplicate", 400)
        assert classify_provider_failure(error) == expected

    def test_config_error(self) -> None:
        assert classify_provider_failure(ProviderConfigError()) == ErrorKind.UPSTREAM_ERROR

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Contact is a duplicate", ErrorKind.DUPLICATE),
            ("Member already exists", ErrorKind.DUPLICATE),
            ("Upstream timeout after 10s", ErrorKind.UPSTREAM_UNAVAILABLE),
            ("Service Unavailable", ErrorKind.UPSTREAM_UNAVAILABLE),
            ("boom", ErrorKind.UPSTREAM_ERROR),
        ],
    )
    def test_untyped_errors_use_message(self, message: str, expected: ErrorKind) -> None:
        assert classify_provider_failure(RuntimeError(message)) == expected


# --- Run ---


class TestRun:
    def test_success(self) -> None:
        provider = MockProvider()
        out = run(
            _input({"email": "test@example.com", "source": "hero"}),
            rate_limiter=MockRateLimiter(),
            provider=provider,
        )

        assert out.success is True
        assert out.status_code == 200
        assert out.message == "Successfully added to waitlist"
        assert out.code is None
        assert provider.calls == [("test@example.com", "hero")]

    def test_rate_limited_before_parsing(self) -> None:
        provider = MockProvider()
        limiter = MockRateLimiter(allowed=False)
        out = run(
            SignupInput(client_id="1.1.1.1", body=b"garbage"),
            rate_limiter=limiter,
            provider=provider,
        )

        assert out.status_code == 429
        assert out.code == "RATE_LIMIT_EXCEEDED"
        assert limiter.calls == ["1.1.1.1"]
        assert provider.calls == []

    def test_invalid_json(self) -> None:
        out = run(
            SignupInput(client_id="x", body=b"{nope"),
            rate_limiter=MockRateLimiter(),
            provider=MockProvider(),
        )
        assert (out.status_code, out.code) == (400, "INVALID_JSON")

    def test_validation_never_reaches_provider(self) -> None:
        provider = MockProvider()
        for payload in ({}, {"email": "not-an-email"}, {"email": "a" * 300 + "@x.com"}):
            out = run(_input(payload), rate_limiter=MockRateLimiter(), provider=provider)
            assert out.status_code == 400
        assert provider.calls == []

    def test_unknown_source_coerced(self) -> None:
        provider = MockProvider()
        run(
            _input({"email": "a@b.co", "source": "banner"}),
            rate_limiter=MockRateLimiter(),
            provider=provider,
        )
        assert provider.calls == [("a@b.co", "unknown")]

    def test_duplicate_result_is_409(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("INFO")
        out = run(
            _input({"email": "dup@example.com"}),
            rate_limiter=MockRateLimiter(),
            provider=MockProvider(SignupResult(success=True, duplicate=True)),
        )

        assert (out.status_code, out.code) == (409, "DUPLICATE_EMAIL")
        assert "Duplicate email signup attempt" in caplog.text
        assert "dup@example.com" in caplog.text

    def test_success_is_logged_with_client(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("INFO")
        run(
            _input({"email": "ok@example.com", "source": "footer_cta"}, client_id="9.9.9.9"),
            rate_limiter=MockRateLimiter(),
            provider=MockProvider(),
        )

        records = [r for r in caplog.records if hasattr(r, "signup")]
        assert len(records) == 1
        assert records[0].signup["email"] == "ok@example.com"
        assert records[0].signup["source"] == "footer_cta"
        assert records[0].signup["client_id"] == "9.9.9.9"
        assert "timestamp" in records[0].signup

    @pytest.mark.parametrize(
        ("error", "status", "code"),
        [
            (RuntimeError("request timeout"), 503, "SERVICE_UNAVAILABLE"),
            (RuntimeError("member already exists"), 409, "DUPLICATE_EMAIL"),
            (RuntimeError("bad things"), 500, "EMAIL_SERVICE_ERROR"),
            (ProviderConfigError(), 500, "EMAIL_SERVICE_ERROR"),
            (
                ProviderError("Mock", ProviderErrorKind.UNAVAILABLE, "Bad Gateway", 502),
                503,
                "SERVICE_UNAVAILABLE",
            ),
        ],
    )
    def test_provider_failures(self, error: Exception, status: int, code: str) -> None:
        out = run(
            _input({"email": "a@b.co"}),
            rate_limiter=MockRateLimiter(),
            provider=MockProvider(error=error),
        )

        assert out.status_code == status
        assert out.code == code
        # Never leak upstream text
        assert out.message == ERROR_RESPONSES[out.kind].message  # type: ignore[index]

    def test_unknown_input_type(self) -> None:
        with pytest.raises(ValueError):
            run("nope", rate_limiter=MockRateLimiter(), provider=MockProvider())  # type: ignore[arg-type]
