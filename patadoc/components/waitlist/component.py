"""
Waitlist signup component.

Orchestrates one signup request, in order:
1. Rate limit by client identifier
2. Parse the JSON body
3. Require and validate the email address
4. Clamp the source to the allowed set
5. Subscribe through the active email provider
6. Translate the outcome to a status, code and message

No retries happen here: the submission client owns retry, and retrying
against the provider would multiply load and race duplicate detection.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from patadoc.components.email_validation import validate_email
from patadoc.components.waitlist.models import (
    ERROR_RESPONSES,
    SUCCESS_MESSAGE,
    UNKNOWN_CLIENT,
    ErrorKind,
    SignupInput,
    SignupOutput,
    SignupRequest,
    WaitlistConfig,
)
from patadoc.components.waitlist.ports import EmailProviderPort, RateLimiterPort
from patadoc.core.ports.email_provider import (
    ProviderConfigError,
    ProviderError,
    ProviderErrorKind,
)

logger = logging.getLogger(__name__)


class MalformedRequest(Exception):
    """Request body is not a JSON object."""


# --- Pure Functions ---


def derive_client_id(forwarded_for: str | None, real_ip: str | None) -> str:
    """
    Client identifier for rate limiting.

    First address of X-Forwarded-For, else X-Real-IP, else "unknown".
    Every client without forwarding headers shares the "unknown" bucket.
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN_CLIENT


def parse_body(body: bytes) -> dict[str, Any]:
    """Decode a JSON object body. Raises MalformedRequest otherwise."""
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedRequest(str(e)) from e

    if not isinstance(data, dict):
        raise MalformedRequest("Request body must be a JSON object")
    return data


def coerce_source(raw: object, config: WaitlistConfig) -> str:
    """Unrecognized or absent sources become the default source."""
    if isinstance(raw, str) and raw in config.allowed_sources:
        return raw
    return config.default_source


def classify_provider_failure(error: Exception) -> ErrorKind:
    """
    Map a provider failure to an error kind.

    ProviderError carries its kind. Anything else falls back to the message,
    since some providers signal duplicates or outages only in free text.
    """
    if isinstance(error, ProviderError):
        if error.kind == ProviderErrorKind.DUPLICATE:
            return ErrorKind.DUPLICATE
        if error.kind == ProviderErrorKind.UNAVAILABLE:
            return ErrorKind.UPSTREAM_UNAVAILABLE
        return ErrorKind.UPSTREAM_ERROR

    if isinstance(error, ProviderConfigError):
        return ErrorKind.UPSTREAM_ERROR

    text = str(error).lower()
    if "duplicate" in text or "already exists" in text:
        return ErrorKind.DUPLICATE
    if "timeout" in text or "unavailable" in text:
        return ErrorKind.UPSTREAM_UNAVAILABLE
    return ErrorKind.UPSTREAM_ERROR


def error_output(kind: ErrorKind, request: SignupRequest | None = None) -> SignupOutput:
    mapped = ERROR_RESPONSES[kind]
    return SignupOutput(
        success=False,
        status_code=mapped.status_code,
        message=mapped.message,
        code=mapped.code,
        kind=kind,
        request=request,
    )


def success_output(request: SignupRequest) -> SignupOutput:
    return SignupOutput(success=True, status_code=200, message=SUCCESS_MESSAGE, request=request)


def method_not_allowed() -> SignupOutput:
    return error_output(ErrorKind.METHOD_NOT_ALLOWED)


def unexpected_error() -> SignupOutput:
    return error_output(ErrorKind.UNEXPECTED)


def validate_signup(
    data: dict[str, Any], config: WaitlistConfig
) -> SignupRequest | ErrorKind:
    """Turn a decoded body into a SignupRequest, or the kind of rejection."""
    email = data.get("email")
    if email is None or email == "":
        return ErrorKind.MISSING_FIELD

    validation = validate_email(email, config.max_email_length)
    if not validation.is_valid or validation.normalized_email is None:
        return ErrorKind.INVALID_FORMAT

    return SignupRequest(
        email=validation.normalized_email,
        source=coerce_source(data.get("source"), config),
    )


def _log_signup(event: str, request: SignupRequest, client_id: str) -> None:
    record = {
        "email": request.email,
        "source": request.source,
        "client_id": client_id,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    logger.info("%s: %s", event, record, extra={"signup": record})


# --- Run Handlers ---


def run_signup(
    inp: SignupInput,
    *,
    rate_limiter: RateLimiterPort,
    provider: EmailProviderPort,
    config: WaitlistConfig | None = None,
) -> SignupOutput:
    """
    Handle one signup request.

    Exceptions other than provider failures propagate; the HTTP layer turns
    them into INTERNAL_ERROR.
    """
    cfg = config or WaitlistConfig()

    if not rate_limiter.allow(inp.client_id):
        logger.warning("Rate limit exceeded for client: %s", inp.client_id)
        return error_output(ErrorKind.RATE_LIMITED)

    try:
        data = parse_body(inp.body)
    except MalformedRequest as e:
        logger.error("Invalid JSON in request body: %s", e)
        return error_output(ErrorKind.MALFORMED_REQUEST)

    validated = validate_signup(data, cfg)
    if isinstance(validated, ErrorKind):
        return error_output(validated)

    try:
        result = provider.subscribe(validated.email, validated.source)
    except Exception as e:
        kind = classify_provider_failure(e)
        logger.exception("Email service integration failed (%s)", kind.value)
        return error_output(kind, validated)

    if result.duplicate:
        _log_signup("Duplicate email signup attempt", validated, inp.client_id)
        return error_output(ErrorKind.DUPLICATE, validated)

    _log_signup("Waitlist signup", validated, inp.client_id)
    return success_output(validated)


def run(
    inp: SignupInput,
    *,
    rate_limiter: RateLimiterPort,
    provider: EmailProviderPort,
    config: WaitlistConfig | None = None,
) -> SignupOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Raw signup request
        rate_limiter: Rate limiter port (Required)
        provider: Email provider port (Required)
        config: Configuration (Optional)

    Returns:
        SignupOutput describing the HTTP response
    """
    if isinstance(inp, SignupInput):
        return run_signup(inp, rate_limiter=rate_limiter, provider=provider, config=config)
    raise ValueError(f"Unknown input type: {type(inp)}")
