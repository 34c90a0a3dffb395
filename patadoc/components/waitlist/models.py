"""
Waitlist component models.

Request-scoped types for the signup pipeline and the fixed error taxonomy.
Each server-side error kind maps to exactly one HTTP status and code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNKNOWN_CLIENT = "unknown"


class SignupSource(Enum):
    """Where on the page the signup came from."""

    HERO = "hero"
    FOOTER_CTA = "footer_cta"
    MODAL = "modal"
    UNKNOWN = "unknown"


class ErrorKind(Enum):
    """Server-side error taxonomy."""

    MISSING_FIELD = "missing_field"
    INVALID_FORMAT = "invalid_format"
    MALFORMED_REQUEST = "malformed_request"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    RATE_LIMITED = "rate_limited"
    DUPLICATE = "duplicate"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_ERROR = "upstream_error"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ErrorResponseSpec:
    """HTTP status, machine-readable code and plain-language message."""

    status_code: int
    code: str
    message: str


ERROR_RESPONSES: dict[ErrorKind, ErrorResponseSpec] = {
    ErrorKind.MISSING_FIELD: ErrorResponseSpec(
        400, "MISSING_EMAIL", "Email address is required"
    ),
    ErrorKind.INVALID_FORMAT: ErrorResponseSpec(
        400, "INVALID_EMAIL", "Please enter a valid email address"
    ),
    ErrorKind.MALFORMED_REQUEST: ErrorResponseSpec(
        400, "INVALID_JSON", "Invalid request format"
    ),
    ErrorKind.METHOD_NOT_ALLOWED: ErrorResponseSpec(
        405, "METHOD_NOT_ALLOWED", "Method not allowed"
    ),
    ErrorKind.DUPLICATE: ErrorResponseSpec(
        409,
        "DUPLICATE_EMAIL",
        "This email is already on our waitlist. Thank you for your interest!",
    ),
    ErrorKind.RATE_LIMITED: ErrorResponseSpec(
        429, "RATE_LIMIT_EXCEEDED", "Too many requests. Please try again later."
    ),
    ErrorKind.UPSTREAM_ERROR: ErrorResponseSpec(
        500, "EMAIL_SERVICE_ERROR", "Unable to process signup. Please try again later."
    ),
    ErrorKind.UNEXPECTED: ErrorResponseSpec(
        500, "INTERNAL_ERROR", "An unexpected error occurred. Please try again later."
    ),
    ErrorKind.UPSTREAM_UNAVAILABLE: ErrorResponseSpec(
        503,
        "SERVICE_UNAVAILABLE",
        "Service temporarily unavailable. Please try again in a moment.",
    ),
}

SUCCESS_MESSAGE = "Successfully added to waitlist"


# --- Input Models ---


@dataclass(frozen=True)
class SignupInput:
    """Raw signup request as received over HTTP."""

    client_id: str
    body: bytes


@dataclass(frozen=True)
class SignupRequest:
    """Validated signup request handed to the provider."""

    email: str  # Normalized, valid, <= max length
    source: str  # One of the allowed sources


# --- Output Models ---


@dataclass(frozen=True)
class SignupOutput:
    """Outcome of a signup request, ready to become an HTTP response."""

    success: bool
    status_code: int
    message: str
    code: str | None = None
    kind: ErrorKind | None = None
    request: SignupRequest | None = None


# --- Configuration ---


@dataclass(frozen=True)
class WaitlistConfig:
    """Waitlist endpoint configuration."""

    allowed_sources: frozenset[str] = field(
        default_factory=lambda: frozenset({"hero", "footer_cta", "unknown"})
    )
    default_source: str = SignupSource.UNKNOWN.value
    max_email_length: int = 254
