"""
Submission client models.

State, error taxonomy and fixed user-facing messages for the waitlist form
controller. Client-side error types decide retry eligibility; they are a
separate taxonomy from the server's error codes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SubmissionState(Enum):
    """Form controller state."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class ErrorType(Enum):
    """Client-side error taxonomy."""

    NETWORK = "network"
    VALIDATION = "validation"
    SERVER = "server"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# Kinds that offer a manual "try again"
RETRYABLE_ERROR_TYPES = frozenset({ErrorType.NETWORK, ErrorType.TIMEOUT, ErrorType.SERVER})


class Priority(Enum):
    """Screen reader announcement priority."""

    POLITE = "polite"
    ASSERTIVE = "assertive"


# --- Messages ---

ERROR_MESSAGES: dict[ErrorType, str] = {
    ErrorType.NETWORK: "Network error. Please check your connection and try again.",
    ErrorType.VALIDATION: "Please enter a valid email address.",
    ErrorType.SERVER: "Server error. Please try again in a moment.",
    ErrorType.TIMEOUT: "Request timed out. Please try again.",
    ErrorType.UNKNOWN: "Something went wrong. Please try again.",
}

DUPLICATE_EMAIL_MESSAGE = "This email is already on our waitlist. Thank you for your interest!"
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment before trying again."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address."
REQUIRED_FIELD_MESSAGE = "Email is required."
OFFLINE_MESSAGE = "You appear to be offline. Please check your connection."
MAX_RETRIES_MESSAGE = "Maximum retry attempts reached. Please refresh the page and try again."
SUCCESS_ANNOUNCEMENT = (
    "Successfully joined the waitlist! You will receive updates when the app launches."
)

TROUBLESHOOTING_TIPS: tuple[str, ...] = (
    "Refreshing your browser",
    "Checking your internet connection",
    "Trying again in a few minutes",
)


# --- Analytics event names ---

EVENT_SUBMIT_ATTEMPT = "waitlist_submit_attempt"
EVENT_SIGNUP_SUCCESS = "waitlist_signup_success"
EVENT_ERROR = "error_occurred"
EVENT_FORM_INTERACTION = "form_interaction"


# --- Errors ---


class SubmissionTransportError(Exception):
    """The request never produced an HTTP response."""


class SubmissionTimeout(SubmissionTransportError):
    """The request was aborted at the client-side deadline."""


class SubmissionInProgress(Exception):
    """A submission is already in flight for this form."""


# --- Value Objects ---


@dataclass(frozen=True)
class TransportResponse:
    """HTTP response as seen by the client."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class ErrorClassification:
    """Client error kind plus its fallback message."""

    error_type: ErrorType
    message: str


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of the automatic retry loop for one logical submission."""

    attempts: int
    response: TransportResponse | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.response is not None and self.response.ok


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submit or retry, as handed to the rendering layer."""

    success: bool
    state: SubmissionState
    message: str | None = None
    error_type: ErrorType | None = None
    status_code: int | None = None
    attempts: int = 0
    can_retry: bool = False


# --- Configuration ---


@dataclass(frozen=True)
class SubmissionConfig:
    """Submission client configuration."""

    timeout_seconds: float = 10.0
    max_attempts: int = 3  # Automatic attempts, and the manual retry cap
    backoff_base_ms: int = 1000
    backoff_max_ms: int = 5000
    manual_retry_delay_ms: int = 1000


# --- Input Models ---


@dataclass(frozen=True)
class SubmitInput:
    """One-shot submission (no form state kept)."""

    email: str
    source: str = "unknown"
