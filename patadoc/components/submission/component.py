"""
Submission client component.

Form controller for the waitlist signup, driven by whatever renders the form:
validate inline, POST with a client-side deadline, retry with exponential
backoff, classify failures into user-facing messages, and announce the result.

State machine (one instance per form):
    idle -> submitting -> success | error(kind, retry_count)
    error -> submitting (manual retry, bounded)

Automatic retries cover network failures, timeouts, 5xx and 429. Any other
4xx is terminal for the submission.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from patadoc.components.email_validation import (
    RejectionReason,
    normalize_email,
    validate_email,
)
from patadoc.components.submission.models import (
    DUPLICATE_EMAIL_MESSAGE,
    ERROR_MESSAGES,
    EVENT_ERROR,
    EVENT_FORM_INTERACTION,
    EVENT_SIGNUP_SUCCESS,
    EVENT_SUBMIT_ATTEMPT,
    INVALID_EMAIL_MESSAGE,
    MAX_RETRIES_MESSAGE,
    OFFLINE_MESSAGE,
    RATE_LIMITED_MESSAGE,
    REQUIRED_FIELD_MESSAGE,
    RETRYABLE_ERROR_TYPES,
    SUCCESS_ANNOUNCEMENT,
    TROUBLESHOOTING_TIPS,
    AttemptOutcome,
    ErrorClassification,
    ErrorType,
    Priority,
    SubmissionConfig,
    SubmissionInProgress,
    SubmissionResult,
    SubmissionState,
    SubmissionTimeout,
    SubmissionTransportError,
    SubmitInput,
    TransportResponse,
)
from patadoc.components.submission.ports import (
    AnalyticsPort,
    AnnouncerPort,
    ConnectivityPort,
    SleepFunc,
    TransportPort,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_STATUSES = frozenset({500, 502, 503, 504})


# --- Pure Functions ---


def backoff_delay_ms(attempt: int, base_ms: int = 1000, max_ms: int = 5000) -> int:
    """Delay after a failed attempt (1-based): min(base * 2^(attempt-1), max)."""
    return min(base_ms * 2 ** (attempt - 1), max_ms)


def should_retry_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def classify_status(status_code: int) -> ErrorClassification:
    if status_code == 400:
        return ErrorClassification(ErrorType.VALIDATION, INVALID_EMAIL_MESSAGE)
    if status_code == 409:
        return ErrorClassification(ErrorType.VALIDATION, DUPLICATE_EMAIL_MESSAGE)
    if status_code == 429:
        return ErrorClassification(ErrorType.SERVER, RATE_LIMITED_MESSAGE)
    if status_code in SERVER_ERROR_STATUSES:
        return ErrorClassification(ErrorType.SERVER, ERROR_MESSAGES[ErrorType.SERVER])
    return ErrorClassification(ErrorType.UNKNOWN, ERROR_MESSAGES[ErrorType.UNKNOWN])


def classify_failure(
    error: BaseException | None,
    response: TransportResponse | None = None,
    *,
    online: bool = True,
) -> ErrorClassification:
    """
    Map a failed submission to an error type and fallback message.

    Offline wins over everything else, then timeouts, then the HTTP status.
    """
    if not online:
        return ErrorClassification(ErrorType.NETWORK, OFFLINE_MESSAGE)
    if isinstance(error, (SubmissionTimeout, asyncio.TimeoutError)):
        return ErrorClassification(ErrorType.TIMEOUT, ERROR_MESSAGES[ErrorType.TIMEOUT])
    if response is not None:
        return classify_status(response.status_code)
    if isinstance(error, SubmissionTransportError):
        return ErrorClassification(ErrorType.NETWORK, ERROR_MESSAGES[ErrorType.NETWORK])
    return ErrorClassification(ErrorType.UNKNOWN, ERROR_MESSAGES[ErrorType.UNKNOWN])


def server_error_text(response: TransportResponse | None) -> str | None:
    """The server's `error` message, when it sent one."""
    if response is None:
        return None
    text = response.body.get("error")
    if isinstance(text, str) and text:
        return text
    return None


def validate_input(email: str) -> str | None:
    """Inline validation message for the email field, or None when valid."""
    result = validate_email(email)
    if result.is_valid:
        return None
    if result.reason == RejectionReason.MISSING:
        return REQUIRED_FIELD_MESSAGE
    return INVALID_EMAIL_MESSAGE


def build_payload(email: str, source: str, attempt: int) -> dict[str, Any]:
    return {"email": normalize_email(email), "source": source, "attempt": attempt}


# --- Retry Loop ---


async def send_once(
    transport: TransportPort,
    payload: dict[str, Any],
    timeout_seconds: float,
) -> TransportResponse:
    """One POST, aborted at the deadline regardless of the transport's own timeout."""
    try:
        return await asyncio.wait_for(
            transport.send(payload, timeout_seconds), timeout=timeout_seconds
        )
    except asyncio.TimeoutError as e:
        raise SubmissionTimeout(f"Request timed out after {timeout_seconds}s") from e


async def submit_with_retry(
    transport: TransportPort,
    email: str,
    source: str,
    *,
    config: SubmissionConfig,
    sleep: SleepFunc = asyncio.sleep,
) -> AttemptOutcome:
    """
    Run the automatic retry loop for one logical submission.

    Attempts are strictly sequential. Returns on the first success, on a
    terminal status, or once `max_attempts` have been spent.
    """
    for attempt in range(1, config.max_attempts + 1):
        payload = build_payload(email, source, attempt)
        try:
            response = await send_once(transport, payload, config.timeout_seconds)
        except SubmissionTransportError as e:
            if attempt >= config.max_attempts:
                return AttemptOutcome(attempts=attempt, error=e)
            logger.info("Submission attempt %d failed: %s", attempt, e)
        else:
            if response.ok:
                return AttemptOutcome(attempts=attempt, response=response)
            if not should_retry_status(response.status_code) or attempt >= config.max_attempts:
                return AttemptOutcome(attempts=attempt, response=response)
            logger.info(
                "Submission attempt %d got status %d", attempt, response.status_code
            )

        delay = backoff_delay_ms(attempt, config.backoff_base_ms, config.backoff_max_ms)
        await sleep(delay / 1000)

    # max_attempts < 1
    return AttemptOutcome(attempts=0)


# --- Controller ---


class SubmissionController:
    """
    Waitlist form controller.

    Owns the email field value, the submission state and the manual retry
    budget for one form instance. Rendering is left to the caller, which
    reads the public attributes after each call.
    """

    def __init__(
        self,
        transport: TransportPort,
        *,
        source: str = "unknown",
        config: SubmissionConfig | None = None,
        analytics: AnalyticsPort | None = None,
        announcer: AnnouncerPort | None = None,
        connectivity: ConnectivityPort | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.transport = transport
        self.source = source
        self.config = config or SubmissionConfig()
        self.analytics = analytics
        self.announcer = announcer
        self.connectivity = connectivity
        self.sleep = sleep or asyncio.sleep

        self.email = ""
        self.state = SubmissionState.IDLE
        self.field_error: str | None = None
        self.error_message: str | None = None
        self.error_type: ErrorType | None = None
        self.status_code: int | None = None
        self.attempts = 0
        self.retry_count = 0
        self.success_message: str | None = None

    # --- Derived state ---

    @property
    def is_submitting(self) -> bool:
        return self.state == SubmissionState.SUBMITTING

    @property
    def submit_disabled(self) -> bool:
        return self.is_submitting or self.field_error is not None

    @property
    def can_retry(self) -> bool:
        return (
            self.state == SubmissionState.ERROR
            and self.error_type in RETRYABLE_ERROR_TYPES
            and self.retry_count < self.config.max_attempts
        )

    @property
    def show_troubleshooting(self) -> bool:
        return self.retry_count >= self.config.max_attempts

    @property
    def troubleshooting_tips(self) -> tuple[str, ...]:
        return TROUBLESHOOTING_TIPS if self.show_troubleshooting else ()

    # --- Field events ---

    def set_email(self, value: str) -> None:
        """Input change: store the value and give real-time feedback."""
        self.email = value
        self.error_message = None
        self.error_type = None
        self.track_interaction("input")

        if value and validate_input(value) is not None:
            self.field_error = INVALID_EMAIL_MESSAGE
        else:
            self.field_error = None

    def validate(self) -> str | None:
        self.field_error = validate_input(self.email)
        return self.field_error

    def track_interaction(self, interaction_type: str) -> None:
        """Field focus, blur or input."""
        self._track(
            EVENT_FORM_INTERACTION,
            {"form_location": self.source, "interaction_type": interaction_type},
        )

    # --- Submission ---

    async def submit(self, email: str | None = None) -> SubmissionResult:
        """
        Submit the current email (or `email`, which replaces it).

        Validation failures return without any network call and leave the
        state unchanged.

        Raises:
            SubmissionInProgress: a submission is already in flight
        """
        if self.is_submitting:
            raise SubmissionInProgress("Submission already in progress")

        if email is not None:
            self.email = email

        field_error = self.validate()
        if field_error is not None:
            return SubmissionResult(
                success=False,
                state=self.state,
                message=field_error,
                error_type=ErrorType.VALIDATION,
            )

        self.state = SubmissionState.SUBMITTING
        self.error_message = None
        self.error_type = None
        self.status_code = None
        self._track(EVENT_SUBMIT_ATTEMPT, {"form_location": self.source})

        try:
            outcome = await submit_with_retry(
                self.transport,
                self.email,
                self.source,
                config=self.config,
                sleep=self.sleep,
            )
        except asyncio.CancelledError:
            self.state = SubmissionState.IDLE
            raise
        except Exception as e:
            logger.exception("Submission error")
            classification = classify_failure(e, online=self._online())
            self._fail(classification, message=classification.message, attempts=0)
            self._track(
                EVENT_ERROR,
                {
                    "error_type": "submission_error",
                    "error_message": str(e),
                    "error_location": self.source,
                },
            )
            return self.result()

        if outcome.success:
            self._succeed(outcome)
            return self.result()

        classification = classify_failure(outcome.error, outcome.response, online=self._online())
        message = server_error_text(outcome.response) or classification.message
        self._fail(
            classification,
            message=message,
            attempts=outcome.attempts,
            response=outcome.response,
        )
        self._track(
            EVENT_ERROR,
            {
                "error_type": "api_error" if outcome.response is not None else "network_error",
                "error_message": message,
                "error_location": self.source,
            },
        )
        return self.result()

    async def retry(self) -> SubmissionResult:
        """
        Manual "try again" after a retryable failure.

        Waits `manual_retry_delay_ms`, then runs a fresh submission. Once the
        manual budget is spent, sets the max-retries message instead.
        """
        if self.retry_count >= self.config.max_attempts:
            self.error_message = MAX_RETRIES_MESSAGE
            return self.result()

        if not self.can_retry:
            return self.result()

        self.retry_count += 1
        self._track(
            EVENT_ERROR,
            {
                "error_type": "manual_retry_attempt",
                "error_message": f"Retry {self.retry_count}",
                "error_location": self.source,
            },
        )

        await self.sleep(self.config.manual_retry_delay_ms / 1000)

        self.error_message = None
        self.error_type = None
        return await self.submit()

    def reset(self) -> None:
        """Back to a fresh idle form."""
        self.email = ""
        self.state = SubmissionState.IDLE
        self.field_error = None
        self.error_message = None
        self.error_type = None
        self.status_code = None
        self.attempts = 0
        self.retry_count = 0
        self.success_message = None

    def result(self) -> SubmissionResult:
        succeeded = self.state == SubmissionState.SUCCESS
        return SubmissionResult(
            success=succeeded,
            state=self.state,
            message=self.success_message if succeeded else self.error_message,
            error_type=self.error_type,
            status_code=self.status_code,
            attempts=self.attempts,
            can_retry=self.can_retry,
        )

    # --- Internals ---

    def _succeed(self, outcome: AttemptOutcome) -> None:
        response = outcome.response
        self.state = SubmissionState.SUCCESS
        self.email = ""
        self.retry_count = 0
        self.attempts = outcome.attempts
        self.status_code = response.status_code if response else None
        message = response.body.get("message") if response else None
        self.success_message = message if isinstance(message, str) else None

        self._track(EVENT_SIGNUP_SUCCESS, {"form_location": self.source})
        self._announce(SUCCESS_ANNOUNCEMENT, Priority.ASSERTIVE)

    def _fail(
        self,
        classification: ErrorClassification,
        *,
        message: str,
        attempts: int,
        response: TransportResponse | None = None,
    ) -> None:
        self.state = SubmissionState.ERROR
        self.error_type = classification.error_type
        self.error_message = message
        self.attempts = attempts
        self.status_code = response.status_code if response else None

        self._announce(f"Error joining waitlist: {message}", Priority.ASSERTIVE)

    def _online(self) -> bool:
        if self.connectivity is None:
            return True
        return self.connectivity.is_online()

    def _announce(self, message: str, priority: Priority) -> None:
        if self.announcer is not None:
            self.announcer.announce(message, priority)

    def _track(self, event: str, data: dict[str, Any]) -> None:
        # Analytics must never affect the submission
        if self.analytics is None:
            return
        payload = {**data, "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds")}
        try:
            self.analytics.track(event, payload)
        except Exception:
            logger.debug("Analytics event %s dropped", event, exc_info=True)


# --- Run ---


async def run(
    inp: SubmitInput,
    *,
    transport: TransportPort,
    config: SubmissionConfig | None = None,
    analytics: AnalyticsPort | None = None,
    announcer: AnnouncerPort | None = None,
    connectivity: ConnectivityPort | None = None,
    sleep: SleepFunc | None = None,
) -> SubmissionResult:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Email and source to submit
        transport: Transport port (Required)
        config: Configuration (Optional)
        analytics, announcer, connectivity, sleep: Optional collaborators

    Returns:
        SubmissionResult for the submission
    """
    if isinstance(inp, SubmitInput):
        controller = SubmissionController(
            transport,
            source=inp.source,
            config=config,
            analytics=analytics,
            announcer=announcer,
            connectivity=connectivity,
            sleep=sleep,
        )
        return await controller.submit(inp.email)
    raise ValueError(f"Unknown input type: {type(inp)}")
