"""
Submission client component.

Waitlist form controller: inline validation, timed POST, retry with
backoff, error classification and accessible announcements.
"""

from patadoc.components.submission.component import (
    SubmissionController,
    backoff_delay_ms,
    build_payload,
    classify_failure,
    classify_status,
    run,
    send_once,
    server_error_text,
    should_retry_status,
    submit_with_retry,
    validate_input,
)
from patadoc.components.submission.models import (
    ERROR_MESSAGES,
    MAX_RETRIES_MESSAGE,
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

__all__ = [
    # Component
    "run",
    "SubmissionController",
    "submit_with_retry",
    "send_once",
    # Pure functions
    "backoff_delay_ms",
    "build_payload",
    "classify_failure",
    "classify_status",
    "server_error_text",
    "should_retry_status",
    "validate_input",
    # Constants
    "ERROR_MESSAGES",
    "MAX_RETRIES_MESSAGE",
    "RETRYABLE_ERROR_TYPES",
    "SUCCESS_ANNOUNCEMENT",
    "TROUBLESHOOTING_TIPS",
    # Models
    "AttemptOutcome",
    "ErrorClassification",
    "ErrorType",
    "Priority",
    "SubmissionConfig",
    "SubmissionResult",
    "SubmissionState",
    "SubmitInput",
    "TransportResponse",
    # Errors
    "SubmissionInProgress",
    "SubmissionTimeout",
    "SubmissionTransportError",
    # Ports
    "AnalyticsPort",
    "AnnouncerPort",
    "ConnectivityPort",
    "SleepFunc",
    "TransportPort",
]
