"""
Waitlist component.

Server-side signup pipeline: rate limit, parse, validate, subscribe.
"""

from patadoc.components.waitlist.component import (
    MalformedRequest,
    classify_provider_failure,
    coerce_source,
    derive_client_id,
    error_output,
    method_not_allowed,
    parse_body,
    run,
    run_signup,
    success_output,
    unexpected_error,
    validate_signup,
)
from patadoc.components.waitlist.models import (
    ERROR_RESPONSES,
    SUCCESS_MESSAGE,
    UNKNOWN_CLIENT,
    ErrorKind,
    ErrorResponseSpec,
    SignupInput,
    SignupOutput,
    SignupRequest,
    SignupSource,
    WaitlistConfig,
)
from patadoc.components.waitlist.ports import EmailProviderPort, RateLimiterPort

__all__ = [
    # Component
    "run",
    "run_signup",
    # Pure functions
    "derive_client_id",
    "parse_body",
    "coerce_source",
    "validate_signup",
    "classify_provider_failure",
    "error_output",
    "success_output",
    "method_not_allowed",
    "unexpected_error",
    # Constants
    "ERROR_RESPONSES",
    "SUCCESS_MESSAGE",
    "UNKNOWN_CLIENT",
    # Models
    "ErrorKind",
    "ErrorResponseSpec",
    "SignupInput",
    "SignupOutput",
    "SignupRequest",
    "SignupSource",
    "WaitlistConfig",
    # Errors
    "MalformedRequest",
    # Ports
    "EmailProviderPort",
    "RateLimiterPort",
]
