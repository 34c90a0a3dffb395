"""
Email validation component.

Format and length check shared by server and client.
"""

from patadoc.components.email_validation.component import (
    EMAIL_REGEX,
    MAX_EMAIL_LENGTH,
    is_valid_email,
    normalize_email,
    run,
    validate_email,
)
from patadoc.components.email_validation.models import (
    RejectionReason,
    ValidateEmailInput,
    ValidateEmailOutput,
    ValidationError,
)

__all__ = [
    # Component
    "run",
    # Pure functions
    "validate_email",
    "is_valid_email",
    "normalize_email",
    # Constants
    "EMAIL_REGEX",
    "MAX_EMAIL_LENGTH",
    # Models
    "RejectionReason",
    "ValidateEmailInput",
    "ValidateEmailOutput",
    "ValidationError",
]
