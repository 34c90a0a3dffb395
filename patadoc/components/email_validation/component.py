"""
Email validation component.

Pure predicate over a raw address: trim, lowercase, then check the
`local@domain.tld` shape and the maximum length. Shared by the waitlist
endpoint and the submission client so both sides accept the same inputs.
"""

from __future__ import annotations

import re

from patadoc.components.email_validation.models import (
    RejectionReason,
    ValidateEmailInput,
    ValidateEmailOutput,
    ValidationError,
)

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_EMAIL_LENGTH = 254


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return email.strip().lower()


def validate_email(email: object, max_length: int = MAX_EMAIL_LENGTH) -> ValidateEmailOutput:
    """
    Validate an email address.

    Args:
        email: Raw value as received (may be None or a non-string from JSON)
        max_length: Maximum length after normalization

    Returns:
        ValidateEmailOutput with the normalized address when valid
    """
    if email is None:
        return _missing()

    if not isinstance(email, str):
        return _malformed()

    normalized = normalize_email(email)
    if not normalized:
        return _missing()

    if len(normalized) > max_length or not EMAIL_REGEX.fullmatch(normalized):
        return _malformed()

    return ValidateEmailOutput(is_valid=True, normalized_email=normalized)


def is_valid_email(email: object, max_length: int = MAX_EMAIL_LENGTH) -> bool:
    return validate_email(email, max_length).is_valid


def _missing() -> ValidateEmailOutput:
    return ValidateEmailOutput(
        is_valid=False,
        reason=RejectionReason.MISSING,
        errors=[ValidationError("MISSING_EMAIL", "Email address is required", "email")],
    )


def _malformed() -> ValidateEmailOutput:
    return ValidateEmailOutput(
        is_valid=False,
        reason=RejectionReason.MALFORMED,
        errors=[ValidationError("INVALID_EMAIL", "Please enter a valid email address", "email")],
    )


def run(inp: ValidateEmailInput) -> ValidateEmailOutput:
    """Component entry point."""
    return validate_email(inp.email, inp.max_length)
