"""
Email validation component models.

Rejections distinguish an absent address from a malformed one so callers
can show different messages for each.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RejectionReason(Enum):
    """Why an address was rejected."""

    MISSING = "missing"  # None, empty or whitespace only
    MALFORMED = "malformed"  # Present but fails pattern or length


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateEmailInput:
    """Input for email validation."""

    email: object
    max_length: int = 254


@dataclass(frozen=True)
class ValidateEmailOutput:
    """Output from email validation."""

    is_valid: bool
    normalized_email: str | None = None  # Lowercase, trimmed
    reason: RejectionReason | None = None
    errors: list[ValidationError] = field(default_factory=list)
