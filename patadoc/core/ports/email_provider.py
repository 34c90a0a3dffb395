"""
Email Provider Interface.

Protocol-based interface for subscribing an address to the upstream
email-marketing list. The provider is the system of record for
subscribers; nothing is stored locally.

Key requirements:
- Exactly one outbound call per subscription attempt (no retries inside)
- "Already subscribed" is a successful result flagged as duplicate
- Other upstream failures raise ProviderError with a closed kind
- Missing credentials raise ProviderConfigError before any network call

Implementation strategies:
1. MailchimpProvider: audience members API, datacenter taken from the key
2. ConvertKitProvider: form subscribe API
3. InMemoryEmailProvider: dev/test, no network

All strategies implement the same EmailProviderPort interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class ServiceType(Enum):
    """Which upstream service is active."""

    MAILCHIMP = "mailchimp"
    CONVERTKIT = "convertkit"
    DEV = "dev"

    @classmethod
    def parse(cls, value: str | None) -> ServiceType:
        """Parse a configured value; unknown or empty values select Mailchimp."""
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.MAILCHIMP


class ProviderErrorKind(Enum):
    """Normalized upstream failure kinds."""

    DUPLICATE = "duplicate"  # Provider refused because the address exists
    UNAVAILABLE = "unavailable"  # Timeout, connection failure, 502/503/504
    OTHER = "other"


@dataclass(frozen=True)
class SignupResult:
    """Result of a subscription attempt."""

    success: bool
    duplicate: bool = False
    data: dict[str, Any] | None = None


@dataclass(frozen=True)
class ProviderConfig:
    """Provider configuration (secrets come from the environment)."""

    service_type: ServiceType = ServiceType.MAILCHIMP
    api_key: str | None = None
    list_id: str | None = None  # Mailchimp audience id or ConvertKit form id
    tags: tuple[str, ...] = ("PataDoc_Waitlist", "Pre_Launch")
    timeout_seconds: float = 10.0


class ProviderConfigError(Exception):
    """Provider configuration is missing or unusable."""

    def __init__(self, reason: str = "Email service configuration missing") -> None:
        self.reason = reason
        super().__init__(reason)


class ProviderError(Exception):
    """Upstream provider rejected or failed the subscription."""

    def __init__(
        self,
        provider: str,
        kind: ProviderErrorKind,
        detail: str,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{provider} API error: {status} - {detail}")


class EmailProviderPort(Protocol):
    """
    Email provider interface.

    Subscribes an address with source metadata and fixed tags.
    """

    name: str

    def subscribe(self, email: str, source: str) -> SignupResult:
        """
        Subscribe a normalized, validated address.

        Args:
            email: Normalized email address
            source: Signup source tag (hero, footer_cta, unknown)

        Returns:
            SignupResult; duplicate=True when the address already exists

        Raises:
            ProviderConfigError: credentials missing
            ProviderError: any other upstream failure
        """
        ...
