"""
Shared plumbing for HTTP email providers.

Owns the httpx client, turns transport failures into UNAVAILABLE provider
errors and classifies upstream error responses. Subclasses build the URL and
payload and decide what counts as a duplicate.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Protocol

import httpx

from patadoc.adapters.clock import SystemClock, isoformat_z
from patadoc.core.ports.email_provider import (
    ProviderConfigError,
    ProviderError,
    ProviderErrorKind,
)

logger = logging.getLogger(__name__)

UNAVAILABLE_STATUSES = frozenset({502, 503, 504})

DEFAULT_TAGS: tuple[str, ...] = ("PataDoc_Waitlist", "Pre_Launch")


class ClockPort(Protocol):
    def now(self) -> datetime: ...


def classify_failure(status_code: int | None, detail: str) -> ProviderErrorKind:
    """
    Map an upstream failure to a provider error kind.

    Status codes win; the message is only consulted because neither upstream
    service exposes a uniform machine-readable code for these cases.
    """
    if status_code in UNAVAILABLE_STATUSES:
        return ProviderErrorKind.UNAVAILABLE

    text = detail.lower()
    if "duplicate" in text or "already exists" in text:
        return ProviderErrorKind.DUPLICATE
    if "timeout" in text or "timed out" in text or "unavailable" in text:
        return ProviderErrorKind.UNAVAILABLE
    return ProviderErrorKind.OTHER


def json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class HttpEmailProvider(ABC):
    name = "Email service"

    def __init__(
        self,
        api_key: str | None,
        list_id: str | None,
        *,
        tags: tuple[str, ...] | list[str] = DEFAULT_TAGS,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self.api_key = api_key
        self.list_id = list_id
        self.tags = list(tags)
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._clock = clock if clock is not None else SystemClock()

    # --- subclass hooks ---

    @abstractmethod
    def build_request(
        self, email: str, source: str, signup_date: str
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        """Return (url, json payload, extra headers)."""

    # --- shared behavior ---

    def check_config(self) -> None:
        """Raise ProviderConfigError when credentials are missing."""
        if not self.api_key or not self.list_id:
            raise ProviderConfigError()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout_seconds)
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def signup_date(self) -> str:
        return isoformat_z(self._clock.now())

    def post(self, email: str, source: str) -> httpx.Response:
        """Send exactly one subscription request upstream."""
        self.check_config()
        url, payload, headers = self.build_request(email, source, self.signup_date())

        try:
            return self.client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", **headers},
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            logger.error("%s request timeout for %s", self.name, email)
            raise ProviderError(
                self.name, ProviderErrorKind.UNAVAILABLE, "request timeout"
            ) from e
        except httpx.TransportError as e:
            logger.error("%s unreachable: %s", self.name, e)
            raise ProviderError(
                self.name, ProviderErrorKind.UNAVAILABLE, f"service unavailable ({e})"
            ) from e

    def fail(self, response: httpx.Response, detail: object) -> ProviderError:
        if not isinstance(detail, str) or not detail:
            detail = response.reason_phrase or "Unknown error"
        logger.error(
            "%s API error: status=%s detail=%s",
            self.name,
            response.status_code,
            detail,
        )
        return ProviderError(
            self.name,
            classify_failure(response.status_code, detail),
            detail,
            response.status_code,
        )
