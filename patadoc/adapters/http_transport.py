"""
HTTP transport for the submission client.

Posts signup payloads to the waitlist endpoint with httpx.AsyncClient and
maps transport failures onto the submission error types.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from patadoc.components.submission import (
    SubmissionTimeout,
    SubmissionTransportError,
    TransportResponse,
)

logger = logging.getLogger(__name__)

WAITLIST_PATH = "/api/waitlist"


class HttpxTransport:
    """
    TransportPort over httpx.

    Any HTTP status is returned as a response; only failures to get one
    raise. Non-JSON bodies come back as an empty dict.
    """

    def __init__(
        self,
        base_url: str,
        *,
        path: str = WAITLIST_PATH,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = base_url.rstrip("/") + path
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def send(self, payload: dict[str, Any], timeout_seconds: float) -> TransportResponse:
        try:
            response = await self.client.post(self.url, json=payload, timeout=timeout_seconds)
        except httpx.TimeoutException as e:
            raise SubmissionTimeout(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            raise SubmissionTransportError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        logger.debug("POST %s -> %d", self.url, response.status_code)
        return TransportResponse(status_code=response.status_code, body=body)

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
