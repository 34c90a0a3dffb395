"""
ConvertKit provider.

Subscribes the address through a form (`POST /v3/forms/{form_id}/subscribe`)
with the API key in the body. ConvertKit may answer 200 for an address that
is already on the list; the duplicate signal is the phrase
"already subscribed" in the response message, whatever the status.
"""

from __future__ import annotations

import logging
from typing import Any

from patadoc.adapters.http_provider import HttpEmailProvider, json_or_empty
from patadoc.core.ports.email_provider import SignupResult

logger = logging.getLogger(__name__)

ALREADY_SUBSCRIBED = "already subscribed"


def _is_duplicate(body: dict[str, Any]) -> bool:
    message = body.get("message")
    return isinstance(message, str) and ALREADY_SUBSCRIBED in message.lower()


class ConvertKitProvider(HttpEmailProvider):
    name = "ConvertKit"

    @property
    def url(self) -> str:
        return f"https://api.convertkit.com/v3/forms/{self.list_id}/subscribe"

    def build_request(
        self, email: str, source: str, signup_date: str
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        payload = {
            "api_key": self.api_key,
            "email": email,
            "fields": {
                "signup_source": source,
                "signup_date": signup_date,
            },
            "tags": self.tags,
        }
        return self.url, payload, {}

    def subscribe(self, email: str, source: str) -> SignupResult:
        logger.info("Adding email to ConvertKit: %s (source: %s)", email, source)
        response = self.post(email, source)
        body = json_or_empty(response)

        if _is_duplicate(body):
            logger.info("Email already subscribed in ConvertKit: %s", email)
            return SignupResult(success=True, duplicate=True)

        if not response.is_success:
            raise self.fail(response, body.get("message"))

        logger.info("Successfully added to ConvertKit: %s", email)
        return SignupResult(success=True, duplicate=False, data=body)
