"""
Mailchimp provider.

Adds the address to an audience through the Marketing API
(`POST /3.0/lists/{audience_id}/members`). The datacenter is the suffix of
the API key (`<key>-us4` -> `us4`).

Duplicates come back as 400 with title "Member Exists" and are reported as
a successful, duplicate result.
"""

from __future__ import annotations

import logging
from typing import Any

from patadoc.adapters.http_provider import HttpEmailProvider, json_or_empty
from patadoc.core.ports.email_provider import ProviderConfigError, SignupResult

logger = logging.getLogger(__name__)

MEMBER_EXISTS_TITLE = "Member Exists"


def datacenter_from_key(api_key: str) -> str:
    """Extract the datacenter segment from a Mailchimp API key."""
    parts = api_key.split("-")
    if len(parts) < 2 or not parts[1]:
        raise ProviderConfigError("Mailchimp API key has no datacenter suffix")
    return parts[1]


class MailchimpProvider(HttpEmailProvider):
    name = "Mailchimp"

    def check_config(self) -> None:
        super().check_config()
        datacenter_from_key(self.api_key or "")

    @property
    def url(self) -> str:
        datacenter = datacenter_from_key(self.api_key or "")
        return f"https://{datacenter}.api.mailchimp.com/3.0/lists/{self.list_id}/members"

    def build_request(
        self, email: str, source: str, signup_date: str
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        payload = {
            "email_address": email,
            "status": "subscribed",
            "merge_fields": {
                "SIGNUP_SOURCE": source,
                "SIGNUP_DATE": signup_date,
            },
            "tags": self.tags,
        }
        return self.url, payload, {"Authorization": f"apikey {self.api_key}"}

    def subscribe(self, email: str, source: str) -> SignupResult:
        logger.info("Adding email to Mailchimp: %s (source: %s)", email, source)
        response = self.post(email, source)

        if not response.is_success:
            error_data = json_or_empty(response)

            if response.status_code == 400 and error_data.get("title") == MEMBER_EXISTS_TITLE:
                logger.info("Email already exists in Mailchimp: %s", email)
                return SignupResult(success=True, duplicate=True)

            raise self.fail(response, error_data.get("detail"))

        logger.info("Successfully added to Mailchimp: %s", email)
        return SignupResult(success=True, duplicate=False, data=json_or_empty(response))
