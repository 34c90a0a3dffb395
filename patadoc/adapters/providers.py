"""
Provider selection.

The active provider is chosen once from configuration; call sites only see
EmailProviderPort. Adding a provider means adding a ServiceType member and a
branch here.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

import httpx

from patadoc.adapters.convertkit import ConvertKitProvider
from patadoc.adapters.dev_provider import InMemoryEmailProvider
from patadoc.adapters.mailchimp import MailchimpProvider
from patadoc.core.ports.email_provider import (
    EmailProviderPort,
    ProviderConfig,
    ServiceType,
)
from patadoc.rules.models import ProviderRules


def provider_config_from_env(
    rules: ProviderRules | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProviderConfig:
    """Build provider configuration from environment variables and rules."""
    env = os.environ if environ is None else environ
    rules = rules or ProviderRules()

    return ProviderConfig(
        service_type=ServiceType.parse(env.get("EMAIL_SERVICE_TYPE")),
        api_key=env.get("EMAIL_SERVICE_API_KEY") or None,
        list_id=env.get("EMAIL_SERVICE_AUDIENCE_ID") or None,
        tags=tuple(rules.tags),
        timeout_seconds=rules.timeout_seconds,
    )


def create_email_provider(
    config: ProviderConfig,
    *,
    client: httpx.Client | None = None,
) -> EmailProviderPort:
    """
    Create the provider for the configured service type.

    Credentials are not checked here; providers raise ProviderConfigError on
    the first subscribe so a misconfigured deployment still answers requests.
    """
    if config.service_type == ServiceType.DEV:
        return InMemoryEmailProvider(tags=list(config.tags))

    if config.service_type == ServiceType.CONVERTKIT:
        return ConvertKitProvider(
            config.api_key,
            config.list_id,
            tags=config.tags,
            timeout_seconds=config.timeout_seconds,
            client=client,
        )

    return MailchimpProvider(
        config.api_key,
        config.list_id,
        tags=config.tags,
        timeout_seconds=config.timeout_seconds,
        client=client,
    )
