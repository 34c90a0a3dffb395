import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Request

from patadoc.adapters.providers import create_email_provider, provider_config_from_env
from patadoc.components.rate_limit import RateLimitConfig, RateLimiter
from patadoc.components.waitlist import WaitlistConfig, derive_client_id
from patadoc.core.ports.email_provider import EmailProviderPort
from patadoc.rules.loader import load_rules
from patadoc.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("PATADOC_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_waitlist_config(rules: Rules = Depends(get_rules)) -> WaitlistConfig:
    return WaitlistConfig(
        allowed_sources=frozenset(rules.waitlist.allowed_sources),
        default_source=rules.waitlist.default_source,
        max_email_length=rules.email.max_length,
    )


# --- Request ---
async def get_request_body(request: Request) -> bytes:
    return await request.body()


def get_client_id(request: Request) -> str:
    """Client identifier from forwarding headers, for rate limiting only."""
    return derive_client_id(
        request.headers.get("x-forwarded-for"),
        request.headers.get("x-real-ip"),
    )


# Rate limiter singleton; state lives for the process lifetime
_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        window = rules.rate_limit.waitlist
        _rate_limiter_instance = RateLimiter(
            RateLimitConfig(
                window_seconds=window.window_seconds,
                max_requests=window.max_requests,
            )
        )
    return _rate_limiter_instance


# Provider singleton; selected once from the environment
_email_provider_instance: EmailProviderPort | None = None


def get_email_provider(rules: Rules = Depends(get_rules)) -> EmailProviderPort:
    """Get email provider singleton."""
    global _email_provider_instance
    if _email_provider_instance is None:
        _email_provider_instance = create_email_provider(
            provider_config_from_env(rules.provider)
        )
    return _email_provider_instance


def reset_singletons() -> None:
    """Drop cached limiter and provider (closing the provider's client)."""
    global _rate_limiter_instance, _email_provider_instance
    if _email_provider_instance is not None:
        close = getattr(_email_provider_instance, "close", None)
        if close is not None:
            close()
    _rate_limiter_instance = None
    _email_provider_instance = None
