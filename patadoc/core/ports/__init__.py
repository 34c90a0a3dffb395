# patadoc: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from patadoc.core.ports.email_provider import (
    EmailProviderPort,
    ProviderConfig,
    ProviderConfigError,
    ProviderError,
    ProviderErrorKind,
    ServiceType,
    SignupResult,
)

__all__ = [
    "EmailProviderPort",
    "ProviderConfig",
    "ProviderConfigError",
    "ProviderError",
    "ProviderErrorKind",
    "ServiceType",
    "SignupResult",
]
