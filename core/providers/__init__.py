"""
Provider registry: static configuration of every external provider
"""

from .registry import (
    AuthScheme,
    DEFAULT_PROVIDERS,
    ProviderConfig,
    ProviderKind,
    ProviderRegistry,
    RateLimit,
    SYNTHETIC_PROVIDER_ID,
)

__all__ = [
    "AuthScheme",
    "DEFAULT_PROVIDERS",
    "ProviderConfig",
    "ProviderKind",
    "ProviderRegistry",
    "RateLimit",
    "SYNTHETIC_PROVIDER_ID",
]
