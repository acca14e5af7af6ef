# Static provider table: base URL, auth scheme and default rate limits per provider

from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.config.settings import Settings
from core.utils.exceptions import UnsupportedProviderError


class ProviderKind(str, Enum):
    MARKET_DATA = "market_data"
    LLM = "llm"


class AuthScheme(str, Enum):
    NONE = "none"
    BEARER = "bearer"
    HEADER = "header"
    QUERY_PARAM = "query_param"


class RateLimit(BaseModel):
    model_config = ConfigDict(frozen=True)

    per_minute: int = Field(..., gt=0)
    per_hour: int = Field(..., gt=0)


class ProviderConfig(BaseModel):
    """Immutable description of one external provider"""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: ProviderKind
    base_url: str
    auth_scheme: AuthScheme = AuthScheme.NONE
    # Header or query parameter name for HEADER / QUERY_PARAM schemes
    auth_param: Optional[str] = None
    # Whether live calls are possible without a key
    requires_key: bool = True
    rate_limit: RateLimit

    def auth_headers(self, api_key: Optional[str]) -> Dict[str, str]:
        if not api_key:
            return {}
        if self.auth_scheme == AuthScheme.BEARER:
            return {"Authorization": f"Bearer {api_key}"}
        if self.auth_scheme == AuthScheme.HEADER and self.auth_param:
            return {self.auth_param: api_key}
        return {}

    def auth_params(self, api_key: Optional[str]) -> Dict[str, str]:
        if api_key and self.auth_scheme == AuthScheme.QUERY_PARAM and self.auth_param:
            return {self.auth_param: api_key}
        return {}


SYNTHETIC_PROVIDER_ID = "synthetic"


DEFAULT_PROVIDERS: List[ProviderConfig] = [
    # Market data
    ProviderConfig(
        id="binance", kind=ProviderKind.MARKET_DATA,
        base_url="https://api.binance.com/api/v3",
        auth_scheme=AuthScheme.HEADER, auth_param="X-MBX-APIKEY",
        requires_key=False,
        rate_limit=RateLimit(per_minute=1200, per_hour=6000),
    ),
    ProviderConfig(
        id="coingecko", kind=ProviderKind.MARKET_DATA,
        base_url="https://api.coingecko.com/api/v3",
        auth_scheme=AuthScheme.HEADER, auth_param="x-cg-demo-api-key",
        requires_key=False,
        rate_limit=RateLimit(per_minute=10, per_hour=1000),
    ),
    ProviderConfig(
        id="coinmarketcap", kind=ProviderKind.MARKET_DATA,
        base_url="https://pro-api.coinmarketcap.com/v1",
        auth_scheme=AuthScheme.HEADER, auth_param="X-CMC_PRO_API_KEY",
        rate_limit=RateLimit(per_minute=30, per_hour=1000),
    ),
    ProviderConfig(
        id=SYNTHETIC_PROVIDER_ID, kind=ProviderKind.MARKET_DATA,
        base_url="",
        requires_key=False,
        rate_limit=RateLimit(per_minute=1000, per_hour=10000),
    ),
    # LLM agents
    ProviderConfig(
        id="openai", kind=ProviderKind.LLM,
        base_url="https://api.openai.com/v1",
        auth_scheme=AuthScheme.BEARER,
        rate_limit=RateLimit(per_minute=60, per_hour=3000),
    ),
    ProviderConfig(
        id="claude", kind=ProviderKind.LLM,
        base_url="https://api.anthropic.com/v1",
        auth_scheme=AuthScheme.HEADER, auth_param="x-api-key",
        rate_limit=RateLimit(per_minute=50, per_hour=2000),
    ),
    ProviderConfig(
        id="perplexity", kind=ProviderKind.LLM,
        base_url="https://api.perplexity.ai",
        auth_scheme=AuthScheme.BEARER,
        rate_limit=RateLimit(per_minute=50, per_hour=2000),
    ),
    ProviderConfig(
        id="grok", kind=ProviderKind.LLM,
        base_url="https://api.x.ai/v1",
        auth_scheme=AuthScheme.BEARER,
        rate_limit=RateLimit(per_minute=60, per_hour=3000),
    ),
    ProviderConfig(
        id="gemini", kind=ProviderKind.LLM,
        base_url="https://generativelanguage.googleapis.com/v1beta",
        auth_scheme=AuthScheme.QUERY_PARAM, auth_param="key",
        rate_limit=RateLimit(per_minute=60, per_hour=1500),
    ),
    ProviderConfig(
        id="custom", kind=ProviderKind.LLM,
        base_url="",
        auth_scheme=AuthScheme.BEARER,
        rate_limit=RateLimit(per_minute=60, per_hour=3000),
    ),
]


class ProviderRegistry:
    """Lookup table of provider configs, keyed by lower-case provider id"""

    def __init__(self, providers: Optional[Iterable[ProviderConfig]] = None):
        self._providers: Dict[str, ProviderConfig] = {}
        for config in (DEFAULT_PROVIDERS if providers is None else providers):
            self.register(config)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        """Default table with per-provider rate-limit overrides applied"""
        registry = cls()
        for provider_id, override in settings.rate_limits.items():
            if provider_id not in registry:
                continue
            current = registry.get(provider_id)
            registry.register(current.model_copy(update={
                "rate_limit": RateLimit(per_minute=override.per_minute, per_hour=override.per_hour)
            }))
        return registry

    def register(self, config: ProviderConfig) -> None:
        self._providers[config.id.lower()] = config

    def get(self, provider_id: str) -> ProviderConfig:
        try:
            return self._providers[provider_id.lower()]
        except KeyError:
            raise UnsupportedProviderError(provider_id) from None

    def find(self, provider_id: str) -> Optional[ProviderConfig]:
        return self._providers.get(provider_id.lower())

    def list(self, kind: Optional[ProviderKind] = None) -> List[ProviderConfig]:
        return [p for p in self._providers.values() if kind is None or p.kind == kind]

    def __contains__(self, provider_id: str) -> bool:
        return provider_id.lower() in self._providers
