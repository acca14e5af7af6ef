from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core.providers.registry import ProviderConfig
from core.schemas.market import HistoricalPoint, MarketSnapshot
from core.utils.exceptions import ProviderHTTPError, ProviderParseError


class MarketDataProvider(ABC):
    """Uniform adapter interface for one market data provider.

    ``request`` performs the provider-specific HTTP call and returns the raw
    decoded JSON; ``normalize`` turns that payload into snapshots. Symbols the
    provider does not know are simply absent from the normalized list.
    """

    supports_history: bool = False

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def provider_id(self) -> str:
        return self.config.id

    @abstractmethod
    async def request(self, http: httpx.AsyncClient, symbols: Sequence[str],
                      api_key: Optional[str] = None) -> Any:
        """Fetch the raw payload for the given symbols."""
        pass

    @abstractmethod
    def normalize(self, raw: Any, symbols: Sequence[str]) -> List[MarketSnapshot]:
        """Convert the raw payload into snapshots for the symbols it contains."""
        pass

    async def request_history(self, http: httpx.AsyncClient, symbol: str, days: int,
                              api_key: Optional[str] = None) -> Any:
        raise NotImplementedError(f"{self.provider_id} does not serve historical data")

    def normalize_history(self, raw: Any) -> List[HistoricalPoint]:
        raise NotImplementedError(f"{self.provider_id} does not serve historical data")

    async def _get_json(self, http: httpx.AsyncClient, path: str,
                        params: Optional[Dict[str, Any]] = None,
                        api_key: Optional[str] = None) -> Any:
        """GET ``base_url + path`` with the provider's auth; non-2xx and bad JSON raise."""
        query = dict(params or {})
        query.update(self.config.auth_params(api_key))
        response = await http.get(
            f"{self.config.base_url}{path}",
            params=query,
            headers=self.config.auth_headers(api_key),
        )
        if response.is_error:
            raise ProviderHTTPError(
                f"{self.provider_id} returned HTTP {response.status_code}",
                self.provider_id,
                response.status_code,
                response_text=response.text[:500],
            )
        try:
            return response.json()
        except ValueError:
            raise ProviderParseError(f"{self.provider_id} returned a non-JSON body", self.provider_id) from None
