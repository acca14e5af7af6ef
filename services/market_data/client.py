# Market data acquisition with rate limiting and synthetic fallback
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core.config.settings import Settings
from core.logging import get_market_data_logger_safe, get_performance_logger_safe
from core.monitoring.prometheus_metrics import MetricsTimer
from core.providers.registry import ProviderKind, ProviderRegistry, SYNTHETIC_PROVIDER_ID
from core.schemas.market import ConnectionTestResult, HistoricalPoint, MarketSnapshot
from core.utils.exceptions import MissingCredential, RateLimitExceeded, UnsupportedProviderError
from core.utils.rate_limiter import RateLimiter
from .providers import BinanceProvider, CoinGeckoProvider, CoinMarketCapProvider, MarketDataProvider
from .synthetic import SyntheticDataGenerator


class MarketDataClient:
    """Fetches normalized snapshots from a configured provider.

    Provider failures never reach the caller: unconfigured providers, rate-limit
    denials, network errors, non-2xx answers and malformed payloads are all
    answered with synthetic data of the same length and order as the request.
    """

    def __init__(
        self,
        settings: Settings,
        registry: ProviderRegistry,
        rate_limiter: RateLimiter,
        synthetic: SyntheticDataGenerator,
        metrics_collector: Optional[Any] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.rate_limiter = rate_limiter
        self.synthetic = synthetic
        self.metrics_collector = metrics_collector
        self._transport = transport
        self._providers: Dict[str, MarketDataProvider] = {}

        self.logger = get_market_data_logger_safe("market_data_client")
        self.perf_logger = get_performance_logger_safe("market_data_client")

        for adapter_cls, provider_id in (
            (BinanceProvider, "binance"),
            (CoinGeckoProvider, "coingecko"),
            (CoinMarketCapProvider, "coinmarketcap"),
        ):
            self.register_provider(adapter_cls(registry.get(provider_id)))

    def register_provider(self, provider: MarketDataProvider) -> None:
        """Add or replace the adapter serving ``provider.provider_id``"""
        self._providers[provider.provider_id.lower()] = provider

    @property
    def providers(self) -> List[str]:
        return sorted(self._providers)

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.market_data.request_timeout_seconds,
            transport=self._transport,
        )

    def _resolve(self, provider: Optional[str]) -> str:
        return (provider or self.settings.market_data.default_provider).strip().lower()

    def _check_ready(self, provider_id: str) -> MarketDataProvider:
        """Adapter for a live call, or raise the reason no live call can be made."""
        adapter = self._providers.get(provider_id)
        if adapter is None:
            raise UnsupportedProviderError(provider_id)
        if adapter.config.requires_key and not self.settings.api_key_for(provider_id):
            raise MissingCredential(provider_id)
        if not self.rate_limiter.try_acquire(provider_id):
            raise RateLimitExceeded(provider_id)
        return adapter

    @staticmethod
    def _normalize_symbols(symbols: Sequence[str]) -> List[str]:
        normalized = [s.strip().upper() for s in symbols]
        if any(not s for s in normalized):
            raise ValueError("symbols must not be blank")
        return normalized

    def _fallback(self, provider_id: str, symbols: List[str], reason: str,
                  error: Optional[Exception] = None) -> List[MarketSnapshot]:
        if error is None:
            self.logger.info("Using synthetic market data", provider=provider_id, reason=reason, symbols=symbols)
        else:
            self.logger.warning(
                "Using synthetic market data",
                provider=provider_id,
                reason=reason,
                symbols=symbols,
                error_type=type(error).__name__,
                error=str(error),
            )
        if self.metrics_collector:
            self.metrics_collector.record_market_data_request(provider_id, "fallback")
            self.metrics_collector.record_market_data_fallback(provider_id, reason)
        return self.synthetic.generate(symbols)

    async def fetch_market_data(self, symbols: Sequence[str],
                                provider: Optional[str] = None) -> List[MarketSnapshot]:
        """Snapshots for ``symbols`` in request order; never raises for provider failures."""
        symbols = self._normalize_symbols(symbols)
        if not symbols:
            return []
        provider_id = self._resolve(provider)

        if provider_id == SYNTHETIC_PROVIDER_ID:
            if self.metrics_collector:
                self.metrics_collector.record_market_data_request(provider_id, "success")
            return self.synthetic.generate(symbols)

        try:
            adapter = self._check_ready(provider_id)
        except UnsupportedProviderError as e:
            return self._fallback(provider_id, symbols, "unsupported", e)
        except MissingCredential:
            return self._fallback(provider_id, symbols, "unconfigured")
        except RateLimitExceeded as e:
            return self._fallback(provider_id, symbols, "rate_limited", e)

        api_key = self.settings.api_key_for(provider_id)
        try:
            with MetricsTimer() as timer:
                async with self._http_client() as http:
                    raw = await adapter.request(http, symbols, api_key)
                snapshots = adapter.normalize(raw, symbols)
        except Exception as e:
            self.logger.warning(
                "Market data request failed",
                provider=provider_id,
                error_type=type(e).__name__,
                error=str(e),
                status=getattr(e, "status", None),
            )
            return self._fallback(provider_id, symbols, "error", e)

        self.perf_logger.info(
            "Market data fetched",
            provider=provider_id,
            symbols=len(symbols),
            duration_ms=round(timer.duration * 1000, 2),
        )
        if self.metrics_collector:
            self.metrics_collector.record_market_data_latency(provider_id, timer.duration)

        by_symbol = {s.symbol: s for s in snapshots}
        missing = [s for s in symbols if s not in by_symbol]
        if missing:
            self.logger.info("Provider omitted symbols, filling with synthetic data",
                             provider=provider_id, missing=missing)
        if self.metrics_collector:
            self.metrics_collector.record_market_data_request(provider_id, "partial" if missing else "success")
            if missing:
                self.metrics_collector.record_market_data_fallback(provider_id, "missing_symbols")

        return [by_symbol.get(s) or self.synthetic.generate_one(s) for s in symbols]

    async def fetch_historical_data(self, symbol: str, days: Optional[int] = None,
                                    provider: Optional[str] = None) -> List[HistoricalPoint]:
        """Daily price series; same never-raise fallback policy as fetch_market_data."""
        symbol = self._normalize_symbols([symbol])[0]
        days = self.settings.market_data.history_days if days is None else days
        if days < 1:
            raise ValueError("days must be >= 1")
        provider_id = self._resolve(provider)

        adapter = self._providers.get(provider_id)
        if provider_id == SYNTHETIC_PROVIDER_ID or adapter is None or not adapter.supports_history:
            self.logger.info("Using synthetic price history", provider=provider_id, symbol=symbol)
            return self.synthetic.generate_history(symbol, days)

        try:
            self._check_ready(provider_id)
            async with self._http_client() as http:
                raw = await adapter.request_history(http, symbol, days, self.settings.api_key_for(provider_id))
            points = adapter.normalize_history(raw)
            if not points:
                raise ValueError("empty price series")
            return points
        except Exception as e:
            self.logger.warning(
                "Historical data unavailable, using synthetic history",
                provider=provider_id,
                symbol=symbol,
                error_type=type(e).__name__,
                error=str(e),
            )
            if self.metrics_collector:
                self.metrics_collector.record_market_data_fallback(provider_id, "history")
            return self.synthetic.generate_history(symbol, days)

    async def test_connection(self, provider: str) -> ConnectionTestResult:
        """One-symbol live probe without fallback"""
        provider_id = self._resolve(provider)
        if provider_id == SYNTHETIC_PROVIDER_ID:
            return ConnectionTestResult(provider=provider_id, success=True,
                                        message="Synthetic data is always available")
        try:
            adapter = self._check_ready(provider_id)
            with MetricsTimer() as timer:
                async with self._http_client() as http:
                    raw = await adapter.request(http, ["BTC"], self.settings.api_key_for(provider_id))
                snapshots = adapter.normalize(raw, ["BTC"])
        except Exception as e:
            self.logger.warning("Provider connection test failed", provider=provider_id, error=str(e))
            return ConnectionTestResult(provider=provider_id, success=False, message=str(e))

        if not snapshots:
            return ConnectionTestResult(provider=provider_id, success=False,
                                        message="Provider returned no data for BTC",
                                        latency_ms=round(timer.duration * 1000, 2))
        return ConnectionTestResult(provider=provider_id, success=True,
                                    message=f"Connected, BTC price {snapshots[0].price:g}",
                                    latency_ms=round(timer.duration * 1000, 2))

    def get_request_stats(self, provider: str) -> Dict[str, Any]:
        return self.rate_limiter.get_stats(provider)

    def describe_providers(self) -> List[Dict[str, Any]]:
        """Market data providers with limits and whether live calls are possible (no secrets)"""
        described = []
        for config in self.registry.list(ProviderKind.MARKET_DATA):
            has_key = bool(self.settings.api_key_for(config.id))
            described.append({
                "id": config.id,
                "baseUrl": config.base_url,
                "authScheme": config.auth_scheme.value,
                "rateLimit": {
                    "perMinute": config.rate_limit.per_minute,
                    "perHour": config.rate_limit.per_hour,
                },
                "implemented": config.id == SYNTHETIC_PROVIDER_ID or config.id in self._providers,
                "configured": has_key or not config.requires_key,
                "default": config.id == self._resolve(None),
            })
        return described
