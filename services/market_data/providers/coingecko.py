from typing import Any, List, Optional, Sequence

import httpx

from core.schemas.market import HistoricalPoint, MarketSnapshot
from core.utils.exceptions import ProviderParseError
from services.market_data.formatter import coingecko_id, parse_timestamp, to_float
from .base import MarketDataProvider


class CoinGeckoProvider(MarketDataProvider):
    """``/coins/markets`` snapshots and ``/coins/{id}/market_chart`` history"""

    supports_history = True

    async def request(self, http: httpx.AsyncClient, symbols: Sequence[str],
                      api_key: Optional[str] = None) -> Any:
        params = {
            "vs_currency": "usd",
            "ids": ",".join(coingecko_id(s) for s in symbols),
            "order": "market_cap_desc",
            "per_page": max(1, len(symbols)),
            "page": 1,
            "sparkline": "false",
            "price_change_percentage": "24h",
        }
        return await self._get_json(http, "/coins/markets", params=params, api_key=api_key)

    def normalize(self, raw: Any, symbols: Sequence[str]) -> List[MarketSnapshot]:
        if not isinstance(raw, list):
            raise ProviderParseError("Expected a list of coins", self.provider_id)

        by_id = {c.get("id"): c for c in raw if isinstance(c, dict)}
        by_symbol = {str(c.get("symbol", "")).upper(): c for c in raw if isinstance(c, dict)}
        snapshots = []
        for symbol in symbols:
            coin = by_id.get(coingecko_id(symbol)) or by_symbol.get(symbol.upper())
            if coin is None:
                continue
            pid = self.provider_id
            price = to_float(coin.get("current_price"), pid, "current_price")
            snapshots.append(MarketSnapshot(
                symbol=symbol,
                name=coin.get("name") or symbol,
                price=price,
                change_24h=to_float(coin.get("price_change_24h"), pid, "price_change_24h", default=0.0),
                change_percent_24h=to_float(
                    coin.get("price_change_percentage_24h"), pid, "price_change_percentage_24h", default=0.0
                ),
                volume_24h=to_float(coin.get("total_volume"), pid, "total_volume", default=0.0),
                high_24h=to_float(coin.get("high_24h"), pid, "high_24h", default=price),
                low_24h=to_float(coin.get("low_24h"), pid, "low_24h", default=price),
                market_cap=to_float(coin.get("market_cap"), pid, "market_cap", default=0.0),
                last_updated=parse_timestamp(coin.get("last_updated")),
                source=pid,
            ))
        return snapshots

    async def request_history(self, http: httpx.AsyncClient, symbol: str, days: int,
                              api_key: Optional[str] = None) -> Any:
        params = {"vs_currency": "usd", "days": days, "interval": "daily"}
        return await self._get_json(
            http, f"/coins/{coingecko_id(symbol)}/market_chart", params=params, api_key=api_key
        )

    def normalize_history(self, raw: Any) -> List[HistoricalPoint]:
        if not isinstance(raw, dict) or not isinstance(raw.get("prices"), list):
            raise ProviderParseError("Expected 'prices' series", self.provider_id)

        volumes = {}
        for entry in raw.get("total_volumes") or []:
            if isinstance(entry, list) and len(entry) == 2:
                volumes[entry[0]] = entry[1]

        points = []
        for entry in raw["prices"]:
            if not isinstance(entry, list) or len(entry) != 2:
                raise ProviderParseError("Malformed price point", self.provider_id)
            ts, price = entry
            points.append(HistoricalPoint(
                timestamp_ms=int(ts),
                price=to_float(price, self.provider_id, "price"),
                volume=to_float(volumes.get(ts), self.provider_id, "volume", default=0.0),
            ))
        return points
