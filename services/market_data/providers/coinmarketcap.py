from typing import Any, List, Optional, Sequence

import httpx

from core.schemas.market import MarketSnapshot
from core.utils.exceptions import ProviderParseError
from services.market_data.formatter import parse_timestamp, to_float
from .base import MarketDataProvider


class CoinMarketCapProvider(MarketDataProvider):
    """``/cryptocurrency/quotes/latest`` USD quotes"""

    async def request(self, http: httpx.AsyncClient, symbols: Sequence[str],
                      api_key: Optional[str] = None) -> Any:
        params = {"symbol": ",".join(s.upper() for s in symbols), "convert": "USD"}
        return await self._get_json(http, "/cryptocurrency/quotes/latest", params=params, api_key=api_key)

    def normalize(self, raw: Any, symbols: Sequence[str]) -> List[MarketSnapshot]:
        data = raw.get("data") if isinstance(raw, dict) else None
        if not isinstance(data, dict):
            raise ProviderParseError("Expected 'data' object", self.provider_id)

        snapshots = []
        for symbol in symbols:
            entry = data.get(symbol.upper())
            # v2-style responses map each symbol to a list of matches
            if isinstance(entry, list):
                entry = entry[0] if entry else None
            if not isinstance(entry, dict):
                continue
            quote = (entry.get("quote") or {}).get("USD")
            if not isinstance(quote, dict):
                raise ProviderParseError(f"Missing USD quote for {symbol}", self.provider_id)

            pid = self.provider_id
            price = to_float(quote.get("price"), pid, "price")
            change_percent = to_float(quote.get("percent_change_24h"), pid, "percent_change_24h", default=0.0)
            # Quotes carry no 24h range; derive it from the implied previous close
            yesterday = price / (1 + change_percent / 100.0) if change_percent > -100 else price
            snapshots.append(MarketSnapshot(
                symbol=symbol,
                name=entry.get("name") or symbol,
                price=price,
                change_24h=price - yesterday,
                change_percent_24h=change_percent,
                volume_24h=to_float(quote.get("volume_24h"), pid, "volume_24h", default=0.0),
                high_24h=max(price, yesterday),
                low_24h=min(price, yesterday),
                market_cap=to_float(quote.get("market_cap"), pid, "market_cap", default=0.0),
                last_updated=parse_timestamp(quote.get("last_updated")),
                source=pid,
            ))
        return snapshots
