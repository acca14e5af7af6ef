from typing import Any, List, Optional, Sequence

import httpx

from core.schemas.market import MarketSnapshot
from core.utils.exceptions import ProviderParseError
from services.market_data.formatter import display_name, parse_timestamp, to_float
from .base import MarketDataProvider

QUOTE_ASSET = "USDT"


class BinanceProvider(MarketDataProvider):
    """24h ticker statistics for ``{SYMBOL}USDT`` spot pairs"""

    async def request(self, http: httpx.AsyncClient, symbols: Sequence[str],
                      api_key: Optional[str] = None) -> Any:
        return await self._get_json(http, "/ticker/24hr", api_key=api_key)

    def normalize(self, raw: Any, symbols: Sequence[str]) -> List[MarketSnapshot]:
        if not isinstance(raw, list):
            raise ProviderParseError("Expected a list of tickers", self.provider_id)

        tickers = {t.get("symbol"): t for t in raw if isinstance(t, dict)}
        snapshots = []
        for symbol in symbols:
            ticker = tickers.get(f"{symbol.upper()}{QUOTE_ASSET}")
            if ticker is None:
                continue
            pid = self.provider_id
            price = to_float(ticker.get("lastPrice"), pid, "lastPrice")
            quote_volume = ticker.get("quoteVolume")
            if quote_volume is None:
                volume = to_float(ticker.get("volume"), pid, "volume", default=0.0) * price
            else:
                volume = to_float(quote_volume, pid, "quoteVolume")
            snapshots.append(MarketSnapshot(
                symbol=symbol,
                name=display_name(symbol),
                price=price,
                change_24h=to_float(ticker.get("priceChange"), pid, "priceChange", default=0.0),
                change_percent_24h=to_float(ticker.get("priceChangePercent"), pid, "priceChangePercent", default=0.0),
                volume_24h=volume,
                high_24h=to_float(ticker.get("highPrice"), pid, "highPrice", default=price),
                low_24h=to_float(ticker.get("lowPrice"), pid, "lowPrice", default=price),
                # Binance does not publish market cap
                market_cap=0.0,
                last_updated=parse_timestamp(ticker.get("closeTime")),
                source=pid,
            ))
        return snapshots
