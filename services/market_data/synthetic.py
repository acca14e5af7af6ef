# Synthetic market data used whenever a real provider is unconfigured, rate-limited or failing
import random
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from core.providers.registry import SYNTHETIC_PROVIDER_ID
from core.schemas.market import HistoricalPoint, MarketSnapshot
from services.market_data.formatter import display_name

# Reference USD prices for well-known symbols
BASE_PRICES: Dict[str, float] = {
    "BTC": 43000.0,
    "ETH": 2500.0,
    "USDT": 1.0,
    "USDC": 1.0,
    "BNB": 300.0,
    "XRP": 0.6,
    "ADA": 0.5,
    "SOL": 100.0,
    "DOGE": 0.08,
    "MATIC": 0.9,
    "DOT": 7.0,
    "AVAX": 35.0,
    "LINK": 14.0,
    "LTC": 70.0,
    "UNI": 6.0,
    "ATOM": 8.0,
    "ICP": 5.0,
    "NEAR": 2.0,
    "APT": 9.0,
    "FTM": 0.4,
    "OKB": 45.0,
    "PENGU": 0.035,
}

# Approximate circulating supply, used to derive a plausible market cap
CIRCULATING_SUPPLY: Dict[str, float] = {
    "BTC": 19_600_000,
    "ETH": 120_000_000,
    "USDT": 95_000_000_000,
    "USDC": 25_000_000_000,
    "BNB": 150_000_000,
    "XRP": 54_000_000_000,
    "ADA": 35_000_000_000,
    "SOL": 440_000_000,
    "DOGE": 143_000_000_000,
}

MAX_DAILY_CHANGE_PERCENT = 4.0
PRICE_JITTER = 0.05
HIGH_LOW_SPREAD = 0.02
DAY_MS = 24 * 60 * 60 * 1000


class SyntheticDataGenerator:
    """Bounded pseudo-random snapshots, deterministic for a fixed seed.

    Output always has the same length and order as the requested symbols,
    every numeric field is finite and prices are positive, so callers treat
    real and synthetic data identically.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    def base_price(self, symbol: str) -> float:
        base = BASE_PRICES.get(symbol.upper())
        if base is None:
            base = self.rng.uniform(1.0, 11.0)
        return base

    def generate(self, symbols: Sequence[str]) -> List[MarketSnapshot]:
        now = datetime.now(timezone.utc)
        return [self._snapshot(symbol, now) for symbol in symbols]

    def generate_one(self, symbol: str) -> MarketSnapshot:
        return self._snapshot(symbol, datetime.now(timezone.utc))

    def _snapshot(self, symbol: str, now: datetime) -> MarketSnapshot:
        symbol = symbol.strip().upper()
        rng = self.rng

        price = self.base_price(symbol) * rng.uniform(1 - PRICE_JITTER, 1 + PRICE_JITTER)
        change_percent = rng.uniform(-MAX_DAILY_CHANGE_PERCENT, MAX_DAILY_CHANGE_PERCENT)
        yesterday = price / (1 + change_percent / 100.0)

        high = max(price, yesterday) * (1 + rng.uniform(0, HIGH_LOW_SPREAD))
        low = min(price, yesterday) * (1 - rng.uniform(0, HIGH_LOW_SPREAD))

        supply = CIRCULATING_SUPPLY.get(symbol) or rng.uniform(1e7, 1e9)
        market_cap = price * supply
        volume = market_cap * rng.uniform(0.01, 0.08)

        return MarketSnapshot(
            symbol=symbol,
            name=display_name(symbol),
            price=price,
            change_24h=price - yesterday,
            change_percent_24h=change_percent,
            volume_24h=volume,
            high_24h=high,
            low_24h=low,
            market_cap=market_cap,
            last_updated=now,
            source=SYNTHETIC_PROVIDER_ID,
        )

    def generate_history(self, symbol: str, days: int, end_ms: Optional[int] = None) -> List[HistoricalPoint]:
        """Daily random walk of ``days + 1`` points ending at ``end_ms`` (default now)"""
        if days < 0:
            raise ValueError("days must be >= 0")
        end_ms = int(time.time() * 1000) if end_ms is None else end_ms
        start_ms = end_ms - days * DAY_MS

        price = self.base_price(symbol)
        points = []
        for i in range(days + 1):
            price *= 1 + self.rng.uniform(-0.03, 0.03)
            points.append(HistoricalPoint(
                timestamp_ms=start_ms + i * DAY_MS,
                price=price,
                volume=price * self.rng.uniform(1e5, 1e6),
            ))
        return points
