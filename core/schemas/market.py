# Normalised market data shapes shared by real providers and the synthetic generator

from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from core.schemas.base import CouncilBaseModel, require_finite


class MarketSnapshot(CouncilBaseModel):
    """One symbol's 24h market view. Every numeric field is populated and finite."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., description="Upper-case ticker, e.g. BTC")
    name: str = Field(..., description="Display name, e.g. Bitcoin")
    price: float = Field(..., gt=0, description="Last price in USD")
    change_24h: float = Field(..., description="Absolute 24h price change in USD")
    change_percent_24h: float = Field(..., description="24h price change in percent")
    volume_24h: float = Field(..., ge=0, description="24h traded volume in USD")
    high_24h: float = Field(..., gt=0)
    low_24h: float = Field(..., gt=0)
    market_cap: float = Field(..., ge=0)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = Field(..., description="Provider that produced the snapshot ('synthetic' for fallback data)")

    @field_validator(
        "price", "change_24h", "change_percent_24h", "volume_24h",
        "high_24h", "low_24h", "market_cap", mode="before"
    )
    @classmethod
    def validate_finite(cls, v):
        return require_finite(float(v)) if v is not None else require_finite(v)

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be empty")
        return v


class HistoricalPoint(CouncilBaseModel):
    """Single point of a daily price series"""

    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    price: float = Field(..., gt=0)
    volume: float = Field(0.0, ge=0)

    @field_validator("price", "volume", mode="before")
    @classmethod
    def validate_finite(cls, v):
        return require_finite(float(v)) if v is not None else require_finite(v)


class ConnectionTestResult(CouncilBaseModel):
    """Outcome of a live, fallback-free provider probe"""

    provider: str
    success: bool
    message: str
    latency_ms: Optional[float] = None
