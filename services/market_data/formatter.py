# Helpers shared by market data provider adapters
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.utils.exceptions import ProviderParseError

# Display names for well-known symbols; unknown symbols are shown as the ticker
CRYPTO_NAMES: Dict[str, str] = {
    "BTC": "Bitcoin",
    "ETH": "Ethereum",
    "USDT": "Tether",
    "USDC": "USD Coin",
    "BNB": "BNB",
    "XRP": "XRP",
    "ADA": "Cardano",
    "SOL": "Solana",
    "DOGE": "Dogecoin",
    "MATIC": "Polygon",
    "DOT": "Polkadot",
    "AVAX": "Avalanche",
    "LINK": "Chainlink",
    "LTC": "Litecoin",
    "UNI": "Uniswap",
    "ATOM": "Cosmos",
    "ICP": "Internet Computer",
    "NEAR": "NEAR Protocol",
    "APT": "Aptos",
    "FTM": "Fantom",
    "OKB": "OKB",
    "PENGU": "Pudgy Penguins",
}

# CoinGecko identifies coins by slug rather than ticker
COINGECKO_IDS: Dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDT": "tether",
    "USDC": "usd-coin",
    "BNB": "binancecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "SOL": "solana",
    "DOGE": "dogecoin",
    "MATIC": "matic-network",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "LINK": "chainlink",
    "LTC": "litecoin",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "ICP": "internet-computer",
    "NEAR": "near",
    "APT": "aptos",
    "FTM": "fantom",
    "OKB": "okb",
    "PENGU": "pudgy-penguins",
}


def display_name(symbol: str) -> str:
    return CRYPTO_NAMES.get(symbol.upper(), symbol.upper())


def coingecko_id(symbol: str) -> str:
    return COINGECKO_IDS.get(symbol.upper(), symbol.lower())


def to_float(value: Any, provider: str, field: str, default: Optional[float] = None) -> float:
    """Parse a provider number (often sent as a string) into a finite float.

    Missing values use ``default`` when given; anything unparsable or
    non-finite raises ProviderParseError.
    """
    if value is None or value == "":
        if default is not None:
            return default
        raise ProviderParseError(f"Missing field '{field}'", provider)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ProviderParseError(f"Field '{field}' is not numeric: {value!r}", provider) from None
    if not math.isfinite(number):
        raise ProviderParseError(f"Field '{field}' is not finite", provider)
    return number


def parse_timestamp(value: Any) -> datetime:
    """Accept ISO strings or epoch milliseconds, defaulting to now (UTC)"""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return datetime.now(timezone.utc)
