from .base import MarketDataProvider
from .binance import BinanceProvider
from .coingecko import CoinGeckoProvider
from .coinmarketcap import CoinMarketCapProvider

__all__ = [
    "MarketDataProvider",
    "BinanceProvider",
    "CoinGeckoProvider",
    "CoinMarketCapProvider",
]
