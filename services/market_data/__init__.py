"""
Market data acquisition: provider adapters, synthetic fallback and the client tying them together
"""

from .client import MarketDataClient
from .synthetic import SyntheticDataGenerator

__all__ = ["MarketDataClient", "SyntheticDataGenerator"]
