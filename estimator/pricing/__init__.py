"""
Pricing stage: cache → AI market estimate → static fallback table.
"""

from .market_price_client import MarketPriceClient
from .price_cache import CachedPrice, InMemoryPriceCache, PriceCache
from .price_fetcher import PriceFetcher, overall_confidence
from .price_table import PricingTables

__all__ = [
    "CachedPrice",
    "InMemoryPriceCache",
    "MarketPriceClient",
    "PriceCache",
    "PriceFetcher",
    "PricingTables",
    "overall_confidence",
]
