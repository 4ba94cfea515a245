"""Shared router dependencies."""

from datetime import timedelta
from typing import Optional

from ..config import settings
from ..pricing import InMemoryPriceCache, PriceFetcher

# One process-local cache shared by every request
price_cache = InMemoryPriceCache(ttl=timedelta(days=settings.PRICE_CACHE_TTL_DAYS))


def get_price_fetcher_factory():
    """Returns a callable zip_code → PriceFetcher. Overridden in tests."""
    def make(zip_code: Optional[str] = None) -> PriceFetcher:
        return PriceFetcher(zip_code=zip_code, cache=price_cache)
    return make
