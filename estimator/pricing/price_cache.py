"""
Price cache: best-effort hints keyed by normalised material name + unit.

Reads and writes are non-transactional. A stale or missing entry only
means the item is priced again further down the chain.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Dict, NamedTuple, Optional, Protocol, Tuple

from ..schemas import Confidence

logger = logging.getLogger(__name__)


class CachedPrice(NamedTuple):
    unit_price: float
    confidence: Confidence
    notes: Optional[str] = None


def cache_key(name: str, unit: str) -> str:
    """'  Cedar  Decking ', 'SqFt' → 'cedar decking|sqft'"""
    return "%s|%s" % (
        re.sub(r"\s+", " ", name.strip().lower()),
        unit.strip().lower(),
    )


class PriceCache(Protocol):
    def get(self, name: str, unit: str) -> Optional[CachedPrice]:
        ...

    def set(self, name: str, unit: str, price: CachedPrice) -> None:
        ...


class InMemoryPriceCache:
    """Process-local cache with a fixed time-to-live per entry."""

    def __init__(self, ttl: timedelta = timedelta(days=7), clock=datetime.now):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[CachedPrice, datetime]] = {}

    def get(self, name: str, unit: str) -> Optional[CachedPrice]:
        key = cache_key(name, unit)
        entry = self._entries.get(key)
        if entry is None:
            return None
        price, stored_at = entry
        if self._clock() - stored_at > self.ttl:
            del self._entries[key]
            logger.debug("Price cache entry expired: %s", key)
            return None
        return price

    def set(self, name: str, unit: str, price: CachedPrice) -> None:
        now = self._clock()
        self._prune(now)
        self._entries[cache_key(name, unit)] = (price, now)

    def _prune(self, now: datetime):
        expired = [key for key, (_, stored_at) in self._entries.items() if now - stored_at > self.ttl]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Pruned %d expired price cache entries", len(expired))

    def __len__(self) -> int:
        return len(self._entries)
