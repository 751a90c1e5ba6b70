"""
In-memory Forecast Cache Repository

This module implements the forecast cache repository as a process-local,
TTL-bounded mapping. Expired entries are dropped lazily and the oldest entry
is evicted when the capacity is reached.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

import structlog

from src.domain.entities.result import ForecastResult
from src.domain.repositories.forecast_cache_repository import IForecastCacheRepository

logger = structlog.get_logger(__name__)


class InMemoryForecastCacheRepository(IForecastCacheRepository):
    """Forecast cache kept in process memory."""

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_entries: int = 256,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Validity window of an entry
            max_entries: Capacity before the oldest entry is evicted
            clock: Monotonic time source, injectable for tests
        """
        self.ttl_seconds = float(ttl_seconds)
        self.max_entries = max(1, int(max_entries))
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, Tuple[float, ForecastResult]]" = OrderedDict()

    async def get(self, fingerprint: str) -> Optional[ForecastResult]:
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        stored_at, result = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[fingerprint]
            logger.debug("forecast.cache.expired", fingerprint=fingerprint)
            return None
        return result

    async def save(self, fingerprint: str, result: ForecastResult) -> None:
        self._entries.pop(fingerprint, None)
        self._entries[fingerprint] = (self._clock(), result)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("forecast.cache.evicted", fingerprint=evicted)

    async def clear(self) -> None:
        self._entries.clear()

    async def count(self) -> int:
        now = self._clock()
        expired = [
            key
            for key, (stored_at, _) in self._entries.items()
            if now - stored_at >= self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]
        return len(self._entries)
