"""TTL cache for analysis results, keyed by the normalized request URL."""

from __future__ import annotations

import time
from typing import Callable

from cachetools import TTLCache
from loguru import logger

from .models import AnalysisResult

CACHE_TTL_SECONDS = 3600
CACHE_MAX_ENTRIES = 1000


def cache_key(url: str) -> str:
    return url.strip().lower()


class AnalysisCache:
    def __init__(
        self,
        ttl: float = CACHE_TTL_SECONDS,
        maxsize: int = CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=clock)

    def get(self, url: str) -> AnalysisResult | None:
        self._entries.expire()
        result = self._entries.get(cache_key(url))
        if result is None:
            logger.debug("Cache miss for {}", cache_key(url))
        return result

    def set(self, url: str, result: AnalysisResult) -> None:
        self._entries[cache_key(url)] = result

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
