from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from cachetools import TTLCache

from career_search.core.config import Settings, settings
from career_search.schemas import SearchResponse

_logger = structlog.get_logger(__name__)


def cache_key(query: str) -> str:
    """Return the normalized cache key for ``query``."""

    return query.strip().lower()


@dataclass(frozen=True, slots=True)
class CachedSearch:
    response: SearchResponse
    warnings: str | None = None


class SearchResultCache:
    """Process-local LRU cache whose entries expire a fixed time after insertion.

    Lookups and stores never raise: an internal failure is logged and the
    caller sees a miss.
    """

    def __init__(
        self,
        *,
        max_entries: int = 100,
        ttl_seconds: float = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: TTLCache[str, CachedSearch] = TTLCache(
            maxsize=max_entries, ttl=ttl_seconds, timer=timer
        )
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds

    def get(self, query: str) -> CachedSearch | None:
        key = cache_key(query)
        try:
            self._entries.expire()
            return self._entries.get(key)
        except Exception as exc:
            _logger.warning("search_cache.get_failed", key=key, error=str(exc))
            return None

    def set(self, query: str, value: CachedSearch) -> None:
        key = cache_key(query)
        try:
            self._entries[key] = value
        except Exception as exc:
            _logger.warning("search_cache.set_failed", key=key, error=str(exc))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)

    def __contains__(self, query: object) -> bool:
        if not isinstance(query, str):
            return False
        return cache_key(query) in self._entries


def build_search_cache(settings_obj: Settings | None = None) -> SearchResultCache:
    active = settings_obj or settings
    return SearchResultCache(
        max_entries=active.search_cache_max_entries,
        ttl_seconds=active.search_cache_ttl_seconds,
    )


__all__ = ["CachedSearch", "SearchResultCache", "build_search_cache", "cache_key"]
