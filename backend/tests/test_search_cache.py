from __future__ import annotations

import pytest

from career_search.schemas import MarketInsights, SearchMetadata, SearchResponse
from career_search.services.search_cache import (
    CachedSearch,
    SearchResultCache,
    build_search_cache,
    cache_key,
)
from tests.fakes import FakeClock, make_settings


def _entry(total: int = 0) -> CachedSearch:
    response = SearchResponse(
        market_insights=MarketInsights.neutral(),
        search_metadata=SearchMetadata(
            total_results=total, search_time=10, api_version="2.0.0"
        ),
    )
    return CachedSearch(response=response)


def test_cache_key_trims_and_lowercases() -> None:
    assert cache_key(" Software Engineer ") == cache_key("software engineer")
    assert cache_key("\tData  Scientist\n") == "data  scientist"


def test_get_returns_value_for_equivalent_query() -> None:
    cache = SearchResultCache(timer=FakeClock())
    entry = _entry()
    cache.set("Product Manager", entry)

    assert cache.get("  product manager ") is entry
    assert "PRODUCT MANAGER" in cache


def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = SearchResultCache(ttl_seconds=3600, timer=clock)
    cache.set("ux designer", _entry())

    clock.advance(3599)
    assert cache.get("ux designer") is not None

    clock.advance(2)
    assert cache.get("ux designer") is None
    assert len(cache) == 0


def test_reads_do_not_extend_expiry() -> None:
    clock = FakeClock()
    cache = SearchResultCache(ttl_seconds=100, timer=clock)
    cache.set("nurse", _entry())
    for _ in range(3):
        clock.advance(40)
        cache.get("nurse")
    assert cache.get("nurse") is None


def test_capacity_evicts_least_recently_used() -> None:
    cache = SearchResultCache(max_entries=3, timer=FakeClock())
    cache.set("a", _entry())
    cache.set("b", _entry())
    cache.set("c", _entry())

    assert cache.get("a") is not None

    cache.set("d", _entry())

    assert "b" not in cache
    assert "a" in cache
    assert "c" in cache
    assert "d" in cache
    assert len(cache) == 3


def test_default_capacity_holds_one_hundred_queries() -> None:
    cache = SearchResultCache(timer=FakeClock())
    for index in range(101):
        cache.set(f"query {index}", _entry(index))

    assert len(cache) == 100
    assert cache.get("query 0") is None
    assert cache.get("query 100") is not None


def test_cache_failures_degrade_to_miss(monkeypatch: pytest.MonkeyPatch) -> None:
    cache = SearchResultCache(timer=FakeClock())

    def explode(*args: object, **kwargs: object) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(cache._entries, "expire", explode)
    assert cache.get("anything") is None

    monkeypatch.setattr(type(cache._entries), "__setitem__", explode)
    cache.set("anything", _entry())


def test_build_search_cache_uses_settings() -> None:
    cache = build_search_cache(
        make_settings(search_cache_max_entries=5, search_cache_ttl_seconds=60)
    )
    assert cache.max_entries == 5
    assert cache.ttl_seconds == 60
