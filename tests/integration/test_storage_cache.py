"""Integration tests for cache backends and the result cache."""

from __future__ import annotations

import pytest
import redis

from core.config import RuntimeSettings
from core.models import CachedPage, FetchMode, IdentityTier
from storage.cache import (
    InMemoryCacheBackend,
    NullCacheBackend,
    RedisCacheBackend,
    build_cache_backend,
)
from storage.results import ResultCache


class SteppingClock:
    def __init__(self) -> None:
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


class FailingRedis:
    """Stands in for a redis client whose server is unreachable."""

    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def set(self, key, value, ex=None):
        raise redis.ConnectionError("connection refused")


class DictRedis:
    """Records set() calls the way redis-py receives them."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex


def _page(key: str = "scrape:https://example.com/a:standard") -> CachedPage:
    return CachedPage(
        cache_key=key,
        url="https://example.com/a",
        title="Title",
        meta_description="Description",
        content_snippet="<html>body</html>",
        mode=FetchMode.STANDARD,
    )


@pytest.mark.integration
def test_null_backend_always_misses():
    backend = NullCacheBackend()
    backend.set("k", "v", 60)
    assert backend.get("k") is None


@pytest.mark.integration
def test_memory_backend_expires_entries():
    clock = SteppingClock()
    backend = InMemoryCacheBackend(clock_fn=clock)

    backend.set("k", "v", 60)
    clock.value += 59
    assert backend.get("k") == "v"

    clock.value += 1
    assert backend.get("k") is None


@pytest.mark.integration
def test_memory_backend_last_write_wins():
    backend = InMemoryCacheBackend()
    backend.set("k", "first", 60)
    backend.set("k", "second", 60)
    assert backend.get("k") == "second"

    backend.clear()
    assert backend.get("k") is None


@pytest.mark.integration
def test_redis_backend_degrades_to_miss_on_errors(events):
    backend = RedisCacheBackend(FailingRedis(), event_hook=events)

    assert backend.get("k") is None
    backend.set("k", "v", 60)

    errors = events.of_type("cache_backend_error")
    assert [error["operation"] for error in errors] == ["get", "set"]
    assert errors[0]["error_type"] == "ConnectionError"


@pytest.mark.integration
def test_redis_backend_passes_ttl():
    client = DictRedis()
    backend = RedisCacheBackend(client)

    backend.set("k", "v", 3600)

    assert backend.get("k") == "v"
    assert client.ttls["k"] == 3600


@pytest.mark.integration
@pytest.mark.parametrize(
    ("settings", "expected_type"),
    [
        (RuntimeSettings(cache_mode="none"), NullCacheBackend),
        (RuntimeSettings(cache_mode="memory"), InMemoryCacheBackend),
        (RuntimeSettings(cache_mode="redis", redis_url="redis://localhost:6379/0"), RedisCacheBackend),
        (RuntimeSettings(cache_mode="redis"), NullCacheBackend),
    ],
)
def test_build_cache_backend_selects_by_mode(settings, expected_type):
    assert isinstance(build_cache_backend(settings), expected_type)


@pytest.mark.integration
def test_result_cache_keys_by_identity():
    url = "https://example.com/a"
    assert ResultCache.cache_key(url, IdentityTier.POLITE) == "scrape:https://example.com/a:standard"
    assert ResultCache.cache_key(url, IdentityTier.STEALTH) == "scrape:https://example.com/a:stealth"


@pytest.mark.integration
def test_result_cache_round_trip_uses_ttl():
    client = DictRedis()
    results = ResultCache(backend=RedisCacheBackend(client), ttl_seconds=120)
    page = _page()

    results.put(page.cache_key, page)

    assert results.get(page.cache_key) == page
    assert client.ttls[page.cache_key] == 120


@pytest.mark.integration
def test_result_cache_treats_corrupt_entry_as_miss(events):
    backend = InMemoryCacheBackend()
    backend.set("scrape:bad:standard", "{not json", 60)
    results = ResultCache(backend=backend, event_hook=events)

    assert results.get("scrape:bad:standard") is None
    assert len(events.of_type("result_cache_error")) == 1


@pytest.mark.integration
def test_result_cache_survives_backend_outage(events):
    results = ResultCache(backend=RedisCacheBackend(FailingRedis(), event_hook=events))
    page = _page()

    results.put(page.cache_key, page)

    assert results.get(page.cache_key) is None
