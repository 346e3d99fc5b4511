"""Key/value cache backends shared by the robots cache and the result cache."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import redis

from core.config import RuntimeSettings
from core.structured_logging import EventHook, resolve_event_hook


class CacheBackend(ABC):
    """
    String key/value store with per-key TTL.

    Implementations must never raise from get/set: an unavailable backend
    behaves as an always-miss, write-discarding cache.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None on miss or backend failure."""
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value; a failure is a silent no-op."""
        pass


class NullCacheBackend(CacheBackend):
    """Used when no cache is configured. Every lookup misses."""

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        return None


class InMemoryCacheBackend(CacheBackend):
    """Process-local TTL cache. Last write wins per key."""

    def __init__(self, clock_fn: Callable[[], float] | None = None) -> None:
        self._clock = clock_fn or time.monotonic
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()


class RedisCacheBackend(CacheBackend):
    """Redis-backed cache; connection errors degrade to misses."""

    def __init__(self, client: redis.Redis, event_hook: EventHook | None = None) -> None:
        self._client = client
        self._event_hook = resolve_event_hook(event_hook)

    @classmethod
    def from_url(cls, url: str, event_hook: EventHook | None = None) -> "RedisCacheBackend":
        """Build a lazily connecting client; nothing is contacted until first use."""
        client = redis.Redis.from_url(url, decode_responses=True, socket_timeout=2.0)
        return cls(client, event_hook=event_hook)

    def _report(self, operation: str, key: str, exc: Exception) -> None:
        self._event_hook(
            "cache_backend_error",
            {
                "level": "warning",
                "backend": "redis",
                "operation": operation,
                "key": key,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(key)
        except redis.RedisError as exc:
            self._report("get", key, exc)
            return None
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            self._report("set", key, exc)


def build_cache_backend(settings: RuntimeSettings, event_hook: EventHook | None = None) -> CacheBackend:
    """Select the backend named by settings.cache_mode."""
    if settings.cache_mode == "redis" and settings.redis_url:
        return RedisCacheBackend.from_url(settings.redis_url, event_hook=event_hook)
    if settings.cache_mode == "memory":
        return InMemoryCacheBackend()
    return NullCacheBackend()
