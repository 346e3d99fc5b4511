"""Storage module: cache backends and the fetch result cache."""

from storage.cache import (
    CacheBackend,
    InMemoryCacheBackend,
    NullCacheBackend,
    RedisCacheBackend,
    build_cache_backend,
)
from storage.results import ResultCache

__all__ = [
    "CacheBackend",
    "InMemoryCacheBackend",
    "NullCacheBackend",
    "RedisCacheBackend",
    "build_cache_backend",
    "ResultCache",
]
