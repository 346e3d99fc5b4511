"""Cache-aside store for completed fetch results."""

from __future__ import annotations

from pydantic import ValidationError

from core.config import FetchConfig
from core.models import CachedPage, IdentityTier
from core.structured_logging import EventHook, resolve_event_hook
from storage.cache import CacheBackend, NullCacheBackend


class ResultCache:
    """
    Read-through lookups and write-after-success stores for fetched pages.

    Entries are keyed by URL + identity tier, so Standard and Relaxed fetches
    share one entry and Stealth fetches have their own.
    """

    def __init__(
        self,
        backend: CacheBackend | None = None,
        ttl_seconds: int = FetchConfig.RESULT_CACHE_TTL_SECONDS,
        event_hook: EventHook | None = None,
    ) -> None:
        self.backend = backend or NullCacheBackend()
        self.ttl_seconds = ttl_seconds
        self._event_hook = resolve_event_hook(event_hook)

    @staticmethod
    def cache_key(url: str, identity: IdentityTier) -> str:
        mode = "stealth" if identity is IdentityTier.STEALTH else "standard"
        return f"scrape:{url}:{mode}"

    def get(self, key: str) -> CachedPage | None:
        """Return the cached page, treating undecodable entries as misses."""
        raw = self.backend.get(key)
        if raw is None:
            return None
        try:
            return CachedPage.model_validate_json(raw)
        except ValidationError as exc:
            self._event_hook(
                "result_cache_error",
                {
                    "level": "warning",
                    "key": key,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return None

    def put(self, key: str, page: CachedPage, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        self.backend.set(key, page.model_dump_json(), ttl)
