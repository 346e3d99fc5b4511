"""Robots.txt policy cache with fail-open fetch strategy."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable
from urllib import robotparser
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from core.config import FetchConfig
from core.errors import RobotsFetchFailure
from core.models import RobotsPolicy
from core.structured_logging import EventHook
from fetcher.logging import fetcher_event_hook
from storage.cache import CacheBackend, NullCacheBackend


def origin_of(url: str) -> str:
    """Return scheme://host[:port] for a URL, or "" when the host is missing."""
    parsed = urlparse(url)
    if not parsed.netloc:
        return ""
    scheme = (parsed.scheme or "https").lower()
    return f"{scheme}://{parsed.netloc.lower()}"


class RobotsPolicyCache:
    """
    Resolve per-origin crawl rules with a TTL cache.

    Failures never block crawling: a missing file, a non-200 status or a
    network error all produce an empty rule set, which is cached for the full
    TTL so a failing host is not re-queried on every request.
    """

    def __init__(
        self,
        backend: CacheBackend | None = None,
        user_agent: str = FetchConfig.POLITE_USER_AGENT,
        timeout_seconds: float = FetchConfig.ROBOTS_TIMEOUT_SECONDS,
        ttl_seconds: int = FetchConfig.ROBOTS_CACHE_TTL_SECONDS,
        session: requests.Session | None = None,
        clock_fn: Callable[[], datetime] | None = None,
        event_hook: EventHook | None = None,
    ) -> None:
        """Initialize robots cache, fetch identity, and request-time policy defaults."""
        self.backend = backend or NullCacheBackend()
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.ttl_seconds = ttl_seconds
        self._session = session or requests.Session()
        self._clock = clock_fn or (lambda: datetime.now(UTC))
        self._event_hook = event_hook or fetcher_event_hook

    @staticmethod
    def cache_key(origin: str) -> str:
        return f"robots:{origin}"

    def get_policy(self, origin: str) -> RobotsPolicy:
        """Return cached rules for an origin, fetching robots.txt on miss."""
        cached = self._read_cached(origin)
        if cached is not None:
            return cached

        now = self._clock()
        try:
            rule_text = self._download(f"{origin}/robots.txt")
        except RobotsFetchFailure as exc:
            self._event_hook(
                "robots_warning",
                {
                    "level": "warning",
                    "origin": origin,
                    "robots_url": f"{origin}/robots.txt",
                    "message": f"{exc.message}; allowing",
                },
            )
            rule_text = ""

        policy = RobotsPolicy(
            origin=origin,
            rule_text=rule_text,
            fetched_at=now,
            ttl_seconds=self.ttl_seconds,
        )
        self.backend.set(self.cache_key(origin), policy.model_dump_json(), self.ttl_seconds)
        return policy

    def policy_for_url(self, url: str) -> RobotsPolicy:
        return self.get_policy(origin_of(url))

    @staticmethod
    def is_allowed(url: str, policy: RobotsPolicy, user_agent: str) -> bool:
        """Evaluate robots directives for the URL's path."""
        if not policy.rule_text.strip():
            return True
        parser = robotparser.RobotFileParser()
        parser.set_url(policy.robots_url)
        parser.parse(policy.rule_text.splitlines())
        return parser.can_fetch(user_agent, url)

    def _read_cached(self, origin: str) -> RobotsPolicy | None:
        raw = self.backend.get(self.cache_key(origin))
        if raw is None:
            return None
        try:
            policy = RobotsPolicy.model_validate_json(raw)
        except ValidationError:
            return None
        if policy.is_expired(self._clock()):
            return None
        self._event_hook("robots_cache_hit", {"level": "debug", "origin": origin})
        return policy

    def _download(self, robots_url: str) -> str:
        """Fetch robots.txt text; anything but a 200 raises RobotsFetchFailure."""
        try:
            response = self._session.get(
                robots_url,
                headers={"User-Agent": self.user_agent},
                allow_redirects=True,
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise RobotsFetchFailure(f"robots.txt timeout for {robots_url}") from exc
        except requests.RequestException as exc:
            raise RobotsFetchFailure(f"robots.txt request error for {robots_url}") from exc

        if response.status_code != 200:
            raise RobotsFetchFailure(
                f"robots.txt returned {response.status_code} for {robots_url}",
                response.status_code,
            )
        return response.text
