"""Tiered fetch escalation: Standard -> Relaxed -> Stealth."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from core.errors import RobotsDisallowed, UpstreamFetchError
from core.models import CachedPage, FetchResult, IdentityTier
from core.structured_logging import EventHook
from fetcher.http import FetchClient
from fetcher.identity import IdentityProfile, profile_for
from fetcher.logging import fetcher_event_hook
from fetcher.robots import RobotsPolicyCache, origin_of
from parser.html import ContentExtractor
from storage.results import ResultCache


class EscalationTier(str, Enum):
    """One step of the fetch state machine."""

    STANDARD = "standard"  # Tier1: honor robots, polite identity
    RELAXED = "relaxed"  # Tier2: ignore robots, polite identity
    STEALTH = "stealth"  # Tier3: ignore robots, stealth identity

    @property
    def honors_robots(self) -> bool:
        return self is EscalationTier.STANDARD

    @property
    def identity(self) -> IdentityTier:
        return IdentityTier.STEALTH if self is EscalationTier.STEALTH else IdentityTier.POLITE


class EscalationController:
    """
    Orchestrate fetch attempts across tiers.

    Transitions:
    - Standard denied by robots -> Relaxed
    - Standard or Relaxed failing upstream (any status) -> Stealth
    - Stealth failing -> UpstreamFetchError flagged persistent

    Tiers run one after another, each bounded by its own timeouts. Every
    attempt checks the result cache for its identity key before any network
    call and stores the page after a successful fetch.
    """

    def __init__(
        self,
        robots: RobotsPolicyCache | None = None,
        client: FetchClient | None = None,
        results: ResultCache | None = None,
        extractor: ContentExtractor | None = None,
        event_hook: EventHook | None = None,
    ) -> None:
        self.robots = robots or RobotsPolicyCache()
        self.client = client or FetchClient()
        self.results = results or ResultCache()
        self.extractor = extractor or ContentExtractor()
        self._event_hook = event_hook or fetcher_event_hook

    def fetch(
        self,
        url: str,
        ignore_robots: bool = False,
        escalate: bool = True,
        request_id: str | None = None,
    ) -> FetchResult:
        """
        Fetch a URL, escalating through tiers on refusal.

        With escalate=False the first tier's failure is raised:
        RobotsDisallowed (403), or UpstreamFetchError without a retry notice.
        """
        request_id = request_id or str(uuid4())
        first_tier = EscalationTier.RELAXED if ignore_robots else EscalationTier.STANDARD

        try:
            return self._attempt(url, first_tier, request_id)
        except RobotsDisallowed:
            if not escalate:
                raise
            self._transition(url, EscalationTier.STANDARD, EscalationTier.RELAXED, "robots_disallowed", request_id)
            try:
                return self._attempt(url, EscalationTier.RELAXED, request_id, robots_overridden=True)
            except UpstreamFetchError as exc:
                self._transition(url, EscalationTier.RELAXED, EscalationTier.STEALTH, exc.status_code, request_id)
                return self._attempt_stealth(url, request_id, robots_overridden=True)
        except UpstreamFetchError as exc:
            if not escalate:
                raise exc.as_final() from exc
            # Transient 5xx also switches identity; this mirrors host-block handling.
            self._transition(url, first_tier, EscalationTier.STEALTH, exc.status_code, request_id)
            return self._attempt_stealth(url, request_id)

    def _attempt_stealth(self, url: str, request_id: str, robots_overridden: bool = False) -> FetchResult:
        try:
            return self._attempt(url, EscalationTier.STEALTH, request_id, robots_overridden=robots_overridden)
        except UpstreamFetchError as exc:
            self._event_hook(
                "fetch_failed",
                {
                    "level": "error",
                    "request_id": request_id,
                    "url": url,
                    "tier": EscalationTier.STEALTH.value,
                    "status_code": exc.status_code,
                    "reason": exc.reason,
                },
            )
            raise exc.as_persistent() from exc

    def _attempt(
        self,
        url: str,
        tier: EscalationTier,
        request_id: str,
        robots_overridden: bool = False,
    ) -> FetchResult:
        profile = profile_for(tier.identity)
        key = self.results.cache_key(url, profile.tier)

        cached = self.results.get(key)
        if cached is not None:
            return FetchResult.from_cached_page(cached, robots_overridden=robots_overridden, from_cache=True)

        if tier.honors_robots:
            self._check_robots(url, profile, request_id)

        response = self.client.get(url, profile, request_id=request_id)
        extracted = self.extractor.extract(response.body)
        page = CachedPage(
            cache_key=key,
            url=url,
            title=extracted.title,
            meta_description=extracted.meta_description,
            content_snippet=extracted.snippet,
            mode=profile.mode,
        )
        self.results.put(key, page)
        return FetchResult.from_cached_page(page, robots_overridden=robots_overridden)

    def _check_robots(self, url: str, profile: IdentityProfile, request_id: str) -> None:
        policy = self.robots.get_policy(origin_of(url))
        if not self.robots.is_allowed(url, policy, profile.user_agent):
            self.client.log_robots_block(url, profile, request_id=request_id)
            raise RobotsDisallowed(url)

    def _transition(
        self,
        url: str,
        from_tier: EscalationTier,
        to_tier: EscalationTier,
        cause: object,
        request_id: str,
    ) -> None:
        self._event_hook(
            "fetch_escalation",
            {
                "level": "warning",
                "request_id": request_id,
                "url": url,
                "from_tier": from_tier.value,
                "to_tier": to_tier.value,
                "cause": cause,
            },
        )
