"""Calling layer: input validation, fetch, and verification wiring."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel

from core.config import FetchConfig, RuntimeSettings, VerificationConfig
from core.errors import InvalidInput
from core.models import FetchRequest, FetchResult, VerificationResult
from core.structured_logging import EventHook
from fetcher.escalation import EscalationController
from fetcher.http import FetchClient
from fetcher.robots import RobotsPolicyCache
from parser.html import ContentExtractor, truncate_for_analysis
from storage.cache import CacheBackend, build_cache_backend
from storage.results import ResultCache
from verification.model import ExternalModelAdapter


class UrlAnalysis(BaseModel):
    """A fetched page together with its credibility report."""

    page: FetchResult
    verification: VerificationResult

    def to_payload(self) -> dict[str, Any]:
        payload = self.page.model_dump(mode="json")
        payload["verification"] = self.verification.to_payload()
        return payload


def validate_url(url: str | None) -> str:
    """Require an absolute http(s) URL."""
    if not url or not url.strip():
        raise InvalidInput("URL is required")
    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in FetchConfig.ALLOWED_PROTOCOLS or not parsed.netloc:
        raise InvalidInput("Invalid URL format")
    return candidate


class TruthLensService:
    """
    Fetch-then-verify entry points.

    Owns the analysis bound: fetched documents are stored up to 50,000
    characters but only the first 5,000 are handed to verification.
    """

    def __init__(
        self,
        controller: EscalationController,
        adapter: ExternalModelAdapter,
        analysis_max_chars: int = VerificationConfig.ANALYSIS_MAX_CHARS,
        min_paragraph_chars: int = VerificationConfig.MIN_PARAGRAPH_CHARS,
    ) -> None:
        self.controller = controller
        self.adapter = adapter
        self.analysis_max_chars = analysis_max_chars
        self.min_paragraph_chars = min_paragraph_chars

    @classmethod
    def from_settings(
        cls,
        settings: RuntimeSettings,
        backend: CacheBackend | None = None,
        event_hook: EventHook | None = None,
    ) -> "TruthLensService":
        """Wire the pipeline from runtime settings; one cache backend serves both caches."""
        cache_backend = backend or build_cache_backend(settings, event_hook=event_hook)
        controller = EscalationController(
            robots=RobotsPolicyCache(backend=cache_backend, event_hook=event_hook),
            client=FetchClient(),
            results=ResultCache(backend=cache_backend, event_hook=event_hook),
            extractor=ContentExtractor(),
            event_hook=event_hook,
        )
        adapter = ExternalModelAdapter.from_settings(settings, event_hook=event_hook)
        return cls(controller=controller, adapter=adapter)

    def fetch(self, url: str, ignore_robots: bool = False, escalate: bool = True) -> FetchResult:
        request = FetchRequest(url=validate_url(url), ignore_robots=ignore_robots)
        return self.controller.fetch(request.url, ignore_robots=request.ignore_robots, escalate=escalate)

    def analyze_url(self, url: str, ignore_robots: bool = False) -> UrlAnalysis:
        """Fetch a page (with escalation) and verify its first 5,000 characters."""
        page = self.fetch(url, ignore_robots=ignore_robots)
        verification = self.adapter.verify_content(
            page.url,
            page.title,
            truncate_for_analysis(page.content, self.analysis_max_chars),
        )
        return UrlAnalysis(page=page, verification=verification)

    def verify_paragraph(self, text: str | None) -> VerificationResult:
        if not text or len(text) < self.min_paragraph_chars:
            raise InvalidInput("Please provide a paragraph to verify.")
        return self.adapter.verify_text(text)
