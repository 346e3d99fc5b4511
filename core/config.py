"""
Default configuration for the TruthLens verifier.

Fetch and verification limits are class-level constants, validated once at
import time. Anything that differs between deployments (model credentials,
cache backend) is read from the environment into RuntimeSettings.

Design: the fetch pipeline defaults to "polite first". Stealth identity is a
last resort and is never selected up front.
"""

from __future__ import annotations

import os
from typing import Optional, Set

from pydantic import BaseModel, Field


class FetchConfig:
    """
    Fetch-pipeline limits and identities.

    Robots and page timeouts are independent; there is no cross-tier budget.
    """

    # ========================================================================
    # Identities
    # ========================================================================

    POLITE_USER_AGENT: str = "TruthLensAI-Bot/1.0 (+http://truthlens.ai/bot)"
    """Declared bot identity used for robots.txt and Tier1/Tier2 fetches."""

    STEALTH_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    """Browser-like identity used only by Tier3."""

    STEALTH_HEADERS: dict[str, str] = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Upgrade-Insecure-Requests": "1",
    }
    """Extra headers sent alongside STEALTH_USER_AGENT."""

    # ========================================================================
    # Network bounds
    # ========================================================================

    ALLOWED_PROTOCOLS: Set[str] = {"http", "https"}
    """Only HTTP(S) allowed."""

    ROBOTS_TIMEOUT_SECONDS: float = 5.0
    """Timeout for a single robots.txt fetch."""

    FETCH_TIMEOUT_SECONDS: float = 15.0
    """Timeout for a single page fetch (per tier)."""

    MAX_BODY_BYTES: int = 5_000_000
    """Byte ceiling while streaming a page body."""

    # ========================================================================
    # Cache TTLs
    # ========================================================================

    ROBOTS_CACHE_TTL_SECONDS: int = 24 * 3600
    """Robots rules are cached for a day, including failed lookups."""

    RESULT_CACHE_TTL_SECONDS: int = 3600
    """Completed fetch results are cached for an hour."""

    # ========================================================================
    # Content bounds
    # ========================================================================

    SNIPPET_MAX_CHARS: int = 50_000
    """Storage bound for the raw document kept with a fetch result."""

    UNTITLED_PLACEHOLDER: str = "Untitled Analysis"
    """Title used when neither <title> nor <h1> is present."""

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration at startup.

        Raises:
            AssertionError: If any constraint is violated.
        """
        assert cls.ROBOTS_TIMEOUT_SECONDS > 0, "ROBOTS_TIMEOUT_SECONDS must be > 0"
        assert cls.FETCH_TIMEOUT_SECONDS > 0, "FETCH_TIMEOUT_SECONDS must be > 0"
        assert cls.MAX_BODY_BYTES > 0, "MAX_BODY_BYTES must be > 0"
        assert cls.ROBOTS_CACHE_TTL_SECONDS > 0, "ROBOTS_CACHE_TTL_SECONDS must be > 0"
        assert cls.RESULT_CACHE_TTL_SECONDS > 0, "RESULT_CACHE_TTL_SECONDS must be > 0"
        assert cls.SNIPPET_MAX_CHARS > 0, "SNIPPET_MAX_CHARS must be > 0"
        assert "bot" in cls.POLITE_USER_AGENT.lower(), "POLITE_USER_AGENT must declare itself as a bot"


class VerificationConfig:
    """Analysis bounds for the heuristic engine and the external model."""

    ANALYSIS_MAX_CHARS: int = 5_000
    """Text handed to verification after a fetch is cut to this length."""

    MODEL_TEXT_MAX_CHARS: int = 10_000
    """Direct text sent to the external model is cut to this length."""

    MIN_PARAGRAPH_CHARS: int = 10
    """Paragraphs shorter than this are rejected before verification."""

    DEFAULT_MODEL_NAME: str = "gemini-2.5-flash"
    """Generative model used when TRUTHLENS_MODEL is unset."""

    DEFAULT_MODEL_TIMEOUT_SECONDS: float = 30.0
    """Per-call timeout for the external model."""

    @classmethod
    def validate(cls) -> None:
        """Validate configuration at startup."""
        assert cls.ANALYSIS_MAX_CHARS > 0, "ANALYSIS_MAX_CHARS must be > 0"
        assert (
            cls.MODEL_TEXT_MAX_CHARS >= cls.ANALYSIS_MAX_CHARS
        ), "MODEL_TEXT_MAX_CHARS must be >= ANALYSIS_MAX_CHARS"
        assert cls.MIN_PARAGRAPH_CHARS > 0, "MIN_PARAGRAPH_CHARS must be > 0"
        assert cls.DEFAULT_MODEL_TIMEOUT_SECONDS > 0, "DEFAULT_MODEL_TIMEOUT_SECONDS must be > 0"


# Validate at module import time
FetchConfig.validate()
VerificationConfig.validate()


class RuntimeSettings(BaseModel):
    """Deployment settings read from the environment."""

    google_ai_api_key: Optional[str] = None
    model_name: str = VerificationConfig.DEFAULT_MODEL_NAME
    model_timeout_seconds: float = Field(default=VerificationConfig.DEFAULT_MODEL_TIMEOUT_SECONDS, gt=0)
    redis_url: Optional[str] = None
    cache_mode: str = "none"

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "RuntimeSettings":
        """
        Build settings from environment variables.

        TRUTHLENS_CACHE defaults to "redis" when REDIS_URL is set and to
        "none" otherwise.
        """
        env = os.environ if environ is None else environ
        redis_url = env.get("REDIS_URL") or None
        cache_mode = (env.get("TRUTHLENS_CACHE") or ("redis" if redis_url else "none")).strip().lower()
        if cache_mode not in {"none", "memory", "redis"}:
            raise ValueError(f"Unsupported TRUTHLENS_CACHE value: {cache_mode}")
        return cls(
            google_ai_api_key=env.get("GOOGLE_AI_API_KEY") or None,
            model_name=env.get("TRUTHLENS_MODEL") or VerificationConfig.DEFAULT_MODEL_NAME,
            model_timeout_seconds=float(
                env.get("TRUTHLENS_MODEL_TIMEOUT") or VerificationConfig.DEFAULT_MODEL_TIMEOUT_SECONDS
            ),
            redis_url=redis_url,
            cache_mode=cache_mode,
        )

    @property
    def model_enabled(self) -> bool:
        """True when an external-model credential is configured."""
        return bool(self.google_ai_api_key)
