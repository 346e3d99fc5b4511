"""
Core Pydantic models for the TruthLens verifier.

Design principles:
- Fetch results and verification results are explicitly typed and validated
- Verdict and risk are never chosen independently of the score
- Cached payloads serialize deterministically (JSON) for any cache backend
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from core.config import FetchConfig


# ============================================================================
# Enums
# ============================================================================

class IdentityTier(str, Enum):
    """Which identity profile a fetch presents to the host."""
    POLITE = "polite"  # Declared bot, minimal headers
    STEALTH = "stealth"  # Browser-like, last resort


class FetchMode(str, Enum):
    """Reported fetch mode for a completed result."""
    STANDARD = "Standard"
    STEALTH = "Stealth"


class FetchErrorCode(str, Enum):
    """Why did a fetch attempt fail?"""
    TIMEOUT = "TIMEOUT"
    FETCH_ERROR = "FETCH_ERROR"  # Network error
    HTTP_ERROR = "HTTP_ERROR"  # Non-2xx from host
    BLOCKED_BY_ROBOTS = "BLOCKED_BY_ROBOTS"
    BODY_TOO_LARGE = "BODY_TOO_LARGE"
    SECURITY_BLOCKED = "SECURITY_BLOCKED"  # Disallowed protocol


class Verdict(str, Enum):
    """Qualitative credibility verdict."""
    VERIFIED = "Verified"
    SUSPICIOUS = "Suspicious"
    HIGHLY_UNRELIABLE = "Highly Unreliable"


class HallucinationRisk(str, Enum):
    """Estimated likelihood that a text contains fabricated claims."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# ============================================================================
# Score -> verdict mapping
# ============================================================================

VERIFIED_MIN_SCORE = 75
SUSPICIOUS_MIN_SCORE = 45


def clamp_score(value: float) -> int:
    """Round and clamp a raw score into [0, 100]."""
    return max(0, min(100, int(round(value))))


def classify_score(score: int) -> tuple[Verdict, HallucinationRisk]:
    """Map a final score to (verdict, risk). Thresholds are inclusive lower bounds."""
    if score >= VERIFIED_MIN_SCORE:
        return Verdict.VERIFIED, HallucinationRisk.LOW
    if score >= SUSPICIOUS_MIN_SCORE:
        return Verdict.SUSPICIOUS, HallucinationRisk.MEDIUM
    return Verdict.HIGHLY_UNRELIABLE, HallucinationRisk.HIGH


# ============================================================================
# Fetch pipeline
# ============================================================================

class FetchRequest(BaseModel):
    """One caller request to the fetch pipeline. Never persisted."""
    url: str
    ignore_robots: bool = False
    identity_tier: IdentityTier = IdentityTier.POLITE


class RobotsPolicy(BaseModel):
    """
    Crawl rules for one origin.

    An empty rule_text means no rules were obtained (missing file, non-200,
    network failure) and is treated as allow-all.
    """
    origin: str
    rule_text: str = ""
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    ttl_seconds: int = FetchConfig.ROBOTS_CACHE_TTL_SECONDS

    @property
    def robots_url(self) -> str:
        return f"{self.origin}/robots.txt"

    def is_expired(self, now: datetime) -> bool:
        """True once the policy has outlived its TTL."""
        return (now - self.fetched_at).total_seconds() >= self.ttl_seconds


class CachedPage(BaseModel):
    """
    A completed fetch held by the result cache.

    Keyed by URL + identity tier; overwritten on each successful fetch.
    """
    cache_key: str
    url: str
    title: str
    meta_description: str = ""
    content_snippet: str = ""
    mode: FetchMode = FetchMode.STANDARD
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    ttl_seconds: int = FetchConfig.RESULT_CACHE_TTL_SECONDS

    @field_validator("content_snippet")
    @classmethod
    def validate_snippet_length(cls, v: str) -> str:
        """Enforce the storage bound on the raw document."""
        if len(v) > FetchConfig.SNIPPET_MAX_CHARS:
            return v[: FetchConfig.SNIPPET_MAX_CHARS]
        return v


class FetchResult(BaseModel):
    """What the fetch pipeline hands back to its caller."""
    url: str
    title: str
    meta_description: str = ""
    content: str = ""
    mode: FetchMode = FetchMode.STANDARD
    robots_overridden: bool = False  # Tier1 was denied by robots and Tier2+ served the page
    from_cache: bool = False

    @classmethod
    def from_cached_page(
        cls,
        page: CachedPage,
        robots_overridden: bool = False,
        from_cache: bool = False,
    ) -> "FetchResult":
        return cls(
            url=page.url,
            title=page.title,
            meta_description=page.meta_description,
            content=page.content_snippet,
            mode=page.mode,
            robots_overridden=robots_overridden,
            from_cache=from_cache,
        )


class FetchLog(BaseModel):
    """
    Log entry for a single HTTP attempt.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    url: str

    status_code: Optional[int] = None  # HTTP status
    latency_ms: Optional[int] = None  # Time to response
    bytes_received: Optional[int] = None

    error_code: Optional[FetchErrorCode] = None
    identity: Optional[IdentityTier] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    request_id: Optional[str] = None


# ============================================================================
# Verification
# ============================================================================

class VerificationResult(BaseModel):
    """
    Credibility report for one piece of content.

    Invariants enforced on construction:
    - credibility_score is rounded and clamped to [0, 100]
    - verdict and hallucination_risk are derived from the score; any value
      passed in for them is ignored
    - detected_issues keeps at most 5 entries, and an empty list becomes None
    - suggested_correction is dropped unless score < 75 and issues exist

    JSON form uses camelCase keys (credibilityScore, hallucinationRisk, ...).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    credibility_score: int
    verdict: Verdict = Field(default=Verdict.SUSPICIOUS, validate_default=True)
    reasoning: str = ""
    hallucination_risk: HallucinationRisk = Field(default=HallucinationRisk.MEDIUM, validate_default=True)
    detected_issues: Optional[tuple[str, ...]] = None
    suggested_correction: Optional[str] = None

    @field_validator("credibility_score", mode="before")
    @classmethod
    def validate_score_range(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return clamp_score(v)
        return v

    @field_validator("verdict", mode="before")
    @classmethod
    def derive_verdict(cls, v: Any, info: ValidationInfo) -> Any:
        score = info.data.get("credibility_score")
        if score is None:
            return v
        return classify_score(score)[0]

    @field_validator("hallucination_risk", mode="before")
    @classmethod
    def derive_risk(cls, v: Any, info: ValidationInfo) -> Any:
        score = info.data.get("credibility_score")
        if score is None:
            return v
        return classify_score(score)[1]

    @field_validator("detected_issues", mode="before")
    @classmethod
    def validate_issue_count(cls, v: Any) -> Any:
        if v is None:
            return None
        issues = tuple(v)[:5]
        return issues or None

    @field_validator("suggested_correction")
    @classmethod
    def validate_correction_applies(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        score = info.data.get("credibility_score")
        if v is None or score is None:
            return v
        if score >= VERIFIED_MIN_SCORE or not info.data.get("detected_issues"):
            return None
        return v

    def to_payload(self) -> dict[str, Any]:
        """camelCase JSON-safe dict with absent optional fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
