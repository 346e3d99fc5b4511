"""Identity profiles presented to target hosts."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.config import FetchConfig
from core.models import FetchMode, IdentityTier


@dataclass(frozen=True, slots=True)
class IdentityProfile:
    """User agent plus header set for one identity tier."""

    tier: IdentityTier
    user_agent: str
    extra_headers: dict[str, str] = field(default_factory=dict)

    @property
    def mode(self) -> FetchMode:
        return FetchMode.STEALTH if self.tier is IdentityTier.STEALTH else FetchMode.STANDARD

    def headers(self) -> dict[str, str]:
        """Request headers for this identity."""
        headers = {"User-Agent": self.user_agent}
        headers.update(self.extra_headers)
        return headers


POLITE_PROFILE = IdentityProfile(
    tier=IdentityTier.POLITE,
    user_agent=FetchConfig.POLITE_USER_AGENT,
)

STEALTH_PROFILE = IdentityProfile(
    tier=IdentityTier.STEALTH,
    user_agent=FetchConfig.STEALTH_USER_AGENT,
    extra_headers=dict(FetchConfig.STEALTH_HEADERS),
)


def profile_for(tier: IdentityTier) -> IdentityProfile:
    if tier is IdentityTier.STEALTH:
        return STEALTH_PROFILE
    return POLITE_PROFILE
