"""Core module for the TruthLens verifier."""

from core.models import (
    CachedPage,
    FetchErrorCode,
    FetchLog,
    FetchMode,
    FetchRequest,
    FetchResult,
    HallucinationRisk,
    IdentityTier,
    RobotsPolicy,
    Verdict,
    VerificationResult,
    classify_score,
)
from core.config import FetchConfig, RuntimeSettings, VerificationConfig
from core.errors import (
    InvalidInput,
    ModelCallFailure,
    ModelParseFailure,
    RobotsDisallowed,
    RobotsFetchFailure,
    TruthLensError,
    UpstreamFetchError,
)

__all__ = [
    "CachedPage",
    "FetchErrorCode",
    "FetchLog",
    "FetchMode",
    "FetchRequest",
    "FetchResult",
    "HallucinationRisk",
    "IdentityTier",
    "RobotsPolicy",
    "Verdict",
    "VerificationResult",
    "classify_score",
    "FetchConfig",
    "RuntimeSettings",
    "VerificationConfig",
    "InvalidInput",
    "ModelCallFailure",
    "ModelParseFailure",
    "RobotsDisallowed",
    "RobotsFetchFailure",
    "TruthLensError",
    "UpstreamFetchError",
]
