"""TruthLens verifier: polite fetching and credibility scoring."""

from truthlens.service import TruthLensService, UrlAnalysis, validate_url

__all__ = ["TruthLensService", "UrlAnalysis", "validate_url"]
