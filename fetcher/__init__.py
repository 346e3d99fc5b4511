"""Fetcher subsystem with robots, identity tiers, and escalation."""

from fetcher.escalation import EscalationController, EscalationTier
from fetcher.http import FetchClient, FetchResponse
from fetcher.identity import POLITE_PROFILE, STEALTH_PROFILE, IdentityProfile, profile_for
from fetcher.logging import emit_fetch_log, fetcher_event_hook
from fetcher.robots import RobotsPolicyCache, origin_of

__all__ = [
    "EscalationController",
    "EscalationTier",
    "FetchClient",
    "FetchResponse",
    "IdentityProfile",
    "POLITE_PROFILE",
    "STEALTH_PROFILE",
    "profile_for",
    "fetcher_event_hook",
    "emit_fetch_log",
    "RobotsPolicyCache",
    "origin_of",
]
