"""Heuristic verification engine and external-model adapter."""

from verification.engine import VerificationEngine
from verification.model import (
    CallFailed,
    ExternalModelAdapter,
    GeminiClient,
    GenerationReply,
    GenerativeClient,
    ModelOk,
    ModelResponse,
    ParseFailed,
    SafetyBlocked,
    decode_model_reply,
)
from verification.rules import InstitutionRule, RuleSet, default_rules

__all__ = [
    "VerificationEngine",
    "CallFailed",
    "ExternalModelAdapter",
    "GeminiClient",
    "GenerationReply",
    "GenerativeClient",
    "ModelOk",
    "ModelResponse",
    "ParseFailed",
    "SafetyBlocked",
    "decode_model_reply",
    "InstitutionRule",
    "RuleSet",
    "default_rules",
]
