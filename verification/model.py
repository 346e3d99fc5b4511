"""External generative-model adapter with heuristic fallback."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import google.generativeai as genai
import jsonschema
from pydantic import ValidationError

from core.config import RuntimeSettings, VerificationConfig
from core.errors import ModelCallFailure, ModelParseFailure
from core.models import VerificationResult
from core.structured_logging import EventHook, resolve_event_hook
from verification.engine import VerificationEngine


RESULT_SCHEMA_PATH = Path(__file__).resolve().parent / "verification_result.schema.json"
RESULT_SCHEMA: dict[str, Any] = json.loads(RESULT_SCHEMA_PATH.read_text(encoding="utf-8"))

_CODE_FENCE = re.compile(r"```json|```")

_REPLY_FORMAT = """Return response in EXACTLY this JSON format:
{
    "credibilityScore": number (0-100),
    "verdict": "Verified" | "Suspicious" | "Highly Unreliable",
    "reasoning": "%s",
    "hallucinationRisk": "Low" | "Medium" | "High"
}"""


# ============================================================================
# Model client
# ============================================================================

@dataclass(frozen=True, slots=True)
class GenerationReply:
    """Raw reply from a generative model. block_reason is set when the prompt was refused."""

    text: str | None = None
    block_reason: str | None = None


class GenerativeClient(ABC):
    """Minimal prompt-in, text-out interface the adapter depends on."""

    @abstractmethod
    def generate(self, prompt: str) -> GenerationReply:
        """Run one prompt. Raises ModelCallFailure on transport errors."""
        pass


class GeminiClient(GenerativeClient):
    """Google Gemini via google-generativeai."""

    def __init__(
        self,
        api_key: str,
        model_name: str = VerificationConfig.DEFAULT_MODEL_NAME,
        timeout_seconds: float = VerificationConfig.DEFAULT_MODEL_TIMEOUT_SECONDS,
    ) -> None:
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self._model = genai.GenerativeModel(model_name)

    def generate(self, prompt: str) -> GenerationReply:
        try:
            response = self._model.generate_content(
                prompt,
                request_options={"timeout": self.timeout_seconds},
            )
        except Exception as exc:
            raise ModelCallFailure(f"{self.model_name} call failed: {exc}") from exc

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback is not None else None
        if block_reason:
            return GenerationReply(block_reason=str(getattr(block_reason, "name", block_reason)))

        try:
            text = response.text
        except ValueError as exc:
            # No usable candidate, e.g. the answer itself was filtered.
            return GenerationReply(block_reason=str(exc))
        return GenerationReply(text=text)


# ============================================================================
# Tagged model responses
# ============================================================================

@dataclass(frozen=True, slots=True)
class ModelOk:
    result: VerificationResult


@dataclass(frozen=True, slots=True)
class SafetyBlocked:
    reason: str


@dataclass(frozen=True, slots=True)
class ParseFailed:
    reason: str
    raw_text: str


@dataclass(frozen=True, slots=True)
class CallFailed:
    reason: str


ModelResponse = Union[ModelOk, SafetyBlocked, ParseFailed, CallFailed]


def decode_model_reply(text: str) -> VerificationResult:
    """
    Turn reply text into a VerificationResult.

    Code fences are stripped, then the JSON must match the result schema.

    Raises:
        ModelParseFailure: If the text is not the expected JSON shape.
    """
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ModelParseFailure(f"reply is not JSON: {exc.msg}") from exc
    try:
        jsonschema.validate(data, RESULT_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ModelParseFailure(f"reply does not match schema: {exc.message}") from exc
    try:
        return VerificationResult.model_validate(data)
    except ValidationError as exc:
        raise ModelParseFailure(f"reply rejected by model validation: {exc}") from exc


def build_content_prompt(url: str, title: str, snippet: str) -> str:
    return (
        "You are TruthLens AI, a professional fact-checking system.\n"
        "Analyze the following web content snippet and provide a verification report.\n\n"
        f"URL: {url}\n"
        f"Title: {title}\n"
        f"Snippet: {snippet}\n\n"
        + _REPLY_FORMAT % "Short explanation"
    )


def build_text_prompt(text: str, max_chars: int = VerificationConfig.MODEL_TEXT_MAX_CHARS) -> str:
    return (
        "Analyze the following text for hallucinations, factual inaccuracies, or logical inconsistencies.\n"
        "Provide a credibility report.\n\n"
        f"Text: {text[:max_chars]}\n\n"
        + _REPLY_FORMAT % "Reasoning based on general knowledge"
    )


# ============================================================================
# Adapter
# ============================================================================

class ExternalModelAdapter:
    """
    Verify content with an external model, falling back to the heuristic engine.

    Without a client every call goes straight to the engine. With a client,
    any outcome other than a well-formed reply (safety block, unparseable
    text, transport failure) also goes to the engine. Public methods never
    raise.
    """

    def __init__(
        self,
        client: GenerativeClient | None = None,
        engine: VerificationEngine | None = None,
        event_hook: EventHook | None = None,
        analysis_max_chars: int = VerificationConfig.ANALYSIS_MAX_CHARS,
    ) -> None:
        self.client = client
        self.engine = engine or VerificationEngine()
        self.analysis_max_chars = analysis_max_chars
        self._event_hook = resolve_event_hook(event_hook)

    @classmethod
    def from_settings(
        cls,
        settings: RuntimeSettings,
        engine: VerificationEngine | None = None,
        event_hook: EventHook | None = None,
    ) -> "ExternalModelAdapter":
        client = None
        if settings.model_enabled:
            client = GeminiClient(
                api_key=settings.google_ai_api_key or "",
                model_name=settings.model_name,
                timeout_seconds=settings.model_timeout_seconds,
            )
        return cls(client=client, engine=engine, event_hook=event_hook)

    def verify_content(self, url: str, title: str, snippet: str) -> VerificationResult:
        if self.client is None:
            return self.engine.analyze(url, title, snippet[: self.analysis_max_chars])
        response = self.invoke(build_content_prompt(url, title, snippet))
        if isinstance(response, ModelOk):
            return response.result
        self._report_fallback("content", response, subject=url)
        return self.engine.analyze(url, title, snippet[: self.analysis_max_chars])

    def verify_text(self, text: str) -> VerificationResult:
        """Verify direct text. The heuristic path sees at most analysis_max_chars of it."""
        if self.client is None:
            return self.engine.analyze_text(text[: self.analysis_max_chars])
        response = self.invoke(build_text_prompt(text))
        if isinstance(response, ModelOk):
            return response.result
        self._report_fallback("text", response, subject=text[:50])
        return self.engine.analyze_text(text[: self.analysis_max_chars])

    def invoke(self, prompt: str) -> ModelResponse:
        """Run a prompt and reduce every outcome to a tagged response."""
        if self.client is None:
            return CallFailed(reason="no model configured")
        try:
            reply = self.client.generate(prompt)
        except Exception as exc:
            return CallFailed(reason=f"{type(exc).__name__}: {exc}")

        if reply.block_reason:
            return SafetyBlocked(reason=reply.block_reason)
        raw_text = reply.text or ""
        try:
            return ModelOk(result=decode_model_reply(raw_text))
        except ModelParseFailure as exc:
            return ParseFailed(reason=exc.message, raw_text=raw_text)

    def _report_fallback(self, kind: str, response: ModelResponse, subject: str) -> None:
        self._event_hook(
            "model_fallback",
            {
                "level": "warning",
                "component": "verification",
                "kind": kind,
                "outcome": type(response).__name__,
                "reason": getattr(response, "reason", None),
                "subject": subject,
            },
        )
