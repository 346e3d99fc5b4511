"""Fetch-attempt log lines and the fetcher's default event sink."""

from __future__ import annotations

from typing import Any

from core.models import FetchLog
from core.structured_logging import emit_json_event


def fetch_log_payload(fetch_log: FetchLog) -> dict[str, Any]:
    """JSON-safe fields of one fetch attempt, minus what the event envelope carries."""
    return fetch_log.model_dump(mode="json", exclude={"created_at", "request_id"})


def emit_fetch_log(fetch_log: FetchLog) -> str:
    """Emit one fetch_log line and return it for testability. Failed attempts log at warning."""
    return emit_json_event(
        "fetch_log",
        request_id=fetch_log.request_id,
        level="warning" if fetch_log.error_code else "info",
        component="fetcher",
        **fetch_log_payload(fetch_log),
    )


def fetcher_event_hook(event_type: str, payload: dict[str, Any]) -> None:
    """Default event sink for fetcher components."""
    fields = dict(payload)
    request_id = fields.pop("request_id", None)
    level = fields.pop("level", "info")
    emit_json_event(event_type, request_id=request_id, level=level, component="fetcher", **fields)
