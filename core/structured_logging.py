"""Shared structured JSON logging helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Callable, Optional


EventHook = Callable[[str, dict[str, Any]], None]
"""Signature of the optional event sinks components accept: (event_type, payload)."""


def emit_json_event(
    event_type: str,
    *,
    request_id: str | None = None,
    level: str = "info",
    **payload: Any,
) -> str:
    """Emit one JSON event line to stdout and return the rendered line."""
    event: dict[str, Any] = {
        "event_type": event_type,
        "level": level,
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
    }
    event.update(payload)
    line = json.dumps(event, ensure_ascii=True, sort_keys=True, default=str)
    print(line)
    return line


def default_event_hook(event_type: str, payload: dict[str, Any]) -> None:
    """Default event sink writing to structured JSON stdout."""
    fields = dict(payload)
    request_id = fields.pop("request_id", None)
    level = fields.pop("level", "info")
    emit_json_event(event_type, request_id=request_id, level=level, **fields)


def resolve_event_hook(event_hook: Optional[EventHook]) -> EventHook:
    """Return the given hook, falling back to stdout JSON lines."""
    return event_hook or default_event_hook
