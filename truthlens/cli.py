"""Minimal CLI entrypoint for the TruthLens verifier."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence
from uuid import uuid4

from dotenv import load_dotenv

from core.config import RuntimeSettings
from core.errors import TruthLensError
from core.structured_logging import emit_json_event
from truthlens.service import TruthLensService


def _emit_cli_event(
    event_type: str,
    *,
    request_id: str,
    command: str,
    **payload: Any,
) -> str:
    """Emit one structured CLI event line with standard fields."""
    return emit_json_event(
        event_type=event_type,
        request_id=request_id,
        command=command,
        **payload,
    )


def _print_payload(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _build_service(args: argparse.Namespace) -> TruthLensService:
    """Build the service from environment settings and CLI overrides."""
    settings = RuntimeSettings.from_env()
    if getattr(args, "cache", None):
        settings = settings.model_copy(update={"cache_mode": args.cache})
    return TruthLensService.from_settings(settings)


def _cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch one URL through the escalation pipeline."""
    service = _build_service(args)
    result = service.fetch(args.url, ignore_robots=args.ignore_robots, escalate=not args.no_escalate)
    _print_payload(result.model_dump(mode="json"))
    _emit_cli_event(
        "cli_fetch_completed",
        request_id=args.request_id,
        command="fetch",
        url=args.url,
        mode=result.mode.value,
        robots_overridden=result.robots_overridden,
        from_cache=result.from_cache,
    )
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    """Fetch one URL and verify its content."""
    service = _build_service(args)
    analysis = service.analyze_url(args.url, ignore_robots=args.ignore_robots)
    _print_payload(analysis.to_payload())
    _emit_cli_event(
        "cli_analyze_completed",
        request_id=args.request_id,
        command="analyze",
        url=args.url,
        mode=analysis.page.mode.value,
        credibility_score=analysis.verification.credibility_score,
        verdict=analysis.verification.verdict.value,
    )
    return 0


def _cmd_verify_text(args: argparse.Namespace) -> int:
    """Verify a paragraph given inline or from a file."""
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = args.text
    service = _build_service(args)
    result = service.verify_paragraph(text)
    _print_payload(result.to_payload())
    _emit_cli_event(
        "cli_verify_text_completed",
        request_id=args.request_id,
        command="verify-text",
        chars=len(text or ""),
        credibility_score=result.credibility_score,
        verdict=result.verdict.value,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create argument parser for the truthlens CLI."""
    parser = argparse.ArgumentParser(
        prog="truthlens",
        description="Polite fetching and heuristic credibility checks for web content",
    )
    parser.add_argument("--version", action="version", version="truthlens 0.1.0")
    parser.add_argument("--request-id", help="Optional explicit request ID for logging")
    parser.add_argument(
        "--cache",
        choices=("none", "memory", "redis"),
        help="Override TRUTHLENS_CACHE for this invocation",
    )

    subparsers = parser.add_subparsers(dest="command")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch a URL with robots/identity escalation")
    fetch_parser.add_argument("url", help="Absolute http(s) URL")
    fetch_parser.add_argument("--ignore-robots", action="store_true", help="Start at the relaxed tier")
    fetch_parser.add_argument(
        "--no-escalate",
        action="store_true",
        help="Surface the first tier's failure instead of escalating",
    )
    fetch_parser.set_defaults(func=_cmd_fetch)

    analyze_parser = subparsers.add_parser("analyze", help="Fetch a URL and verify its content")
    analyze_parser.add_argument("url", help="Absolute http(s) URL")
    analyze_parser.add_argument("--ignore-robots", action="store_true", help="Start at the relaxed tier")
    analyze_parser.set_defaults(func=_cmd_analyze)

    verify_parser = subparsers.add_parser("verify-text", help="Verify a paragraph of text")
    source = verify_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("text", nargs="?", help="Paragraph to verify")
    source.add_argument("--file", help="Read the paragraph from a UTF-8 file")
    verify_parser.set_defaults(func=_cmd_verify_text)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Execute CLI and return process exit code."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    args.request_id = args.request_id or str(uuid4())
    try:
        return int(args.func(args))
    except TruthLensError as exc:
        _emit_cli_event(
            "cli_error",
            request_id=args.request_id,
            command=str(args.command),
            level="error",
            error_type=type(exc).__name__,
            error=exc.message,
            status_code=exc.status_code,
        )
        return 1
    except Exception as exc:
        _emit_cli_event(
            "cli_error",
            request_id=args.request_id,
            command=str(getattr(args, "command", "unknown")),
            level="error",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1


def cli() -> None:
    """Console-script entrypoint."""
    raise SystemExit(main())


if __name__ == "__main__":
    raise SystemExit(main())
