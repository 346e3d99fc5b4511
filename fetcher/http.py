"""HTTP fetch client with identity profiles, timeouts, and body limits."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from urllib.parse import urlparse

import requests

from core.config import FetchConfig
from core.errors import UpstreamFetchError
from core.models import FetchErrorCode, FetchLog
from fetcher.identity import IdentityProfile
from fetcher.logging import emit_fetch_log


_CHARSET_RE = re.compile(r"charset=\s*[\"']?([a-zA-Z0-9._-]+)", re.IGNORECASE)


class BodyLimitExceeded(Exception):
    """Raised when response body exceeds configured limits."""


@dataclass(slots=True)
class FetchResponse:
    """Decoded body of one successful fetch."""

    status_code: int
    body: str
    final_url: str
    latency_ms: int


def _validate_url_scheme(url: str) -> bool:
    """Validate that URL uses allowed protocols."""
    parsed = urlparse(url)
    return parsed.scheme.lower() in FetchConfig.ALLOWED_PROTOCOLS and bool(parsed.netloc)


def _read_body_with_limit(response: requests.Response, max_bytes: int) -> bytes:
    """Read response body up to the configured maximum size."""
    chunks: list[bytes] = []
    total = 0
    for chunk in response.iter_content(chunk_size=8192):
        if not chunk:
            continue
        total += len(chunk)
        if total > max_bytes:
            raise BodyLimitExceeded(f"response exceeds {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def _decode_body(response: requests.Response, body: bytes) -> str:
    """Decode body bytes: declared Content-Type charset first, then utf-8, then latin-1."""
    content_type = (getattr(response, "headers", None) or {}).get("content-type", "")
    charset_match = _CHARSET_RE.search(content_type)
    encodings = []
    if charset_match:
        encodings.append(charset_match.group(1))
    encodings.extend(["utf-8", "latin-1"])

    for encoding in encodings:
        try:
            return body.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue

    return body.decode("utf-8", errors="replace")


class FetchClient:
    """
    Perform one GET with a chosen identity.

    Non-2xx responses raise UpstreamFetchError carrying the status; network
    errors and timeouts raise UpstreamFetchError with status 500.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout_seconds: float = FetchConfig.FETCH_TIMEOUT_SECONDS,
        max_body_bytes: int = FetchConfig.MAX_BODY_BYTES,
        log_fetches: bool = True,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.max_body_bytes = max_body_bytes
        self.log_fetches = log_fetches

    def get(self, url: str, identity: IdentityProfile, request_id: str | None = None) -> FetchResponse:
        """Fetch a URL, emitting one fetch_log line per attempt."""
        start = time.monotonic()

        def _fail(status_code: int, error_code: FetchErrorCode, reason: str) -> UpstreamFetchError:
            self._log(
                FetchLog(
                    url=url,
                    status_code=status_code if error_code is FetchErrorCode.HTTP_ERROR else None,
                    latency_ms=int((time.monotonic() - start) * 1000),
                    error_code=error_code,
                    identity=identity.tier,
                    request_id=request_id,
                )
            )
            return UpstreamFetchError(url, status_code, reason=reason)

        if not _validate_url_scheme(url):
            raise _fail(400, FetchErrorCode.SECURITY_BLOCKED, "disallowed protocol")

        try:
            response = self.session.get(
                url,
                headers=identity.headers(),
                timeout=self.timeout_seconds,
                allow_redirects=True,
                stream=True,
            )
        except requests.Timeout as exc:
            raise _fail(500, FetchErrorCode.TIMEOUT, str(exc)) from exc
        except requests.RequestException as exc:
            raise _fail(500, FetchErrorCode.FETCH_ERROR, str(exc)) from exc

        try:
            if not 200 <= response.status_code < 300:
                raise _fail(response.status_code, FetchErrorCode.HTTP_ERROR, f"HTTP {response.status_code}")
            try:
                body = _read_body_with_limit(response, self.max_body_bytes)
            except BodyLimitExceeded as exc:
                raise _fail(413, FetchErrorCode.BODY_TOO_LARGE, str(exc)) from exc
            except requests.RequestException as exc:
                raise _fail(500, FetchErrorCode.FETCH_ERROR, str(exc)) from exc
        finally:
            response.close()

        latency_ms = int((time.monotonic() - start) * 1000)
        self._log(
            FetchLog(
                url=url,
                status_code=response.status_code,
                latency_ms=latency_ms,
                bytes_received=len(body),
                identity=identity.tier,
                request_id=request_id,
            )
        )
        return FetchResponse(
            status_code=response.status_code,
            body=_decode_body(response, body),
            final_url=getattr(response, "url", None) or url,
            latency_ms=latency_ms,
        )

    def _log(self, fetch_log: FetchLog) -> None:
        if self.log_fetches:
            emit_fetch_log(fetch_log)

    def log_robots_block(self, url: str, identity: IdentityProfile, request_id: str | None = None) -> None:
        """Record a Tier1 attempt refused by robots.txt before any request was sent."""
        self._log(
            FetchLog(
                url=url,
                error_code=FetchErrorCode.BLOCKED_BY_ROBOTS,
                identity=identity.tier,
                request_id=request_id,
            )
        )
