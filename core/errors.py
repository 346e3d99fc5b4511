"""Error taxonomy for the fetch pipeline and verification path."""

from __future__ import annotations


class TruthLensError(Exception):
    """Base error carrying the HTTP status a calling layer should report."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(TruthLensError):
    """Caller supplied a missing or malformed URL or paragraph."""

    status_code = 400


class RobotsDisallowed(TruthLensError):
    """robots.txt denies the polite identity. Recoverable by escalation."""

    status_code = 403

    def __init__(self, url: str) -> None:
        super().__init__("Scraping denied by robots.txt (Standard Mode)", 403)
        self.url = url


class UpstreamFetchError(TruthLensError):
    """
    Target host refused or failed the request.

    `persistent` is set once the Stealth tier has also failed, which changes
    the message from a retry notice to a host-block notice. `retrying` is
    cleared when the caller disabled escalation; the message then carries
    no suffix.
    """

    def __init__(
        self,
        url: str,
        status_code: int,
        persistent: bool = False,
        reason: str | None = None,
        retrying: bool = True,
    ) -> None:
        message = f"Target host responded with status {status_code}."
        if persistent:
            message += " Host block persistent."
        elif retrying:
            message += " Retrying in stealth mode..."
        super().__init__(message, status_code)
        self.url = url
        self.persistent = persistent
        self.reason = reason
        self.retrying = retrying and not persistent

    def as_persistent(self) -> "UpstreamFetchError":
        """Return a copy flagged as the terminal Stealth-tier failure."""
        return UpstreamFetchError(self.url, self.status_code, persistent=True, reason=self.reason)

    def as_final(self) -> "UpstreamFetchError":
        """Return a copy for a failure that will not be retried."""
        return UpstreamFetchError(self.url, self.status_code, reason=self.reason, retrying=False)


class RobotsFetchFailure(TruthLensError):
    """robots.txt could not be retrieved. Always degrades to allow-all."""


class ModelCallFailure(TruthLensError):
    """External model call failed in transport. Always degrades to heuristics."""


class ModelParseFailure(TruthLensError):
    """External model reply did not match the expected JSON shape."""
