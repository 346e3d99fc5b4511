"""HTML content extraction: title, meta description, and raw snippet."""

from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser

from core.config import FetchConfig


@dataclass(frozen=True, slots=True)
class ExtractedContent:
    """Fields pulled from one fetched document."""

    title: str
    meta_description: str
    snippet: str


class _MetadataExtractor(HTMLParser):
    """Capture the first <title>, the first <h1>, and the description meta tag."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.title: str | None = None
        self.h1: str | None = None
        self.description: str | None = None
        self._capture: str | None = None
        self._chunks: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        tag_lower = tag.lower()
        if tag_lower == "meta" and self.description is None:
            attr_map = {key.lower(): (value or "") for key, value in attrs}
            if attr_map.get("name", "").lower() == "description":
                self.description = attr_map.get("content", "")
            return
        if self._capture is not None:
            return
        if tag_lower == "title" and self.title is None:
            self._start_capture("title")
        elif tag_lower == "h1" and self.h1 is None:
            self._start_capture("h1")

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        if self._capture is None or tag.lower() != self._capture:
            return
        text = _normalize_whitespace("".join(self._chunks))
        if self._capture == "title":
            self.title = text
        else:
            self.h1 = text
        self._capture = None
        self._chunks = []

    def handle_data(self, data: str) -> None:
        if self._capture is not None:
            self._chunks.append(data)

    def _start_capture(self, tag: str) -> None:
        self._capture = tag
        self._chunks = []


def _normalize_whitespace(value: str) -> str:
    return " ".join(value.split())


def truncate_for_analysis(text: str, max_chars: int) -> str:
    """Cut text to the analysis bound; storage and analysis bounds are independent."""
    return text[:max_chars]


class ContentExtractor:
    """Convert a fetched HTML document into title, description, and snippet."""

    def __init__(
        self,
        snippet_max_chars: int = FetchConfig.SNIPPET_MAX_CHARS,
        untitled_placeholder: str = FetchConfig.UNTITLED_PLACEHOLDER,
    ) -> None:
        self.snippet_max_chars = snippet_max_chars
        self.untitled_placeholder = untitled_placeholder

    def extract(self, html: str) -> ExtractedContent:
        """
        Title order: <title>, then first <h1>, then the placeholder.

        The snippet is the raw document, not visible text, cut to the
        storage bound.
        """
        parser = _MetadataExtractor()
        parser.feed(html)
        parser.close()

        title = parser.title or parser.h1 or self.untitled_placeholder
        return ExtractedContent(
            title=title,
            meta_description=(parser.description or "").strip(),
            snippet=html[: self.snippet_max_chars],
        )
