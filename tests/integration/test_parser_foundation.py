"""Integration tests for HTML content extraction."""

from __future__ import annotations

import pytest

from core.config import FetchConfig
from parser.html import ContentExtractor, truncate_for_analysis


@pytest.mark.integration
def test_extract_prefers_title_tag():
    html = (
        "<html><head><title>  Page   Title </title>"
        '<meta name="Description" content=" Summary of the page. ">'
        "</head><body><h1>Heading</h1></body></html>"
    )

    extracted = ContentExtractor().extract(html)

    assert extracted.title == "Page Title"
    assert extracted.meta_description == "Summary of the page."
    assert extracted.snippet == html


@pytest.mark.integration
def test_extract_falls_back_to_first_h1():
    html = "<html><body><h1>First <em>Heading</em></h1><h1>Second</h1></body></html>"

    extracted = ContentExtractor().extract(html)

    assert extracted.title == "First Heading"
    assert extracted.meta_description == ""


@pytest.mark.integration
def test_extract_uses_placeholder_without_title_or_h1():
    extracted = ContentExtractor().extract("<html><body><p>Just text.</p></body></html>")

    assert extracted.title == FetchConfig.UNTITLED_PLACEHOLDER == "Untitled Analysis"


@pytest.mark.integration
def test_empty_title_tag_falls_back():
    extracted = ContentExtractor().extract("<title></title><h1>Real Heading</h1>")

    assert extracted.title == "Real Heading"


@pytest.mark.integration
def test_snippet_is_raw_document_cut_to_storage_bound():
    html = "<html><body>" + "x" * 60_000 + "</body></html>"

    extracted = ContentExtractor().extract(html)

    assert len(extracted.snippet) == 50_000
    assert extracted.snippet.startswith("<html><body>")


@pytest.mark.integration
def test_custom_snippet_bound():
    extracted = ContentExtractor(snippet_max_chars=10).extract("<p>abcdefghijklmnop</p>")

    assert extracted.snippet == "<p>abcdefg"


@pytest.mark.integration
def test_truncate_for_analysis_is_independent_of_storage_bound():
    text = "y" * 50_000

    assert len(truncate_for_analysis(text, 5_000)) == 5_000
    assert truncate_for_analysis("short", 5_000) == "short"
