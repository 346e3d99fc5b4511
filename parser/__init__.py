"""Parser package for fetched HTML documents."""

from parser.html import ContentExtractor, ExtractedContent, truncate_for_analysis

__all__ = ["ContentExtractor", "ExtractedContent", "truncate_for_analysis"]
