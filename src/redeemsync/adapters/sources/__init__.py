"""Adapter scraping codes and social links from third-party code pages."""

from __future__ import annotations

from .errors import ExtractionError, UnsupportedSourceError
from .extractor import SourceExtractor, merge_pages
from .links import classify_link, extract_links, normalize_absolute_url
from .parsing import parse_codes_page
from .providers import (
    CODE_PROVIDER_PRIORITY,
    LINK_PROVIDER_PRIORITY,
    detect_provider,
    is_supported,
    supported_sources,
    unique_urls,
)
from .schema import ScrapedCode, ScrapedPage

__all__ = [
    "CODE_PROVIDER_PRIORITY",
    "LINK_PROVIDER_PRIORITY",
    "ExtractionError",
    "ScrapedCode",
    "ScrapedPage",
    "SourceExtractor",
    "UnsupportedSourceError",
    "classify_link",
    "detect_provider",
    "extract_links",
    "is_supported",
    "merge_pages",
    "normalize_absolute_url",
    "parse_codes_page",
    "supported_sources",
    "unique_urls",
]
