"""Utility functions."""

from carta_crawler.utils.url_utils import (
    dedupe_language_urls,
    first_path_segment,
    is_absolute_http_url,
    is_same_domain,
    normalize_url,
)

__all__ = [
    "dedupe_language_urls",
    "first_path_segment",
    "is_absolute_http_url",
    "is_same_domain",
    "normalize_url",
]
