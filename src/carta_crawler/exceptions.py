"""Exception hierarchy for the crawler.

All exceptions inherit from CrawlerError so callers can catch every
crawler-related failure at once.
"""

from typing import Any


class CrawlerError(Exception):
    """Base exception for all crawler errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInput(CrawlerError, ValueError):
    """The seed URL cannot be crawled. Raised before any I/O happens."""

    def __init__(self, url: str, reason: str = "not an absolute http(s) URL"):
        super().__init__(f"Invalid seed URL {url!r}: {reason}", {"url": url})
        self.url = url
        self.reason = reason


class FetchFailure(CrawlerError):
    """Both the plain HTTP fetch and the rendered fetch failed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}", {"url": url})
        self.url = url
        self.reason = reason


class PerPageTimeout(FetchFailure):
    """A page did not finish fetching within the per-page timeout."""

    def __init__(self, url: str, timeout: float):
        super().__init__(url, f"timed out after {timeout:.3g}s")
        self.timeout = timeout
