"""Page fetching with an optional rendered fallback."""

from carta_crawler.fetcher.base import BaseFetcher, FetchResult
from carta_crawler.fetcher.http_fetcher import HttpFetcher
from carta_crawler.fetcher.page_fetcher import PageFetcher
from carta_crawler.fetcher.playwright_fetcher import BrowserRenderer

__all__ = [
    "BaseFetcher",
    "BrowserRenderer",
    "FetchResult",
    "HttpFetcher",
    "PageFetcher",
]
