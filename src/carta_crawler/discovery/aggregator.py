"""Assemble the final crawl result from scheduler state."""

from urllib.parse import urlparse

from carta_crawler.config import CrawlRequest, FilterMode
from carta_crawler.discovery.base import CrawlResult, CrawlState
from carta_crawler.discovery.classifier import LinkClassifier
from carta_crawler.utils.url_utils import first_path_segment


def sort_key(url: str) -> tuple[str, str]:
    """Order by first path segment (root first), then by the full URL."""
    return (first_path_segment(url), url)


def aggregate(state: CrawlState, request: CrawlRequest, classifier: LinkClassifier) -> CrawlResult:
    """Build a ``CrawlResult``.

    Excludes were already applied while discovering links; only the include
    check runs again here, and only when a filter mode is active.
    """
    # Both lists share one ordering so that without a filter they are equal
    urls = sorted(state.found, key=sort_key)

    if request.filter_mode == FilterMode.NONE:
        filtered = list(urls)
    else:
        filtered = [url for url in urls if classifier.matches_include(url)]

    return CrawlResult(
        domain=urlparse(classifier.seed_url).hostname or "",
        urls_found=len(state.found),
        urls=urls,
        filtered_urls=filtered,
        priority_paths=sorted(state.priority_paths) if state.priority_paths else None,
        external_urls=sorted(state.external) if request.include_external_links else None,
        timed_out=state.timed_out,
        outcome=state.outcome,
    )
