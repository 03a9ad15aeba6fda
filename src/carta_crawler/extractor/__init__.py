"""Page content extraction."""

from carta_crawler.extractor.page_extractor import PageLink, PageSnapshot, extract

__all__ = [
    "PageLink",
    "PageSnapshot",
    "extract",
]
