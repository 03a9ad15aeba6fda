"""Title, metadata, text and link extraction from HTML pages."""

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

# Elements whose content is never visible page text
REMOVE_SELECTORS = [
    "script",
    "style",
    "noscript",
    "iframe",
    'link[rel="stylesheet"]',
]


class PageLink(BaseModel):
    """An outbound link and its anchor text."""

    url: str
    text: str


class PageSnapshot(BaseModel):
    """Everything the crawler and downstream stages need from one page."""

    url: str
    title: str
    text: str = ""
    links: list[PageLink] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)
    error: str | None = None

    @classmethod
    def failed(cls, url: str, error: str) -> "PageSnapshot":
        """Placeholder for a page that could not be scraped."""
        return cls(url=url, title=url, error=error)


def extract(html: str, base_url: str) -> PageSnapshot:
    """Parse ``html`` fetched from ``base_url`` into a snapshot.

    Empty HTML yields a snapshot with the URL as title and no links.
    """
    soup = BeautifulSoup(html or "", "lxml")

    for selector in REMOVE_SELECTORS:
        for elem in soup.select(selector):
            elem.decompose()
    for elem in soup.find_all(style=True):
        del elem["style"]

    title = soup.title.get_text(strip=True) if soup.title else ""

    return PageSnapshot(
        url=base_url,
        title=title or base_url,
        text=_visible_text(soup),
        links=_extract_links(soup, base_url),
        metadata=_extract_metadata(soup),
    )


def _extract_metadata(soup: BeautifulSoup) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        name = meta.get("name") or meta.get("property")
        content = meta.get("content")
        if name and content:
            metadata[name] = content
    return metadata


def _visible_text(soup: BeautifulSoup) -> str:
    if soup.body is None:
        return ""
    text = soup.body.get_text(" ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def _extract_links(soup: BeautifulSoup, base_url: str) -> list[PageLink]:
    """Resolve every ``<a href>`` with anchor text against ``base_url``."""
    links: list[PageLink] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        text = _WHITESPACE_RE.sub(" ", a.get_text(" ")).strip()
        if not href or not text:
            continue
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            logger.debug("Dropping malformed link %r on %s", href, base_url)
            continue
        links.append(PageLink(url=absolute, text=text))
    return links
