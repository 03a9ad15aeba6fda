"""Page fetching with a rendered fallback, plus extraction."""

import asyncio
import logging

import httpx

from carta_crawler.config import FetcherConfig
from carta_crawler.exceptions import FetchFailure
from carta_crawler.extractor.page_extractor import PageSnapshot, extract
from carta_crawler.fetcher.base import FetchResult
from carta_crawler.fetcher.http_fetcher import HttpFetcher
from carta_crawler.fetcher.playwright_fetcher import BrowserRenderer

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetch pages over plain HTTP, falling back to a headless browser.

    Use as an async context manager. A renderer passed in is shared and left
    open on exit; one created here is closed with the fetcher.
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        renderer: BrowserRenderer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or FetcherConfig()
        self._http = HttpFetcher(self.config, transport=transport)
        self._owns_renderer = renderer is None
        self.renderer = renderer if renderer is not None else BrowserRenderer(self.config)

    async def __aenter__(self):
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._http.__aexit__(exc_type, exc_val, exc_tb)
        if self._owns_renderer:
            await self.renderer.close()

    async def fetch_raw(self, url: str) -> FetchResult:
        """Plain HTTP GET."""
        return await self._http.fetch(url)

    async def fetch_rendered(self, url: str) -> str:
        """Rendered DOM of ``url``, or ``""`` if rendering failed."""
        result = await self.renderer.fetch(url)
        return result.html if result.error is None else ""

    async def fetch_html(self, url: str) -> str:
        """HTML of ``url``, rendering it when the plain fetch fails.

        Raises:
            FetchFailure: if both the plain and the rendered fetch failed.
        """
        raw = await self.fetch_raw(url)
        if raw.success or raw.short_circuited:
            return raw.html

        logger.debug("Plain fetch of %s failed (%s), rendering instead", url, raw.error)
        rendered = await self.renderer.fetch(url)
        if rendered.error is None:
            return rendered.html

        raise FetchFailure(url, f"{raw.error}; rendered fetch: {rendered.error}")

    async def fetch(self, url: str) -> PageSnapshot:
        """Fetch ``url`` and extract title, text, metadata and links.

        Relative links are resolved against ``url`` itself.
        """
        html = await self.fetch_html(url)
        snapshot = extract(html, url)
        logger.debug("Scraped %s: %d links", url, len(snapshot.links))
        return snapshot

    async def fetch_many(self, urls: list[str]) -> list[PageSnapshot]:
        """Scrape several pages concurrently, in input order.

        A page that cannot be fetched becomes a placeholder snapshot with
        ``error`` set instead of failing the whole batch.
        """

        async def fetch_one(url: str) -> PageSnapshot:
            try:
                return await self.fetch(url)
            except FetchFailure as e:
                return PageSnapshot.failed(url, str(e))

        return list(await asyncio.gather(*(fetch_one(url) for url in urls)))
