"""Plain HTTP fetcher for static pages."""

import logging

import httpx

from carta_crawler.config import FetcherConfig
from carta_crawler.fetcher.base import BaseFetcher, FetchResult
from carta_crawler.utils.url_utils import is_absolute_http_url

logger = logging.getLogger(__name__)


class HttpFetcher(BaseFetcher):
    """HTTP GET without JavaScript rendering.

    ``transport`` is handed to ``httpx.AsyncClient`` and lets tests plug in
    an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: FetcherConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
            timeout=self.config.http_timeout_ms / 1000,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a page via HTTP.

        ``mailto:``/``tel:`` and other non-HTTP URLs, and 404 responses, come
        back as short-circuited empty results. Other failures are returned
        with ``error`` set so the caller can fall back to rendering.
        """
        if not self._client:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")

        if not is_absolute_http_url(url):
            logger.debug("Skipping non-HTTP URL: %s", url)
            return FetchResult.empty(url)

        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("HTTP fetch failed for %s: %s", url, e)
            return FetchResult.failure(url, f"{type(e).__name__}: {e}")

        logger.debug("Fetched %s with status %d", url, response.status_code)

        if response.status_code == 404:
            logger.warning("404 at %s", url)
            return FetchResult.empty(url, status_code=404)

        if not response.is_success:
            return FetchResult.failure(
                url,
                f"HTTP {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        return FetchResult(
            url=url,
            final_url=str(response.url),
            html=response.text,
            status_code=response.status_code,
        )
