"""Playwright-based renderer for JavaScript-heavy pages."""

import asyncio
import logging

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from carta_crawler.config import FetcherConfig
from carta_crawler.fetcher.base import BaseFetcher, FetchResult

logger = logging.getLogger(__name__)


class BrowserRenderer(BaseFetcher):
    """Render pages in a headless Chromium shared by every caller.

    The browser is launched lazily on the first render and stays up until
    the renderer is closed, so one instance can serve many pages and many
    crawls. Whoever opens the renderer (``async with`` or ``close()``) is
    responsible for releasing it.
    """

    def __init__(self, config: FetcherConfig):
        super().__init__(config)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._launch_lock = asyncio.Lock()
        self.pages_rendered = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up Playwright resources."""
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._context is not None

    async def _ensure_context(self) -> BrowserContext:
        """Launch the browser once, even when several renders race for it."""
        async with self._launch_lock:
            if self._context is not None:
                return self._context
            logger.debug("Launching headless browser")
            self._playwright = await async_playwright().start()
            try:
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless
                )
                self._context = await self._browser.new_context(
                    user_agent=self.config.user_agent,
                    viewport={"width": 1280, "height": 720},
                )
            except BaseException:
                # Also on cancellation, so no driver outlives a failed launch
                await self.close()
                raise
            return self._context

    async def close(self) -> None:
        """Close the browser. The next render launches a new one."""
        if self._context:
            try:
                await self._context.close()
            except Exception:
                logger.debug("Failed to close browser context", exc_info=True)
        if self._browser:
            try:
                await self._browser.close()
            except Exception:
                logger.debug("Failed to close browser", exc_info=True)
        if self._playwright:
            await self._playwright.stop()
        self._context = None
        self._browser = None
        self._playwright = None

    async def fetch(self, url: str) -> FetchResult:
        """Navigate a fresh page to ``url`` and return the rendered DOM.

        The rendered HTML is used whatever the response status. Failures are
        reported in the result, never raised. The page is closed on every
        exit path, including cancellation by a per-page timeout.
        """
        try:
            context = await self._ensure_context()
        except Exception as e:
            logger.warning("Browser launch failed: %s", e)
            return FetchResult.failure(url, f"browser launch failed: {e}")

        page: Page | None = None
        try:
            page = await context.new_page()
            response = await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.config.render_timeout_ms,
            )

            if self.config.wait_after_load_ms > 0:
                await asyncio.sleep(self.config.wait_after_load_ms / 1000)

            html = await page.content()
            self.pages_rendered += 1
            logger.debug("Rendered %s", url)

            return FetchResult(
                url=url,
                final_url=page.url,
                html=html,
                status_code=response.status if response is not None else 200,
            )

        except Exception as e:
            logger.warning("Rendering failed for %s: %s", url, e)
            return FetchResult.failure(url, str(e))
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception:
                    logger.debug("Failed to close page for %s", url, exc_info=True)
