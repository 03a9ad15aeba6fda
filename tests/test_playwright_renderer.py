"""Tests for BrowserRenderer with a mocked Playwright context."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from carta_crawler.config import FetcherConfig
from carta_crawler.fetcher import BrowserRenderer


def make_page(html: str = "<html></html>", status: int | None = 200, goto_error: Exception | None = None):
    page = MagicMock()
    page.url = "https://example.com/final"
    page.content = AsyncMock(return_value=html)
    page.close = AsyncMock()
    if goto_error is not None:
        page.goto = AsyncMock(side_effect=goto_error)
    elif status is None:
        page.goto = AsyncMock(return_value=None)
    else:
        page.goto = AsyncMock(return_value=MagicMock(status=status))
    return page


def make_renderer(page) -> BrowserRenderer:
    renderer = BrowserRenderer(FetcherConfig())
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    renderer._ensure_context = AsyncMock(return_value=context)
    return renderer


class TestBrowserRenderer:
    """Tests for BrowserRenderer.fetch."""

    @pytest.mark.asyncio
    async def test_renders_and_closes_page(self) -> None:
        page = make_page("<html><body>Carta</body></html>")
        renderer = make_renderer(page)

        result = await renderer.fetch("https://example.com/carta")

        assert result.error is None
        assert result.html == "<html><body>Carta</body></html>"
        assert result.final_url == "https://example.com/final"
        page.goto.assert_awaited_once()
        assert page.goto.await_args.kwargs["wait_until"] == "networkidle"
        page.close.assert_awaited_once()
        assert renderer.pages_rendered == 1

    @pytest.mark.asyncio
    async def test_error_status_still_returns_html(self) -> None:
        renderer = make_renderer(make_page("<html>blocked</html>", status=403))
        result = await renderer.fetch("https://example.com/")
        assert result.error is None
        assert result.status_code == 403
        assert result.html == "<html>blocked</html>"

    @pytest.mark.asyncio
    async def test_missing_response_counts_as_ok(self) -> None:
        renderer = make_renderer(make_page(status=None))
        result = await renderer.fetch("https://example.com/")
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_navigation_error_is_reported(self) -> None:
        page = make_page(goto_error=RuntimeError("net::ERR_CONNECTION_REFUSED"))
        renderer = make_renderer(page)

        result = await renderer.fetch("https://example.com/")

        assert result.error == "net::ERR_CONNECTION_REFUSED"
        assert result.html == ""
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_page_closed_on_cancellation(self) -> None:
        page = make_page()

        async def slow_goto(*args, **kwargs):
            await asyncio.sleep(1)

        page.goto = AsyncMock(side_effect=slow_goto)
        renderer = make_renderer(page)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(renderer.fetch("https://example.com/"), timeout=0.01)

        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_failure_is_reported(self) -> None:
        renderer = BrowserRenderer(FetcherConfig())
        renderer._ensure_context = AsyncMock(side_effect=RuntimeError("Executable doesn't exist"))

        result = await renderer.fetch("https://example.com/")

        assert result.error.startswith("browser launch failed")

    @pytest.mark.asyncio
    async def test_close_without_launch(self) -> None:
        renderer = BrowserRenderer(FetcherConfig())
        await renderer.close()
        await renderer.close()
        assert not renderer.is_running


def slow_launch_playwright(started: list, stopped: list):
    """``async_playwright`` replacement whose browser launch never finishes in time."""

    def factory():
        driver = MagicMock()

        async def start():
            started.append(driver)
            return driver

        async def launch(**kwargs):
            await asyncio.sleep(1)

        async def stop():
            stopped.append(driver)

        driver.start = start
        driver.chromium.launch = launch
        driver.stop = stop
        return driver

    return factory


@pytest.mark.asyncio
async def test_cancelled_launch_stops_driver(monkeypatch) -> None:
    started: list = []
    stopped: list = []
    monkeypatch.setattr(
        "carta_crawler.fetcher.playwright_fetcher.async_playwright",
        slow_launch_playwright(started, stopped),
    )
    renderer = BrowserRenderer(FetcherConfig())

    for _ in range(2):
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(renderer.fetch("https://example.com/"), timeout=0.05)
    await renderer.close()

    assert len(started) == 2
    assert stopped == started
    assert not renderer.is_running
