"""Tests for PageFetcher's plain/rendered fallback."""

import httpx
import pytest

from carta_crawler.exceptions import FetchFailure
from carta_crawler.fetcher import FetchResult, PageFetcher


class StubRenderer:
    """Records renders and returns canned results."""

    def __init__(self, pages: dict[str, str] | None = None, fail: bool = False):
        self.pages = pages or {}
        self.fail = fail
        self.rendered: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> FetchResult:
        self.rendered.append(url)
        if self.fail:
            return FetchResult.failure(url, "net::ERR_NAME_NOT_RESOLVED")
        return FetchResult(url=url, final_url=url, html=self.pages.get(url, ""), status_code=200)

    async def close(self) -> None:
        self.closed = True


def handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/static":
        return httpx.Response(
            200, html='<html><title>Static</title><body><a href="/carta">Carta</a></body></html>'
        )
    if path == "/missing":
        return httpx.Response(404)
    return httpx.Response(403, text="blocked")


@pytest.fixture
def transport() -> httpx.MockTransport:
    return httpx.MockTransport(handler)


RENDERED = '<html><title>Rendered</title><body><a href="menu">Menu</a></body></html>'


class TestFetchHtml:
    """Tests for the fallback chain."""

    @pytest.mark.asyncio
    async def test_plain_success_skips_renderer(self, transport) -> None:
        renderer = StubRenderer()
        async with PageFetcher(renderer=renderer, transport=transport) as fetcher:
            html = await fetcher.fetch_html("https://example.com/static")

        assert "Static" in html
        assert renderer.rendered == []

    @pytest.mark.asyncio
    async def test_404_is_not_rendered(self, transport) -> None:
        renderer = StubRenderer()
        async with PageFetcher(renderer=renderer, transport=transport) as fetcher:
            html = await fetcher.fetch_html("https://example.com/missing")

        assert html == ""
        assert renderer.rendered == []

    @pytest.mark.asyncio
    async def test_falls_back_to_renderer(self, transport) -> None:
        renderer = StubRenderer({"https://example.com/spa": RENDERED})
        async with PageFetcher(renderer=renderer, transport=transport) as fetcher:
            html = await fetcher.fetch_html("https://example.com/spa")

        assert html == RENDERED
        assert renderer.rendered == ["https://example.com/spa"]

    @pytest.mark.asyncio
    async def test_both_fail(self, transport) -> None:
        renderer = StubRenderer(fail=True)
        async with PageFetcher(renderer=renderer, transport=transport) as fetcher:
            with pytest.raises(FetchFailure) as exc_info:
                await fetcher.fetch_html("https://example.com/spa")

        assert exc_info.value.url == "https://example.com/spa"
        assert "HTTP 403" in exc_info.value.reason
        assert "ERR_NAME_NOT_RESOLVED" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_fetch_rendered_returns_empty_on_error(self, transport) -> None:
        async with PageFetcher(renderer=StubRenderer(fail=True), transport=transport) as fetcher:
            assert await fetcher.fetch_rendered("https://example.com/spa") == ""


class TestFetch:
    """Tests for fetch() and fetch_many()."""

    @pytest.mark.asyncio
    async def test_links_resolved_against_requested_url(self, transport) -> None:
        renderer = StubRenderer({"https://example.com/spa/": RENDERED})
        async with PageFetcher(renderer=renderer, transport=transport) as fetcher:
            snapshot = await fetcher.fetch("https://example.com/spa/")

        assert snapshot.title == "Rendered"
        assert [link.url for link in snapshot.links] == ["https://example.com/spa/menu"]

    @pytest.mark.asyncio
    async def test_fetch_many_keeps_order_and_failures(self, transport) -> None:
        renderer = StubRenderer(fail=True)
        async with PageFetcher(renderer=renderer, transport=transport) as fetcher:
            pages = await fetcher.fetch_many(
                ["https://example.com/static", "https://example.com/spa", "https://example.com/missing"]
            )

        assert [page.url for page in pages] == [
            "https://example.com/static",
            "https://example.com/spa",
            "https://example.com/missing",
        ]
        assert pages[0].title == "Static"
        assert pages[0].links[0].url == "https://example.com/carta"
        assert pages[1].error is not None
        assert pages[1].links == []
        assert pages[2].error is None
        assert pages[2].title == "https://example.com/missing"

    @pytest.mark.asyncio
    async def test_shared_renderer_left_open(self, transport) -> None:
        renderer = StubRenderer()
        async with PageFetcher(renderer=renderer, transport=transport):
            pass
        assert not renderer.closed
