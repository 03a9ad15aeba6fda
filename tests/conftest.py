"""
Pytest configuration and shared fixtures.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from carta_crawler.exceptions import FetchFailure
from carta_crawler.extractor.page_extractor import PageSnapshot, extract


def page_html(links: list[tuple[str, str]], title: str = "Page") -> str:
    """Build a minimal page linking to ``(href, anchor text)`` pairs."""
    anchors = "\n".join(f'<a href="{href}">{text}</a>' for href, text in links)
    return f"<html><head><title>{title}</title></head><body>{anchors}</body></html>"


class FakeFetcher:
    """In-memory stand-in for PageFetcher used by scheduler tests.

    ``pages`` maps a normalized URL to its links; unknown URLs are empty
    pages. ``delays`` makes a page slow and ``failures`` makes it raise
    FetchFailure.
    """

    def __init__(
        self,
        pages: dict[str, list[tuple[str, str]]] | None = None,
        delays: dict[str, float] | None = None,
        failures: set[str] | None = None,
        default_delay: float = 0.0,
    ):
        self.pages = pages or {}
        self.delays = delays or {}
        self.failures = failures or set()
        self.default_delay = default_delay
        self.calls: list[str] = []
        self.cancelled: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.on_fetch: Callable[[str], Any] | None = None

    async def fetch(self, url: str) -> PageSnapshot:
        self.calls.append(url)
        if self.on_fetch:
            self.on_fetch(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(url, self.default_delay)
            if delay:
                await asyncio.sleep(delay)
            if url in self.failures:
                raise FetchFailure(url, "HTTP 500 Internal Server Error")
            return extract(page_html(self.pages.get(url, [])), url)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_fetcher() -> Callable[..., FakeFetcher]:
    """Factory for FakeFetcher instances."""
    return FakeFetcher


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_restaurant_html() -> str:
    """Restaurant home page with menu, info and asset links."""
    return """
<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <title>Casa Pepe | Restaurante</title>
    <meta name="description" content="Cocina tradicional en el centro.">
    <meta property="og:title" content="Casa Pepe">
    <meta name="description" content="Restaurante de cocina tradicional.">
    <style>body { color: red; }</style>
    <script>window.dataLayer = [];</script>
</head>
<body>
    <nav>
        <a href="/">Inicio</a>
        <a href="/carta/">Nuestra   Carta</a>
        <a href="menu-del-dia.html#hoy">Menú del día</a>
        <a href="/sobre-nosotros">Sobre nosotros</a>
        <a href="https://www.instagram.com/casapepe">Instagram</a>
        <a href="mailto:reservas@casapepe.es">Reservas</a>
        <a href="/img/logo.png"></a>
    </nav>
    <main style="display: block">
        <h1>Bienvenidos</h1>
        <p>Tapas,
            raciones y   vinos.</p>
        <noscript>Activa JavaScript</noscript>
        <iframe src="https://maps.example.com/embed"></iframe>
    </main>
</body>
</html>
    """.strip()
