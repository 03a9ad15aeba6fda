"""Result type and interface shared by the HTTP fetcher and the browser renderer."""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from carta_crawler.config import FetcherConfig


class FetchResult(BaseModel):
    """Outcome of one plain or rendered fetch."""

    url: str
    final_url: str  # After redirects
    html: str
    status_code: int
    error: str | None = None
    short_circuited: bool = False  # Definitive empty answer, no fallback wanted

    @property
    def success(self) -> bool:
        return self.status_code >= 200 and self.status_code < 300 and not self.error

    @classmethod
    def empty(cls, url: str, status_code: int = 0) -> "FetchResult":
        """Empty content that must not trigger a rendered fallback."""
        return cls(
            url=url,
            final_url=url,
            html="",
            status_code=status_code,
            short_circuited=True,
        )

    @classmethod
    def failure(cls, url: str, error: str, status_code: int = 0) -> "FetchResult":
        return cls(
            url=url,
            final_url=url,
            html="",
            status_code=status_code,
            error=error,
        )


class BaseFetcher(ABC):
    """A fetcher that must be entered with ``async with`` before use."""

    def __init__(self, config: FetcherConfig):
        self.config = config

    @abstractmethod
    async def fetch(self, url: str) -> FetchResult:
        """Fetch ``url``. Failures are reported in the result, not raised."""

    @abstractmethod
    async def __aenter__(self):
        """Acquire the HTTP client or browser."""

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Release what ``__aenter__`` acquired."""
