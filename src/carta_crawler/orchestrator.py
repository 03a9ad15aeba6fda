"""Crawl several sites in one run, sharing a single browser."""

import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from carta_crawler.config import CrawlRequest, FetcherConfig, FilterMode, OrchestratorConfig
from carta_crawler.discovery.base import CrawlOutcome
from carta_crawler.discovery.crawler import CrawlScheduler
from carta_crawler.exceptions import CrawlerError
from carta_crawler.fetcher.page_fetcher import PageFetcher
from carta_crawler.fetcher.playwright_fetcher import BrowserRenderer
from carta_crawler.utils.url_utils import dedupe_language_urls, normalize_url

logger = logging.getLogger(__name__)


class SiteCrawl(BaseModel):
    """URLs worth scraping for one site. The site itself always comes first."""

    site: str
    urls: list[str]
    priority_paths: list[str] | None = None
    timed_out: bool = False
    outcome: CrawlOutcome | None = None
    error: str | None = None


class OrchestrationResult:
    """Result of a multi-site run."""

    def __init__(self):
        self.sites: list[SiteCrawl] = []
        self.skipped: list[str] = []  # Never started: an earlier group overran
        self.pipeline_start: float = 0.0
        self.pipeline_end: float = 0.0

    @property
    def stopped_early(self) -> bool:
        return bool(self.skipped)

    @property
    def error_count(self) -> int:
        return sum(1 for s in self.sites if s.error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sites": [s.model_dump(mode="json") for s in self.sites],
            "skipped": list(self.skipped),
        }


class Orchestrator:
    """Crawl a list of sites in groups of ``max_concurrency``.

    Each group has ``site_timeout_ms`` to finish, counted from its own
    start. When a group overruns, the sites after it are skipped. One
    browser serves every crawl and is closed when the run ends.
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        crawl_options: dict[str, Any] | None = None,
        fetcher_config: FetcherConfig | None = None,
        console: Console | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or OrchestratorConfig()
        self.crawl_options = (
            crawl_options if crawl_options is not None else {"filter_mode": FilterMode.NONE}
        )
        self.fetcher_config = fetcher_config or FetcherConfig()
        self.console = console or Console(stderr=True)
        self._transport = transport

    async def run(self, sites: list[str], show_progress: bool = True) -> OrchestrationResult:
        """Crawl every site, stopping after the first group that overruns its window."""
        result = OrchestrationResult()
        result.pipeline_start = time.monotonic()
        timeout = self.config.site_timeout_ms / 1000
        group_size = self.config.max_concurrency

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            disable=not show_progress,
        )

        async with BrowserRenderer(self.fetcher_config) as renderer:
            async with PageFetcher(
                self.fetcher_config, renderer=renderer, transport=self._transport
            ) as fetcher:
                with progress:
                    task_id = progress.add_task("Crawling sites...", total=len(sites))

                    for start in range(0, len(sites), group_size):
                        group = sites[start:start + group_size]
                        deadline = time.monotonic() + timeout
                        crawls = await asyncio.gather(
                            *(self._crawl_site(site, fetcher) for site in group)
                        )
                        result.sites.extend(crawls)
                        progress.update(task_id, advance=len(group))
                        logger.info(
                            "Processed group %d/%d, %d sites done",
                            start // group_size + 1,
                            -(-len(sites) // group_size),
                            len(result.sites),
                        )

                        remaining = sites[start + group_size:]
                        if remaining and time.monotonic() > deadline:
                            result.skipped = list(remaining)
                            logger.warning(
                                "Group overran its %.1fs window after %d sites, %d left unprocessed",
                                timeout,
                                len(result.sites),
                                len(result.skipped),
                            )
                            break

        result.pipeline_end = time.monotonic()
        return result

    async def _crawl_site(self, site: str, fetcher: PageFetcher) -> SiteCrawl:
        site = site.strip()
        if "://" not in site:
            site = f"https://{site}"

        try:
            request = CrawlRequest(seed_url=site, **self.crawl_options)
            crawl = await CrawlScheduler(request, fetcher).run()
        except (CrawlerError, ValidationError) as e:
            logger.warning("Crawl of %s failed: %s", site, e)
            return SiteCrawl(site=site, urls=[site], error=str(e))

        seed = normalize_url(site)
        found = [url for url in crawl.filtered_urls if url != seed]
        if self.config.dedupe_languages:
            found = dedupe_language_urls(found, self.config.preferred_language)

        return SiteCrawl(
            site=site,
            urls=[site, *found],
            priority_paths=crawl.priority_paths,
            timed_out=crawl.timed_out,
            outcome=crawl.outcome,
        )

    def print_summary(self, result: OrchestrationResult) -> None:
        """Print a per-site table and totals."""
        table = Table(title="Sites crawled")
        table.add_column("Site", style="cyan", overflow="fold")
        table.add_column("URLs", justify="right")
        table.add_column("Outcome")
        table.add_column("Priority paths")

        for crawl in result.sites:
            if crawl.error:
                outcome = f"[red]error: {crawl.error}[/red]"
            elif crawl.timed_out:
                outcome = "[yellow]timed out[/yellow]"
            else:
                outcome = crawl.outcome.value if crawl.outcome else ""
            table.add_row(
                crawl.site,
                str(len(crawl.urls)),
                outcome,
                ", ".join(crawl.priority_paths or []),
            )

        self.console.print(table)
        total_time = result.pipeline_end - result.pipeline_start
        self.console.print(
            f"  Sites: [green]{len(result.sites)}[/green]"
            f"  Errors: [red]{result.error_count}[/red]"
            f"  Time: {total_time:.1f}s"
        )
        if result.stopped_early:
            self.console.print(
                f"  [yellow]Stopped early, {len(result.skipped)} sites not crawled[/yellow]"
            )
