"""Adaptive breadth-first crawler for a single domain."""

import asyncio
import logging
import time
from collections import deque
from urllib.parse import urlparse

from carta_crawler.config import CrawlRequest, FetcherConfig, TimeoutPolicy
from carta_crawler.discovery.aggregator import aggregate
from carta_crawler.discovery.base import CrawlOutcome, CrawlResult, CrawlState, FrontierItem
from carta_crawler.discovery.classifier import LinkClassifier, LinkKind
from carta_crawler.exceptions import FetchFailure, InvalidInput, PerPageTimeout
from carta_crawler.extractor.page_extractor import PageLink, PageSnapshot
from carta_crawler.fetcher.page_fetcher import PageFetcher
from carta_crawler.utils.url_utils import is_absolute_http_url, normalize_url

logger = logging.getLogger(__name__)


class CrawlScheduler:
    """Drive one crawl: frontier, budgets, adaptive pruning and timeouts.

    The frontier is drained in FIFO waves of at most ``batch_size`` items
    fetched concurrently. All crawl state is touched only from coroutines on
    the running event loop, and every visited/found check happens before
    the page fetch is awaited, so a wave never fetches or enqueues the same
    URL twice.

    Each fetch is bounded by ``per_page_timeout``; a page that is too slow
    or fails contributes no links. The global timeout is checked before
    every wave.
    """

    def __init__(
        self,
        request: CrawlRequest,
        fetcher: PageFetcher,
        classifier: LinkClassifier | None = None,
    ):
        self.request = request
        self.fetcher = fetcher
        self.classifier = classifier or LinkClassifier.from_request(request)
        self.state = CrawlState()

    async def run(self) -> CrawlResult:
        """Crawl from the seed until a budget runs out or nothing is left.

        Raises:
            InvalidInput: if the seed URL is not an absolute http(s) URL.
        """
        request = self.request
        seed = self._validate_seed(request.seed_url)

        state = self.state = CrawlState()
        state.deadline = state.started_at + request.global_timeout
        state.found[seed] = 0
        frontier: deque[FrontierItem] = deque([FrontierItem(seed, 0)])
        state.outcome = CrawlOutcome.RUNNING

        logger.info(
            "Crawling %s (max_depth=%d, max_urls=%d, filter=%s)",
            seed,
            request.max_depth,
            request.max_urls,
            request.filter_mode.value,
        )

        while True:
            if len(state.found) >= request.max_urls:
                state.outcome = CrawlOutcome.CAP_REACHED
                break
            if not frontier:
                state.outcome = CrawlOutcome.FRONTIER_EXHAUSTED
                break
            if time.monotonic() >= state.deadline:
                state.timed_out = True
                state.outcome = CrawlOutcome.DEADLINE_EXCEEDED
                break

            wave = [frontier.popleft() for _ in range(min(request.batch_size, len(frontier)))]
            state.waves += 1
            logger.debug(
                "Wave %d: %d items, queue=%d, found=%d, visited=%d, priority_paths=%d, adaptive=%s",
                state.waves,
                len(wave),
                len(frontier),
                len(state.found),
                len(state.visited),
                len(state.priority_paths),
                state.adaptive_mode,
            )

            await asyncio.gather(*(self._process_item(item, frontier) for item in wave))

            self._update_adaptive_mode(wave)
            if request.timeout_policy == TimeoutPolicy.SLIDING:
                state.deadline = time.monotonic() + request.global_timeout

        logger.info(
            "Crawl of %s finished: %s after %.1fs, %d URLs found, %d visited",
            seed,
            state.outcome.value,
            state.elapsed,
            len(state.found),
            len(state.visited),
        )
        return aggregate(state, request, self.classifier)

    @staticmethod
    def _validate_seed(url: str) -> str:
        if not is_absolute_http_url(url):
            raise InvalidInput(url)
        return normalize_url(url)

    async def _process_item(self, item: FrontierItem, frontier: deque[FrontierItem]) -> None:
        state = self.state
        request = self.request

        if item.url in state.visited:
            return
        if not item.no_depth_limit and item.depth >= request.max_depth:
            return
        state.visited.add(item.url)

        # Depth 0 always runs so it can discover the priority paths
        if (
            state.adaptive_mode
            and item.depth > 0
            and not self.classifier.in_priority_path(urlparse(item.url).path, state.priority_paths)
        ):
            logger.debug("Adaptive mode: skipping %s", item.url)
            return

        try:
            snapshot = await self._fetch(item.url)
        except FetchFailure as e:
            logger.debug("Abandoning %s: %s", item.url, e.reason)
            return

        for link in snapshot.links:
            self._handle_link(link, item, frontier)

    async def _fetch(self, url: str) -> PageSnapshot:
        """Fetch a page, cancelling the fetch if it outlives the per-page timeout."""
        timeout = self.request.per_page_timeout
        try:
            return await asyncio.wait_for(self.fetcher.fetch(url), timeout=timeout)
        except asyncio.TimeoutError:
            raise PerPageTimeout(url, timeout) from None

    def _handle_link(self, link: PageLink, parent: FrontierItem, frontier: deque[FrontierItem]) -> None:
        state = self.state
        request = self.request
        classifier = self.classifier

        try:
            url = classifier.normalize(link.url)
            path = urlparse(url).path
        except ValueError:
            logger.debug("Dropping malformed link %r", link.url)
            return

        if classifier.classify(url) == LinkKind.EXTERNAL:
            if request.include_external_links:
                state.external.add(url)
            return

        if not classifier.passes_filter(url, path, link.text):
            return

        if parent.depth == 0 and request.adaptive_search:
            classifier.register_priority_path(path, state.priority_paths)

        if url in state.found or len(state.found) >= request.max_urls:
            return

        depth = parent.depth + 1
        no_depth_limit = parent.no_depth_limit or classifier.detect_priority_path(path) is not None
        state.found[url] = depth
        if no_depth_limit or depth < request.max_depth:
            frontier.append(FrontierItem(url, depth, no_depth_limit))

    def _update_adaptive_mode(self, wave: list[FrontierItem]) -> None:
        """Latch adaptive mode once a whole wave lies below depth 0."""
        state = self.state
        if not self.request.adaptive_search or state.adaptive_mode:
            return
        if state.priority_paths and all(item.depth > 0 for item in wave):
            state.enter_adaptive_mode()
            logger.info(
                "Adaptive mode on, exploring only %s",
                ", ".join(sorted(state.priority_paths)),
            )


async def crawl_domain(
    seed_url: str,
    fetcher: PageFetcher | None = None,
    fetcher_config: FetcherConfig | None = None,
    **options,
) -> CrawlResult:
    """Crawl ``seed_url`` with the given ``CrawlRequest`` options.

    Without a ``fetcher`` a private one is opened and closed around the
    crawl, browser included.
    """
    request = CrawlRequest(seed_url=seed_url, **options)
    if fetcher is not None:
        return await CrawlScheduler(request, fetcher).run()
    async with PageFetcher(fetcher_config) as own_fetcher:
        return await CrawlScheduler(request, own_fetcher).run()
