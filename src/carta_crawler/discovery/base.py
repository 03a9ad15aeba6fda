"""Data model shared by the crawl scheduler and the result aggregator."""

import time
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel


class CrawlOutcome(str, Enum):
    """Lifecycle of one crawl. The last three are terminal reasons."""

    INIT = "init"
    RUNNING = "running"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    CAP_REACHED = "cap_reached"
    FRONTIER_EXHAUSTED = "frontier_exhausted"


@dataclass(frozen=True)
class FrontierItem:
    """A discovered URL waiting to be fetched."""

    url: str
    depth: int
    no_depth_limit: bool = False  # Under a priority path, exempt from max_depth


@dataclass
class CrawlState:
    """Mutable state of a single crawl, owned by the scheduler."""

    visited: set[str] = field(default_factory=set)
    found: dict[str, int] = field(default_factory=dict)  # url -> depth discovered at
    external: set[str] = field(default_factory=set)
    priority_paths: set[str] = field(default_factory=set)
    adaptive_mode: bool = False
    started_at: float = field(default_factory=time.monotonic)
    deadline: float = 0.0
    timed_out: bool = False
    outcome: CrawlOutcome = CrawlOutcome.INIT
    waves: int = 0

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def enter_adaptive_mode(self) -> None:
        # One-way latch: nothing ever sets it back to False
        self.adaptive_mode = True


class CrawlResult(BaseModel):
    """Final output of a domain crawl."""

    domain: str
    urls_found: int
    urls: list[str]
    filtered_urls: list[str]
    priority_paths: list[str] | None = None
    external_urls: list[str] | None = None
    timed_out: bool = False
    outcome: CrawlOutcome = CrawlOutcome.FRONTIER_EXHAUSTED
