"""Adaptive domain crawling and link classification."""

from carta_crawler.discovery.aggregator import aggregate
from carta_crawler.discovery.base import CrawlOutcome, CrawlResult, CrawlState, FrontierItem
from carta_crawler.discovery.classifier import LinkClassifier, LinkKind
from carta_crawler.discovery.crawler import CrawlScheduler, crawl_domain

__all__ = [
    "CrawlOutcome",
    "CrawlResult",
    "CrawlScheduler",
    "CrawlState",
    "FrontierItem",
    "LinkClassifier",
    "LinkKind",
    "aggregate",
    "crawl_domain",
]
