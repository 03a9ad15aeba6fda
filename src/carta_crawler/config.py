"""Configuration management with Pydantic models."""

import re
import tomllib
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class FilterMode(str, Enum):
    """Which URL pattern set filters discovered links."""

    NONE = "none"
    MENU = "menu"
    CUSTOM = "custom"


class TimeoutPolicy(str, Enum):
    """How the global crawl timeout is measured."""

    ABSOLUTE = "absolute"  # Fixed deadline from crawl start
    SLIDING = "sliding"  # Deadline pushed forward after every completed wave


class CrawlRequest(BaseModel):
    """Options for a single domain crawl."""

    seed_url: str
    max_depth: int = Field(default=2, ge=0)
    max_urls: int = Field(default=50, gt=0)
    include_external_links: bool = False
    global_timeout_ms: int = Field(default=25000, gt=0)
    per_page_timeout_ms: int = Field(default=10000, gt=0)
    batch_size: int = Field(default=5, gt=0)
    filter_mode: FilterMode = FilterMode.MENU
    include_patterns: list[str] = Field(default_factory=list)
    exclude_patterns: list[str] = Field(default_factory=list)
    adaptive_search: bool = True
    exact_url_prefix: bool = False
    timeout_policy: TimeoutPolicy = TimeoutPolicy.ABSOLUTE

    @field_validator("include_patterns", "exclude_patterns")
    @classmethod
    def _check_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern {pattern!r}: {e}") from e
        return patterns

    @property
    def global_timeout(self) -> float:
        return self.global_timeout_ms / 1000

    @property
    def per_page_timeout(self) -> float:
        return self.per_page_timeout_ms / 1000

    @classmethod
    def from_toml(cls, path: Path, **overrides) -> "CrawlRequest":
        """Load crawl options from a TOML file.

        Keyword overrides (e.g. from the command line) win over file values;
        ``None`` overrides are ignored.
        """
        with open(path, "rb") as f:
            data = tomllib.load(f)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)


class FetcherConfig(BaseModel):
    """Configuration for page fetching."""

    http_timeout_ms: int = Field(default=10000, ge=100, le=120000)
    render_timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    user_agent: str = "CartaCrawler/0.1 (+menu discovery)"
    wait_after_load_ms: int = Field(default=0, ge=0, le=10000)
    headless: bool = True


class OrchestratorConfig(BaseModel):
    """Configuration for crawling several sites in one run."""

    max_concurrency: int = Field(default=3, ge=1, le=20)
    site_timeout_ms: int = Field(default=60000, gt=0)
    dedupe_languages: bool = False
    preferred_language: str = "es"
