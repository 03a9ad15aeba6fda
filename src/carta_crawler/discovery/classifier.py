"""Link normalization, internal/external classification and filtering."""

import re
from collections.abc import Iterable
from enum import Enum

from carta_crawler.config import CrawlRequest, FilterMode
from carta_crawler.patterns.registry import MENU_PATTERN, FilterPatternSet
from carta_crawler.utils.url_utils import exact_prefix, is_same_domain, normalize_url


class LinkKind(str, Enum):
    """Where a link points relative to the seed."""

    INTERNAL = "internal"
    EXTERNAL = "external"


def _compile(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


class LinkClassifier:
    """Decide what to do with the links found on a crawled page.

    Holds no crawl state: the priority path set is owned by the scheduler
    and passed in where it is needed.
    """

    def __init__(
        self,
        seed_url: str,
        filter_mode: FilterMode = FilterMode.MENU,
        include_patterns: Iterable[str] = (),
        exclude_patterns: Iterable[str] = (),
        exact_url_prefix: bool = False,
        preset: FilterPatternSet = MENU_PATTERN,
    ):
        self.seed_url = normalize_url(seed_url)
        self.filter_mode = filter_mode
        self.exact_url_prefix = exact_url_prefix
        # Built from the raw seed: normalizing first would turn /es/ into /es
        self._seed_prefix = exact_prefix(seed_url).rstrip("/")

        if filter_mode == FilterMode.MENU:
            self._exclude_re = _compile(preset.exclude_patterns)
            self._include_re = _compile(preset.include_patterns)
        elif filter_mode == FilterMode.CUSTOM:
            self._exclude_re = _compile(exclude_patterns)
            self._include_re = _compile(include_patterns)
        else:
            self._exclude_re = []
            self._include_re = []
        self._priority_re = _compile(preset.priority_patterns)

    @classmethod
    def from_request(cls, request: CrawlRequest) -> "LinkClassifier":
        return cls(
            request.seed_url,
            filter_mode=request.filter_mode,
            include_patterns=request.include_patterns,
            exclude_patterns=request.exclude_patterns,
            exact_url_prefix=request.exact_url_prefix,
        )

    @staticmethod
    def normalize(url: str) -> str:
        """Strip query, fragment and trailing slashes.

        Raises:
            ValueError: if the URL cannot be parsed.
        """
        return normalize_url(url)

    def classify(self, url: str) -> LinkKind:
        """Classify a normalized URL as internal or external to the seed."""
        if self.exact_url_prefix:
            internal = (
                url in (self.seed_url, self._seed_prefix)
                or url.startswith(self._seed_prefix + "/")
            )
        else:
            internal = is_same_domain(url, self.seed_url)
        return LinkKind.INTERNAL if internal else LinkKind.EXTERNAL

    def passes_filter(self, url: str, path: str, anchor_text: str = "") -> bool:
        """Check a link against the exclude and include patterns.

        Exclusion wins over inclusion. Without include patterns every link
        that is not excluded passes.
        """
        if self.filter_mode == FilterMode.NONE:
            return True

        path = path.lower()
        if any(p.search(url) or p.search(path) for p in self._exclude_re):
            return False

        if self._include_re:
            text = anchor_text.lower()
            return any(
                p.search(url) or p.search(path) or p.search(text)
                for p in self._include_re
            )
        return True

    def matches_include(self, url: str) -> bool:
        """Include-pattern check alone, as applied to the final URL list."""
        if self.filter_mode == FilterMode.NONE or not self._include_re:
            return True
        return any(p.search(url) for p in self._include_re)

    def detect_priority_path(self, path: str) -> str | None:
        """Return the first path segment as a priority prefix, if ``path`` looks like a menu."""
        path = path.lower()
        if not any(p.search(path) for p in self._priority_re):
            return None
        segments = [segment for segment in path.split("/") if segment]
        if not segments:
            return None
        return "/" + segments[0]

    def register_priority_path(self, path: str, priority_paths: set[str]) -> str | None:
        """Add the priority prefix of ``path`` to ``priority_paths``, if any."""
        prefix = self.detect_priority_path(path)
        if prefix is not None:
            priority_paths.add(prefix)
        return prefix

    @staticmethod
    def in_priority_path(path: str, priority_paths: Iterable[str]) -> bool:
        path = path.lower()
        return any(path.startswith(prefix) for prefix in priority_paths)
