"""URL filter pattern presets."""

from carta_crawler.patterns.registry import MENU_PATTERN, FilterPatternSet, PatternRegistry

__all__ = [
    "FilterPatternSet",
    "MENU_PATTERN",
    "PatternRegistry",
]
