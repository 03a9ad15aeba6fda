"""Adaptive crawler that discovers the menu pages of a website."""

__version__ = "0.1.0"
