"""Navi - keyboard-driven command palette engine."""

__version__ = "1.0.0"
