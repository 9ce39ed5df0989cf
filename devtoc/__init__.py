"""Markdown authoring helpers for dev.to articles."""

__version__ = "0.3.0"
