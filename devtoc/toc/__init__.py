"""Table-of-contents generation for dev.to flavoured markdown."""

from .composer import TocEntry, TocOptions, build_entries, compose
from .placement import TOC_PLACEHOLDER, TocBlock, compose_only, find_toc_block, needs_update, update
from .scanner import HeadingEvent, ScanState, iter_prose_lines, scan
from .slugify import slugify, strip_markdown_links

__all__ = [
    "HeadingEvent",
    "ScanState",
    "TOC_PLACEHOLDER",
    "TocBlock",
    "TocEntry",
    "TocOptions",
    "build_entries",
    "compose",
    "compose_only",
    "find_toc_block",
    "iter_prose_lines",
    "needs_update",
    "scan",
    "slugify",
    "strip_markdown_links",
    "update",
]
