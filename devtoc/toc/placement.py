"""Locate, strip and reinsert the managed TOC block of a document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..logging import get_logger
from .composer import TocOptions, compose
from .scanner import scan

TOC_PLACEHOLDER = "[TOC]"
START_TOKEN = "TOC start"
END_TOKEN = "TOC end"
START_PREFIXES = ("{%-", "{% comment %}", "<!--")

MARKERS: Dict[str, Tuple[str, str]] = {
    "html": ("<!-- TOC start -->", "<!-- TOC end -->"),
    "liquid": ("{%- # TOC start -%}", "{%- # TOC end -%}"),
}

_FRONT_MATTER_PATTERN = re.compile(r"^---[ \t]*\r?\n(?:[\s\S]*?\n)?---[ \t]*(?:\r?\n|$)")

_logger = get_logger("toc")


@dataclass(frozen=True)
class TocBlock:
    """Inclusive line span of an existing TOC or ``[TOC]`` placeholder."""

    start: int
    end: int
    start_marker: Optional[str] = None
    end_marker: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.start_marker is None


def is_start_marker(line: str) -> bool:
    trimmed = line.strip()
    return START_TOKEN in trimmed and trimmed.startswith(START_PREFIXES)


def is_end_marker(line: str) -> bool:
    return END_TOKEN in line


def find_toc_block(content: str) -> Optional[TocBlock]:
    """Return the authoritative TOC block of ``content``, if any.

    A start/end marker pair wins over a ``[TOC]`` placeholder. A start marker
    without a matching end marker is ignored.
    """
    lines = content.split("\n")
    for index, line in enumerate(lines):
        if not is_start_marker(line):
            continue
        for end in range(index + 1, len(lines)):
            if is_end_marker(lines[end]):
                return TocBlock(start=index, end=end, start_marker=line, end_marker=lines[end])
        break

    for index, line in enumerate(lines):
        if line.strip() == TOC_PLACEHOLDER:
            return TocBlock(start=index, end=index)
    return None


def needs_update(content: str) -> bool:
    """Return True when the document carries TOC markers or a ``[TOC]`` placeholder."""
    return find_toc_block(content) is not None


def compose_only(content: str, options: TocOptions | None = None) -> str:
    """Return the TOC markup for ``content`` without touching the document."""
    options = options or TocOptions()
    return compose(scan(content, options.max_level), options)


def update(content: str, options: TocOptions | None = None) -> str:
    """Regenerate the TOC of ``content`` and return the full document.

    An existing block is replaced at its position; otherwise the TOC goes
    after the front matter, or at the top. Documents without headings up to
    ``max_level`` come back unchanged.
    """
    options = options or TocOptions()
    start_marker, end_marker = MARKERS[options.marker_style]
    lines = content.split("\n")
    position: Optional[int] = None

    block = find_toc_block(content)
    if block is not None:
        _logger.debug("Found existing TOC at lines %d-%d", block.start + 1, block.end + 1)
        del lines[block.start : block.end + 1]
        position = block.start
        if not block.is_placeholder:
            start_marker = block.start_marker or start_marker
            end_marker = block.end_marker or end_marker

    remaining = "\n".join(lines)
    toc = compose(scan(remaining, options.max_level), options)
    if not toc:
        _logger.debug("No headings up to level %d; leaving document untouched", options.max_level)
        return content

    wrapped: List[str] = [start_marker, "", *toc.split("\n"), "", end_marker]
    if position is not None:
        lines[position:position] = wrapped
        return "\n".join(lines)
    return _insert_at_top(remaining, "\n".join(wrapped))


def _insert_at_top(content: str, block: str) -> str:
    match = _FRONT_MATTER_PATTERN.match(content)
    if match:
        # Keep the document's line endings around the inserted block.
        newline = "\r\n" if match.group(0).endswith("\r\n") else "\n"
        front_matter = content[: match.end()].rstrip("\r\n") + newline
        body = content[match.end() :].lstrip("\r\n")
        return f"{front_matter}{newline}{block}{newline}{newline}{body}"
    body = content.lstrip("\n")
    return f"{block}\n\n{body}"


__all__ = [
    "MARKERS",
    "TOC_PLACEHOLDER",
    "TocBlock",
    "compose_only",
    "find_toc_block",
    "is_end_marker",
    "is_start_marker",
    "needs_update",
    "update",
]
