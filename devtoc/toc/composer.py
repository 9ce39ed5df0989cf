"""Render heading events as an indented bullet list of anchor links."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .scanner import HeadingEvent
from .slugify import slugify, strip_markdown_links

MARKER_STYLES = ("html", "liquid")


@dataclass(frozen=True)
class TocOptions:
    """Rendering options for generated tables of contents."""

    indent_chars: str = "-*+"
    indent_spaces: int = 3
    max_level: int = 2
    trim_toc_indent: bool = True
    marker_style: str = "html"

    def __post_init__(self) -> None:
        if not self.indent_chars:
            raise ValueError("indent_chars must contain at least one bullet character")
        if self.indent_spaces < 0:
            raise ValueError("indent_spaces must not be negative")
        if not 1 <= self.max_level <= 6:
            raise ValueError("max_level must be between 1 and 6")
        if self.marker_style not in MARKER_STYLES:
            raise ValueError(f"marker_style must be one of: {', '.join(MARKER_STYLES)}")


@dataclass(frozen=True)
class TocEntry:
    indent: int
    display_title: str
    anchor: str


def build_entries(events: Iterable[HeadingEvent], options: TocOptions) -> List[TocEntry]:
    """Derive TOC entries, normalising indents to the shallowest heading."""
    headings = list(events)
    if not headings:
        return []
    base_level = min(event.level for event in headings) if options.trim_toc_indent else 1
    return [
        TocEntry(
            indent=event.level - base_level,
            display_title=strip_markdown_links(event.raw_title),
            anchor=slugify(event.raw_title),
        )
        for event in headings
    ]


def compose(events: Iterable[HeadingEvent], options: TocOptions | None = None) -> str:
    """Return the TOC markdown for ``events``, or an empty string when there are none."""
    options = options or TocOptions()
    bullets = options.indent_chars
    lines: List[str] = []
    for entry in build_entries(events, options):
        spaces = " " * (entry.indent * options.indent_spaces)
        # Alternate bullets per depth so renderers keep sibling levels apart.
        bullet = bullets[entry.indent % len(bullets)]
        lines.append(f"{spaces}{bullet} [{entry.display_title}](#{entry.anchor})")
    return "\n".join(lines)


__all__ = ["MARKER_STYLES", "TocEntry", "TocOptions", "build_entries", "compose"]
