"""Heading-to-anchor conversion matching dev.to's slug rules."""

from __future__ import annotations

import re

_INLINE_CODE_PATTERN = re.compile(r"`([^`]*)`")
_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
_MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_DASHES_PATTERN = re.compile(r"-+")

# Ruby's [[:punct:]] as applied by the platform, plus hyphens.
_PUNCTUATION_PATTERN = re.compile(r"[!\"#$%&'()*+,./:;<=>?@\[\\\]^_`{|}~՚Ꞌ′″‴〃-]")

# Known subset of the platform's emoji table. Do not extend: a wider table
# changes anchors of articles that are already published.
_EMOJI_PATTERN = re.compile("[\U0001F300-\U0001F9FF\u2600-\u26FF\u2700-\u27BF]")

_RAW_MARKER = " raw "
_ENDRAW_MARKER = " endraw "


def escape_html_entities(text: str) -> str:
    """Replace ``&``, ``<`` and ``>`` by the bare words ``amp``, ``lt`` and ``gt``."""
    return text.replace("&", "amp").replace("<", "lt").replace(">", "gt")


def strip_markdown_links(text: str) -> str:
    """Collapse ``[text](url)`` links to their text."""
    return _MARKDOWN_LINK_PATTERN.sub(r"\1", text)


def slugify(title: str) -> str:
    """Return the anchor fragment the platform generates for ``title``.

    The steps run in a fixed order; reordering them changes the output for
    titles mixing code spans, links and punctuation. Identical titles give
    identical anchors, the platform does not add ``-1`` suffixes.
    """
    slug = title.lower()
    slug = _INLINE_CODE_PATTERN.sub(lambda match: f"`{escape_html_entities(match.group(1))}`", slug)
    slug = _HTML_TAG_PATTERN.sub("", slug)
    slug = strip_markdown_links(slug)
    slug = escape_html_entities(slug)
    slug = _EMOJI_PATTERN.sub("", slug)
    slug = slug.strip()
    slug = _replace_backticks(slug)
    slug = _PUNCTUATION_PATTERN.sub("", slug)
    slug = _WHITESPACE_PATTERN.sub("-", slug)
    slug = _DASHES_PATTERN.sub("-", slug)
    return slug.strip("-")


def _replace_backticks(text: str) -> str:
    parts: list[str] = []
    seen = 0
    for char in text:
        if char != "`":
            parts.append(char)
            continue
        parts.append(_RAW_MARKER if seen % 2 == 0 else _ENDRAW_MARKER)
        seen += 1
    return "".join(parts)


__all__ = ["escape_html_entities", "slugify", "strip_markdown_links"]
