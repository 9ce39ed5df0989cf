"""Line scanner extracting headings outside code fences and HTML comments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

_HEADING_PATTERN = re.compile(r"^(#{1,6}) +(.+)$")
_LIST_PREFIX_PATTERN = re.compile(r"^\s*(?:\d+\.)?[*+-]?\s*")
_FENCE_PATTERN = re.compile(r"^(`{3,}|~{3,})")

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"


@dataclass(frozen=True)
class HeadingEvent:
    """A markdown heading found while scanning a document."""

    level: int
    raw_title: str


class ScanState(Enum):
    NORMAL = "normal"
    IN_CODE_BLOCK = "in_code_block"
    IN_HTML_COMMENT = "in_html_comment"


def fence_marker(line: str) -> Optional[str]:
    """Return the backtick or tilde run opening a fenced block, if any.

    A leading list bullet or ordinal (``- ``, ``* ``, ``1. ``) is ignored so
    fences nested in list items are recognised too.
    """
    remainder = _LIST_PREFIX_PATTERN.sub("", line, count=1)
    match = _FENCE_PATTERN.match(remainder)
    return match.group(1) if match else None


def parse_heading(line: str) -> Optional[HeadingEvent]:
    match = _HEADING_PATTERN.match(line)
    if not match:
        return None
    return HeadingEvent(level=len(match.group(1)), raw_title=match.group(2).strip())


def iter_prose_lines(content: str) -> Iterator[str]:
    """Yield the lines of ``content`` that sit outside code fences and HTML comments.

    An unterminated fence hides every line after it.
    """
    state = ScanState.NORMAL
    code_marker = ""

    for line in content.split("\n"):
        if state is ScanState.IN_CODE_BLOCK:
            if line.strip().startswith(code_marker):
                state = ScanState.NORMAL
                code_marker = ""
            continue

        if state is ScanState.IN_HTML_COMMENT:
            if COMMENT_CLOSE in line:
                state = ScanState.NORMAL
            continue

        marker = fence_marker(line)
        if marker:
            state = ScanState.IN_CODE_BLOCK
            code_marker = marker
            continue

        if COMMENT_OPEN in line and COMMENT_CLOSE not in line:
            state = ScanState.IN_HTML_COMMENT
            continue

        yield line


def scan(content: str, max_level: int = 2) -> Iterator[HeadingEvent]:
    """Yield headings up to ``max_level`` in document order.

    Fenced code blocks and block-level HTML comments are skipped.
    """
    for line in iter_prose_lines(content):
        heading = parse_heading(line)
        if heading and heading.level <= max_level:
            yield heading


__all__ = ["HeadingEvent", "ScanState", "fence_marker", "iter_prose_lines", "parse_heading", "scan"]
