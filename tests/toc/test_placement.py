"""Tests for devtoc.toc.placement."""

from __future__ import annotations

import pytest

from devtoc.toc import TocOptions
from devtoc.toc.placement import TocBlock, compose_only, find_toc_block, needs_update, update

SIMPLE_TOC = (
    "<!-- TOC start -->\n"
    "\n"
    "- [Title](#title)\n"
    "   * [Section](#section)\n"
    "\n"
    "<!-- TOC end -->"
)


def test_needs_update_detects_markers() -> None:
    assert needs_update("# Title\n\n[TOC]\n\n## Section") is True
    assert needs_update("# Title\n\n{%- # TOC start -%}\n- item\n{%- # TOC end -%}\n\n## Section") is True
    assert needs_update("<!-- TOC start -->\n<!-- TOC end -->") is True
    assert needs_update("{% comment %}TOC start{% endcomment %}\n{% comment %}TOC end{% endcomment %}") is True
    assert needs_update("# Title\n\n## Section") is False


def test_needs_update_ignores_unterminated_start_marker() -> None:
    assert needs_update("<!-- TOC start -->\n# Title\n## Section") is False


def test_needs_update_requires_placeholder_on_its_own_line() -> None:
    assert needs_update("See [TOC] below") is False
    assert needs_update("   [TOC]   ") is True


def test_find_toc_block_prefers_marker_pair_over_placeholder() -> None:
    content = "[TOC]\n\n<!-- TOC start -->\n- old\n<!-- TOC end -->"
    assert find_toc_block(content) == TocBlock(
        start=2,
        end=4,
        start_marker="<!-- TOC start -->",
        end_marker="<!-- TOC end -->",
    )
    placeholder = find_toc_block("# A\n[TOC]\n## B")
    assert placeholder is not None
    assert (placeholder.start, placeholder.end, placeholder.is_placeholder) == (1, 1, True)


def test_compose_only_lists_headings_up_to_level_two() -> None:
    content = "# Title\n\n## Section 1\n\n### Subsection\n\n## Section 2"
    assert compose_only(content) == (
        "- [Title](#title)\n"
        "   * [Section 1](#section-1)\n"
        "   * [Section 2](#section-2)"
    )
    assert "[Subsection](#subsection)" in compose_only(content, TocOptions(max_level=3))


def test_update_inserts_at_document_start() -> None:
    result = update("# Title\n\n## Section")
    assert result == f"{SIMPLE_TOC}\n\n# Title\n\n## Section"


def test_update_inserts_after_front_matter() -> None:
    content = "---\ntitle: Test\n---\n\n\n# Title\n\n## Section"
    result = update(content)
    assert result == f"---\ntitle: Test\n---\n\n{SIMPLE_TOC}\n\n# Title\n\n## Section"


def test_update_inserts_after_crlf_front_matter() -> None:
    content = "---\r\ntitle: Test\r\n---\r\n\r\n# Title\r\n\r\n## Section\r\n"
    result = update(content)
    assert result.startswith("---\r\ntitle: Test\r\n---\r\n\r\n<!-- TOC start -->\n")
    assert result.endswith("<!-- TOC end -->\r\n\r\n# Title\r\n\r\n## Section\r\n")
    assert "[Section](#section)" in result
    assert update(result) == result


def test_update_replaces_existing_block_in_place() -> None:
    content = (
        "---\ntitle: Test\n---\n\n"
        "{%- # TOC start -%}\n\n- old\n\n{%- # TOC end -%}\n\n"
        "# Title\n\n## Section"
    )
    result = update(content)
    assert result == (
        "---\ntitle: Test\n---\n\n"
        "{%- # TOC start -%}\n\n- [Title](#title)\n   * [Section](#section)\n\n{%- # TOC end -%}\n\n"
        "# Title\n\n## Section"
    )
    assert "- old" not in result


def test_update_replaces_placeholder_at_its_position() -> None:
    content = "# Title\n\nIntro text.\n\n[TOC]\n\n## Section\n\nBody."
    result = update(content)
    assert result == f"# Title\n\nIntro text.\n\n{SIMPLE_TOC}\n\n## Section\n\nBody."


def test_update_uses_configured_marker_style_for_new_blocks() -> None:
    result = update("[TOC]\n# Title", TocOptions(marker_style="liquid"))
    assert result == "{%- # TOC start -%}\n\n- [Title](#title)\n\n{%- # TOC end -%}\n# Title"


def test_update_regenerates_empty_marker_pair() -> None:
    content = "Intro\n<!-- TOC start -->\n<!-- TOC end -->\n## Only"
    result = update(content)
    assert result == "Intro\n<!-- TOC start -->\n\n- [Only](#only)\n\n<!-- TOC end -->\n## Only"


def test_update_keeps_surrounding_content_untouched() -> None:
    before = "Preamble line\n\n> quote\n"
    after = "\n## Section\n\nText with [TOC] inline.\n\n```\n## fake heading\n```\n"
    content = f"{before}<!-- TOC start -->\n- stale\n<!-- TOC end -->{after}"
    result = update(content)
    assert result.startswith(before + "<!-- TOC start -->\n")
    assert result.endswith("<!-- TOC end -->" + after)
    assert result.count("<!-- TOC start -->") == 1
    assert "fake heading](#" not in result


def test_update_is_noop_without_headings() -> None:
    stale = "Intro\n\n<!-- TOC start -->\n- [Gone](#gone)\n<!-- TOC end -->\n\n### Too deep"
    assert update(stale) == stale
    assert update("Just text\n\n[TOC]\n") == "Just text\n\n[TOC]\n"


@pytest.mark.parametrize(
    "content",
    [
        "# Title\n\n## Section",
        "---\ntitle: Test\n---\n# Title\n## A\n### skipped\n## B\n",
        "Intro\n\n[TOC]\n\n## One\n\n## One\n",
        "---\ntitle: x\n---\n\n{%- # TOC start -%}\n- old\n{%- # TOC end -%}\n\n## Real\n```\n## Fake\n```\n",
        "\n\n\n## Leading blanks",
        "---\r\ntitle: x\r\n---\r\n## Windows\r\n",
    ],
)
def test_update_is_idempotent(content: str) -> None:
    once = update(content)
    assert update(once) == once


@pytest.mark.parametrize("content", ["", "\n\n", "```", "<!--", "[TOC]", "---\n---", "<!-- TOC start -->"])
def test_entry_points_are_total(content: str) -> None:
    assert update(content) == content
    assert compose_only(content) == ""
    assert isinstance(needs_update(content), bool)
