from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.article_builder import ArticleBuilder


@pytest.fixture
def article_builder(tmp_path: Path) -> ArticleBuilder:
    """Provide a reusable article folder rooted at the pytest tmp_path."""
    return ArticleBuilder(tmp_path)
