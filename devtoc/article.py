"""Front matter handling for markdown articles."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

FRONT_MATTER_DELIMITER = "---"


class ArticleError(ValueError):
    """Raised when an article's front matter cannot be parsed."""


@dataclass
class Article:
    """A markdown article split into front matter and body."""

    path: Optional[Path]
    data: Dict[str, Any] = field(default_factory=dict)
    content: str = ""

    @property
    def title(self) -> Optional[str]:
        value = self.data.get("title")
        if value is None:
            return None
        title = str(value).strip()
        return title or None


def parse_article(text: str, path: Path | None = None) -> Article:
    """Split ``text`` into YAML front matter and markdown body."""
    lines = text.split("\n")
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return Article(path=path, content=text)

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONT_MATTER_DELIMITER:
            break
    else:
        return Article(path=path, content=text)

    raw = "\n".join(lines[1:index])
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as exc:
        label = path.name if path else "article"
        raise ArticleError(f"Invalid front matter in {label}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        label = path.name if path else "article"
        raise ArticleError(f"Front matter in {label} must be a mapping")
    return Article(path=path, data=data, content="\n".join(lines[index + 1 :]))


def load_article(path: Path) -> Article:
    return parse_article(path.read_text(encoding="utf-8"), path=path)


def render_front_matter(data: Dict[str, Any]) -> str:
    """Serialise ``data`` as a front matter block, keeping key order."""
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"{FRONT_MATTER_DELIMITER}\n{dumped}{FRONT_MATTER_DELIMITER}\n"


__all__ = ["Article", "ArticleError", "load_article", "parse_article", "render_front_matter"]
