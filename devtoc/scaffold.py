"""Scaffolding for new articles."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from .article import render_front_matter
from .logging import get_logger

ARTICLE_TEMPLATE = "article.md.j2"
DEFAULT_TITLE = "My article title"
DEFAULT_DESCRIPTION = "My article description"
DEFAULT_BODY = "My article content"

_DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")
_logger = get_logger("scaffold")


def article_path(name: str | Path) -> Path:
    """Return ``name`` with a ``.md`` suffix appended when missing."""
    path = Path(name)
    if path.suffix.lower() == ".md":
        return path
    return path.with_name(path.name + ".md")


def default_front_matter(
    *, title: str = DEFAULT_TITLE, organization: Optional[str] = None
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "title": title,
        "description": DEFAULT_DESCRIPTION,
        "tags": "",
        "cover_image": "",
        "canonical_url": None,
        "published": False,
    }
    if organization:
        data["organization"] = organization
    return data


def render_article(
    *,
    title: str = DEFAULT_TITLE,
    organization: Optional[str] = None,
    templates_dir: Optional[Path] = None,
) -> str:
    env = _create_env(templates_dir)
    template = env.get_template(ARTICLE_TEMPLATE)
    front_matter = render_front_matter(default_front_matter(title=title, organization=organization))
    return template.render(front_matter=front_matter, body=DEFAULT_BODY, title=title)


def create_article(
    name: str | Path,
    *,
    title: str = DEFAULT_TITLE,
    organization: Optional[str] = None,
    templates_dir: Optional[Path] = None,
) -> Path:
    """Write a new draft article and return its path."""
    path = article_path(name)
    if path.exists():
        raise FileExistsError(f'File "{path}" already exists.')
    content = render_article(title=title, organization=organization, templates_dir=templates_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    _logger.debug("Created article %s from %s", path, ARTICLE_TEMPLATE)
    return path


def _create_env(templates_dir: Optional[Path]) -> Environment:
    directories: List[str] = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(_DEFAULT_TEMPLATES_DIR))
    loader = FileSystemLoader(directories)
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


__all__ = ["article_path", "create_article", "default_front_matter", "render_article"]
