"""Derive article file names from their front matter titles."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set

from .article import ArticleError, load_article
from .logging import get_logger

MAX_NAME_WORDS = 5

STOP_WORDS = frozenset(
    """
    a an the to for with of in on at by from as that which your you how what why
    when where who and or is are it i my we our its be do does did has have had
    can could will would should may might must shall this these those am was were
    been being but if so than too very just about into through during before after
    above below between under again further then once here there all each few more
    most other some such no nor not only own same any both while
    """.split()
)

CATEGORY_SYNONYMS = {
    "k8s": ("k8s", "kubernetes"),
    "gitlab": ("gitlab",),
    "git": ("git",),
    "misc": ("misc",),
}

_LEADING_EMOJI_PATTERN = re.compile("^[\U0001F300-\U0001F9FF\u2600-\u26FF\u2700-\u27BF]+\\s*")
_DISALLOWED_PATTERN = re.compile(r"[^a-zA-Z0-9-]")
_NUMBER_PATTERN = re.compile(r"^\d+$")

_logger = get_logger("rename")


class RenameError(RuntimeError):
    """Raised when an article cannot be renamed."""


@dataclass(frozen=True)
class RenamePlan:
    source: Path
    target: Path

    @property
    def changed(self) -> bool:
        return self.source != self.target


def _category_words(category: Optional[str]) -> Set[str]:
    if not category:
        return set()
    key = category.lower()
    return set(CATEGORY_SYNONYMS.get(key, (key,)))


def name_from_title(title: str, category: Optional[str] = None) -> str:
    """Return a kebab-case name built from the first meaningful words of ``title``."""
    excluded = _category_words(category)
    cleaned = _LEADING_EMOJI_PATTERN.sub("", title).replace(":", " ").strip()

    words = []
    for raw in cleaned.split():
        word = _DISALLOWED_PATTERN.sub("", raw.replace("/", "-")).lower()
        if not word or word in STOP_WORDS or word in excluded:
            continue
        if _NUMBER_PATTERN.match(word):
            continue
        words.append(word)
    return "-".join(words[:MAX_NAME_WORDS])


def plan_rename(path: Path) -> RenamePlan:
    """Compute the target name for ``path`` keeping everything up to the last ``_``.

    ``2024_K8S_old-name.md`` keeps ``2024_K8S_`` and filters ``k8s`` and
    ``kubernetes`` out of the generated words.
    """
    if not path.is_file():
        raise RenameError(f"File not found: {path}")
    try:
        article = load_article(path)
    except ArticleError as exc:
        raise RenameError(str(exc)) from exc
    title = article.title
    if not title:
        raise RenameError(f"No title found in front matter: {path}")

    basename = path.stem
    prefix = ""
    category: Optional[str] = None
    if "_" in basename:
        prefix = basename[: basename.rindex("_") + 1]
        category = prefix[:-1].rsplit("_", 1)[-1]

    generated = name_from_title(title, category)
    if not generated:
        raise RenameError(f"Could not generate a name from title: {title}")

    target = path.with_name(f"{prefix}{generated}{path.suffix}")
    if target != path and target.exists():
        raise RenameError(f"Target file already exists: {target.name}")
    return RenamePlan(source=path, target=target)


def apply_rename(plan: RenamePlan, *, dry_run: bool = False) -> Path:
    if not plan.changed or dry_run:
        return plan.target
    plan.source.rename(plan.target)
    _logger.debug("Renamed %s to %s", plan.source, plan.target)
    return plan.target


__all__ = ["RenameError", "RenamePlan", "apply_rename", "name_from_title", "plan_rename"]
