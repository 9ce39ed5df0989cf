"""Link checking for markdown articles."""

from __future__ import annotations

import re
import ssl
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import HTTPSHandler, ProxyHandler, Request, build_opener

from .article import load_article
from .config import LinkCheckSettings
from .logging import get_logger
from .toc import iter_prose_lines, scan, slugify

# Status codes sent by bot protection rather than by a missing page.
BOT_BLOCKED_CODES = frozenset({403, 429, 503})

_URL_LINK_PATTERN = re.compile(r"\[[^\]]*\]\((https?://[^)\s]+)\)")
_ANCHOR_LINK_PATTERN = re.compile(r"\[[^\]]*\]\(#([^)\s]*)\)")

_logger = get_logger("links")

Opener = Callable[..., Any]


class LinkStatus(str, Enum):
    OK = "ok"
    BROKEN = "broken"
    ERROR = "error"


@dataclass
class LinkResult:
    url: str
    status: LinkStatus
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is LinkStatus.OK


@dataclass
class FileLinkReport:
    """Link check outcome for a single article."""

    path: Path
    links: List[LinkResult] = field(default_factory=list)
    broken_anchors: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def broken_links(self) -> List[LinkResult]:
        return [link for link in self.links if not link.ok]

    @property
    def problem_count(self) -> int:
        return len(self.broken_links) + len(self.broken_anchors)


def extract_urls(content: str) -> List[str]:
    """Return unique http(s) targets of inline links in first-seen order."""
    seen: Dict[str, None] = {}
    for match in _URL_LINK_PATTERN.finditer(content):
        seen.setdefault(match.group(1), None)
    return list(seen)


def find_broken_anchors(content: str) -> List[str]:
    """Return ``#anchor`` link targets that match no heading of ``content``.

    Links inside code fences and HTML comments are not checked.
    """
    anchors = {slugify(heading.raw_title) for heading in scan(content, max_level=6)}
    broken: Dict[str, None] = {}
    for line in iter_prose_lines(content):
        for match in _ANCHOR_LINK_PATTERN.finditer(line):
            target = match.group(1)
            if target not in anchors:
                broken.setdefault(target, None)
    return list(broken)


class LinkChecker:
    """Checks remote URLs with HEAD, falling back to GET, and retries transient failures."""

    def __init__(
        self,
        settings: LinkCheckSettings | None = None,
        *,
        opener: Opener | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or LinkCheckSettings()
        self._open = opener or self._build_opener(self.settings).open
        self._sleep = sleep

    def check_url(self, url: str) -> LinkResult:
        attempt = 0
        while True:
            result = self._check_once(url)
            if result.ok or not self._is_transient(result) or attempt >= self.settings.retries:
                return result
            delay = self.settings.backoff * (2**attempt)
            attempt += 1
            _logger.debug("Retrying %s in %.2fs (attempt %d)", url, delay, attempt + 1)
            self._sleep(delay)

    def check_urls(self, urls: Iterable[str]) -> List[LinkResult]:
        url_list = list(urls)
        if not url_list:
            return []
        workers = max(1, min(self.settings.concurrency, len(url_list)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="devtoc-links") as pool:
            return list(pool.map(self.check_url, url_list))

    def check_file(self, path: Path) -> FileLinkReport:
        """Check every remote link and in-page anchor of an article.

        Files without a ``title`` in their front matter are not articles and
        are reported as skipped.
        """
        article = load_article(path)
        if not article.title:
            return FileLinkReport(path=path, skipped=True)

        urls = extract_urls(article.content)
        for key in ("cover_image", "canonical_url"):
            value = article.data.get(key)
            if isinstance(value, str) and value.startswith("http") and value not in urls:
                urls.append(value)
        _logger.debug("Found %d unique URL(s) in %s", len(urls), path)

        return FileLinkReport(
            path=path,
            links=self.check_urls(urls),
            broken_anchors=find_broken_anchors(article.content),
        )

    def _check_once(self, url: str) -> LinkResult:
        _logger.debug("Checking URL %s", url)
        try:
            self._probe(url)
        except HTTPError as exc:
            if exc.code in BOT_BLOCKED_CODES:
                return LinkResult(url=url, status=LinkStatus.OK)
            return LinkResult(
                url=url,
                status=LinkStatus.BROKEN,
                status_code=exc.code,
                error=str(exc.reason),
            )
        except (URLError, OSError, ValueError) as exc:
            reason = getattr(exc, "reason", None) or exc
            return LinkResult(url=url, status=LinkStatus.ERROR, error=str(reason))
        return LinkResult(url=url, status=LinkStatus.OK)

    def _probe(self, url: str) -> None:
        try:
            self._fetch(url, "HEAD")
            return
        except (URLError, OSError) as exc:
            # Some servers reject HEAD outright.
            _logger.debug("HEAD %s failed (%s); retrying with GET", url, exc)
        self._fetch(url, "GET")

    def _fetch(self, url: str, method: str) -> None:
        request = Request(url, method=method, headers={"User-Agent": self.settings.user_agent})
        with self._open(request, timeout=self.settings.timeout):
            pass

    @staticmethod
    def _is_transient(result: LinkResult) -> bool:
        if result.status is LinkStatus.ERROR:
            return True
        return result.status_code is not None and result.status_code >= 500

    @staticmethod
    def _build_opener(settings: LinkCheckSettings):
        context = ssl.create_default_context()
        if not settings.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        # Only the configured proxy is used; environment proxies are resolved by the config layer.
        proxies = {"http": settings.proxy, "https": settings.proxy} if settings.proxy else {}
        return build_opener(ProxyHandler(proxies), HTTPSHandler(context=context))


__all__ = [
    "BOT_BLOCKED_CODES",
    "FileLinkReport",
    "LinkChecker",
    "LinkResult",
    "LinkStatus",
    "extract_urls",
    "find_broken_anchors",
]
