"""Tests for devtoc.links."""

from __future__ import annotations

from urllib.error import HTTPError, URLError

from devtoc.config import LinkCheckSettings
from devtoc.links import LinkChecker, LinkStatus, extract_urls, find_broken_anchors


class FakeResponse:
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeOpener:
    """Replays canned outcomes keyed by (method, url) and records requests."""

    def __init__(self, outcomes=None) -> None:
        self.outcomes = outcomes or {}
        self.calls: list[tuple[str, str, float | None, str | None]] = []

    def __call__(self, request, timeout=None):
        method = request.get_method()
        self.calls.append((method, request.full_url, timeout, request.get_header("User-agent")))
        outcome = self.outcomes.get((method, request.full_url))
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse()


def _http_error(url: str, code: int, reason: str) -> HTTPError:
    return HTTPError(url, code, reason, hdrs=None, fp=None)


def test_extract_urls_returns_unique_remote_links_in_order() -> None:
    content = (
        "See [one](https://one.example) and [two](http://two.example/path).\n"
        "Again [one](https://one.example), [local](./file.md), [anchor](#intro)."
    )
    assert extract_urls(content) == ["https://one.example", "http://two.example/path"]


def test_find_broken_anchors_uses_platform_slugs() -> None:
    content = (
        "# Intro\n\n"
        "Jump to [usage](#its-awesome), [deep](#deep-dive) or [nowhere](#missing).\n\n"
        "## It's awesome!\n\n"
        "#### Deep dive\n"
    )
    assert find_broken_anchors(content) == ["missing"]


def test_find_broken_anchors_skips_code_fences_and_comments() -> None:
    content = (
        "## Real\n\n"
        "```markdown\n[example](#not-a-heading)\n```\n\n"
        "<!--\n[draft](#later)\n-->\n\n"
        "See [real](#real) and [gone](#gone).\n"
    )
    assert find_broken_anchors(content) == ["gone"]


def test_check_url_ok_with_head() -> None:
    opener = FakeOpener()
    checker = LinkChecker(LinkCheckSettings(timeout=3.0, user_agent="agent/1"), opener=opener)

    result = checker.check_url("https://ok.example")

    assert result.status is LinkStatus.OK
    assert opener.calls == [("HEAD", "https://ok.example", 3.0, "agent/1")]


def test_check_url_falls_back_to_get() -> None:
    url = "https://nohead.example"
    opener = FakeOpener({("HEAD", url): _http_error(url, 405, "Method Not Allowed")})

    result = LinkChecker(opener=opener).check_url(url)

    assert result.ok
    assert [call[0] for call in opener.calls] == ["HEAD", "GET"]


def test_check_url_reports_broken_links_without_retrying() -> None:
    url = "https://gone.example"
    error = _http_error(url, 404, "Not Found")
    opener = FakeOpener({("HEAD", url): error, ("GET", url): error})
    sleeps: list[float] = []

    result = LinkChecker(LinkCheckSettings(retries=2), opener=opener, sleep=sleeps.append).check_url(url)

    assert result.status is LinkStatus.BROKEN
    assert result.status_code == 404
    assert result.error == "Not Found"
    assert sleeps == []


def test_check_url_treats_bot_blocking_as_ok() -> None:
    url = "https://guarded.example"
    error = _http_error(url, 429, "Too Many Requests")
    opener = FakeOpener({("HEAD", url): error, ("GET", url): error})
    assert LinkChecker(opener=opener).check_url(url).ok


def test_check_url_retries_transport_errors_with_backoff() -> None:
    url = "https://down.example"
    error = URLError("connection refused")
    opener = FakeOpener({("HEAD", url): error, ("GET", url): error})
    sleeps: list[float] = []
    settings = LinkCheckSettings(retries=2, backoff=0.5)

    result = LinkChecker(settings, opener=opener, sleep=sleeps.append).check_url(url)

    assert result.status is LinkStatus.ERROR
    assert result.error == "connection refused"
    assert sleeps == [0.5, 1.0]
    assert len(opener.calls) == 6


def test_check_urls_preserves_order() -> None:
    bad = "https://bad.example"
    error = _http_error(bad, 500, "Server Error")
    opener = FakeOpener({("HEAD", bad): error, ("GET", bad): error})
    checker = LinkChecker(LinkCheckSettings(retries=0, concurrency=3), opener=opener)

    results = checker.check_urls(["https://a.example", bad, "https://c.example"])

    assert [result.url for result in results] == ["https://a.example", bad, "https://c.example"]
    assert [result.status for result in results] == [LinkStatus.OK, LinkStatus.BROKEN, LinkStatus.OK]


def test_check_file_skips_non_articles(article_builder) -> None:
    article_builder.write({"notes.md": "[link](https://example.com)\n"})
    report = LinkChecker(opener=FakeOpener()).check_file(article_builder.path("notes.md"))
    assert report.skipped is True
    assert report.links == []


def test_check_file_includes_front_matter_urls(article_builder) -> None:
    article_builder.write(
        {
            "post.md": """
                ---
                title: Post
                cover_image: https://img.example/cover.png
                canonical_url: https://blog.example/post
                ---

                Read [this](https://blog.example/post) and [that](#nowhere).
                """,
        }
    )
    opener = FakeOpener()

    report = LinkChecker(opener=opener).check_file(article_builder.path("post.md"))

    assert [link.url for link in report.links] == [
        "https://blog.example/post",
        "https://img.example/cover.png",
    ]
    assert report.broken_anchors == ["nowhere"]
    assert report.problem_count == 1
