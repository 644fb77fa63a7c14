"""Shared pytest fixtures."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from linkpreview.config import PreviewConfig
from linkpreview.errors import FetchError
from linkpreview.page import HTMLPage

FIXTURES_DIR = Path(__file__).parent / "fixtures"

OG_URL = "https://example.com/blog/caching-link-previews"
PLAIN_URL = "https://plain.example.net/about"
PARTIAL_URL = "https://partial.example.org/"


def read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class StubFetcher:
    """In-memory page fetcher that counts calls per URL."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages = dict(pages or {})
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> HTMLPage:
        with self._lock:
            self.calls.append(url)
        if url not in self.pages:
            raise FetchError(f"HTTP 404 fetching {url}: Not Found", url=url, status=404)
        return HTMLPage(self.pages[url], url)


@pytest.fixture
def og_html() -> str:
    return read_fixture("og_article.html")


@pytest.fixture
def plain_html() -> str:
    return read_fixture("plain_page.html")


@pytest.fixture
def partial_og_html() -> str:
    return read_fixture("partial_og.html")


@pytest.fixture
def og_page(og_html) -> HTMLPage:
    return HTMLPage(og_html, OG_URL)


@pytest.fixture
def plain_page(plain_html) -> HTMLPage:
    return HTMLPage(plain_html, PLAIN_URL)


@pytest.fixture
def stub_fetcher(og_html, plain_html, partial_og_html) -> StubFetcher:
    return StubFetcher({
        OG_URL: og_html,
        PLAIN_URL: plain_html,
        PARTIAL_URL: partial_og_html,
    })


@pytest.fixture
def site(tmp_path) -> Path:
    """A site source directory with an existing cache directory."""
    (tmp_path / "_cache").mkdir()
    (tmp_path / "_includes").mkdir()
    return tmp_path


@pytest.fixture
def config(site) -> PreviewConfig:
    return PreviewConfig(source_dir=site, cache_dir=site / "_cache")
