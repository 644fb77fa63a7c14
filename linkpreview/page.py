"""Page fetching and the parsed-page interface the extractors read from.

Uses only the stdlib (``urllib``) for HTTP; parsing is BeautifulSoup + lxml.

Basic usage::

    from linkpreview.page import fetch_page

    page = fetch_page("https://example.com/blog/post")
    print(page.host, page.best_title)
    print(page.meta_properties.get("og:image"))

Already-downloaded HTML::

    page = HTMLPage(html, url="https://example.com/blog/post")
"""

from __future__ import annotations

import gzip
import http.client
import logging
import urllib.error
import urllib.request
import zlib
from functools import cached_property
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from linkpreview.errors import FetchError

if TYPE_CHECKING:
    from linkpreview.config import PreviewConfig

logger = logging.getLogger(__name__)

_HTML_CONTENT_TYPES: frozenset[str] = frozenset({"text/html", "application/xhtml+xml"})

# Paragraphs shorter than this are not used as a description
_MIN_DESCRIPTION_CHARS = 120


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _int_attr(tag: Tag, name: str) -> int:
    raw = _safe_str(tag.get(name)).strip().removesuffix("px")
    return int(raw) if raw.isdigit() else 0


def _first_non_empty(*values: str | None) -> str | None:
    for v in values:
        if v:
            return v
    return None


# ---------------------------------------------------------------------------
# Parsed page
# ---------------------------------------------------------------------------

class HTMLPage:
    """A fetched HTML document plus the heuristics used to preview it.

    *url* is the final URL after redirects; host and root URL derive from it.
    """

    def __init__(self, html: str, url: str) -> None:
        self.html = html
        self.url = url
        self._parsed = urlparse(url)
        self.soup = BeautifulSoup(html, "lxml")

    def __repr__(self) -> str:
        return f"HTMLPage(url={self.url!r})"

    # ---- location ----

    @property
    def host(self) -> str | None:
        return self._parsed.hostname

    @property
    def root_url(self) -> str:
        return f"{self._parsed.scheme}://{self._parsed.netloc}/"

    def absolute(self, ref: str) -> str:
        return urljoin(self.url, ref)

    # ---- meta tags ----

    def _meta_map(self, attr: str) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        for tag in self.soup.find_all("meta"):
            if not isinstance(tag, Tag):
                continue
            key = _safe_str(tag.get(attr)).strip().lower()
            if not key:
                continue
            content = _safe_str(tag.get("content")).strip()
            result.setdefault(key, []).append(content)
        return result

    @cached_property
    def meta_properties(self) -> dict[str, list[str]]:
        """``<meta property=…>`` values keyed by property, in document order."""
        return self._meta_map("property")

    @cached_property
    def meta_names(self) -> dict[str, list[str]]:
        """``<meta name=…>`` values keyed by name, in document order."""
        return self._meta_map("name")

    def _property(self, key: str) -> str | None:
        values = self.meta_properties.get(key)
        return values[0] if values else None

    def _name(self, key: str) -> str | None:
        values = self.meta_names.get(key)
        return values[0] if values else None

    # ---- heuristics ----

    @cached_property
    def best_title(self) -> str | None:
        """Longest of the OpenGraph, Twitter, ``<title>`` and first ``<h1>`` titles."""
        title_tag = self.soup.find("title")
        h1_tag = self.soup.find("h1")
        candidates = [
            self._property("og:title"),
            self._name("twitter:title"),
            title_tag.get_text().strip() if title_tag else None,
            h1_tag.get_text().strip() if h1_tag else None,
        ]
        titles = [c.strip() for c in candidates if c and c.strip()]
        if not titles:
            return None
        return max(titles, key=len)

    @cached_property
    def best_description(self) -> str | None:
        """Meta description, then OpenGraph/Twitter, then the first long paragraph."""
        found = _first_non_empty(
            self._name("description"),
            self._property("og:description"),
            self._name("twitter:description"),
        )
        if found:
            return found
        for p in self.soup.find_all("p"):
            text = " ".join(p.get_text(separator=" ").split())
            if len(text) >= _MIN_DESCRIPTION_CHARS:
                return text
        return None

    @cached_property
    def best_image(self) -> str | None:
        """Declared preview image, else the largest sized ``<img>``; always absolute."""
        declared = _first_non_empty(
            self._property("og:image"),
            self._name("twitter:image"),
            self._name("twitter:image:src"),
            self._image_src_link(),
        )
        if declared:
            return self.absolute(declared)

        best: tuple[int, str] | None = None
        for img in self.soup.find_all("img"):
            if not isinstance(img, Tag):
                continue
            src = _safe_str(img.get("src")).strip()
            area = _int_attr(img, "width") * _int_attr(img, "height")
            if not src or area <= 0:
                continue
            if best is None or area > best[0]:
                best = (area, src)
        return self.absolute(best[1]) if best else None

    def _image_src_link(self) -> str | None:
        for link in self.soup.find_all("link"):
            if not isinstance(link, Tag):
                continue
            rel_val = link.get("rel")
            if isinstance(rel_val, list) and "image_src" in rel_val:
                href = _safe_str(link.get("href")).strip()
                if href:
                    return href
        return None

    @cached_property
    def image_sources(self) -> list[str]:
        """Raw ``src`` of every ``<img>`` in document order."""
        sources = []
        for img in self.soup.find_all("img"):
            if not isinstance(img, Tag):
                continue
            src = _safe_str(img.get("src")).strip()
            if src:
                sources.append(src)
        return sources


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------

@runtime_checkable
class PageFetcher(Protocol):
    """Anything that turns a URL into an :class:`HTMLPage`."""

    def fetch(self, url: str) -> HTMLPage:
        """Fetch *url*; raise :class:`~linkpreview.errors.FetchError` on failure."""
        ...


class _LimitedRedirectHandler(urllib.request.HTTPRedirectHandler):
    def __init__(self, max_redirections: int) -> None:
        super().__init__()
        self.max_redirections = max_redirections


def _decode_body(raw: bytes, headers: Any, url: str, encoding: str) -> str:
    content_encoding = ""
    if headers is not None:
        content_encoding = str(headers.get("Content-Encoding", "") or "").lower().strip()

    try:
        if content_encoding == "gzip":
            raw = gzip.decompress(raw)
        elif content_encoding in ("deflate", "zlib"):
            raw = zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(
            f"{content_encoding} decompression failed for {url}: {exc}", url=url,
        ) from exc

    try:
        return raw.decode(encoding, errors="replace")
    except LookupError as exc:
        raise FetchError(f"Unknown encoding {encoding!r} for {url}", url=url) from exc


def fetch_page(
    url: str,
    *,
    max_redirects: int = 2,
    encoding: str = "utf-8",
    timeout: int = 30,
    user_agent: str | None = None,
) -> HTMLPage:
    """Fetch *url* and return it as a parsed :class:`HTMLPage`.

    No retries are made; a failure surfaces straight to the caller.

    Args:
        url:           Fully-qualified HTTP/HTTPS URL.
        max_redirects: Redirects followed before giving up (default 2).
        encoding:      Encoding forced on the body, whatever the server says.
        timeout:       Request timeout in seconds (default 30).
        user_agent:    Override the default User-Agent string.

    Raises:
        FetchError: On HTTP errors, too many redirects, connection failures,
            non-HTML responses, malformed responses, invalid or unsupported URLs.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise FetchError(f"Unsupported URL scheme: {parsed.scheme!r}", url=url)

    headers = {
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
    }
    if user_agent:
        headers["User-Agent"] = user_agent
    opener = urllib.request.build_opener(_LimitedRedirectHandler(max_redirects))

    logger.info("fetch: %s", url)
    try:
        req = urllib.request.Request(url, headers=headers)
        with opener.open(req, timeout=timeout) as resp:
            content_type = resp.headers.get_content_type()
            if content_type not in _HTML_CONTENT_TYPES:
                raise FetchError(
                    f"Non-HTML response from {url}: {content_type}",
                    url=url,
                    status=getattr(resp, "status", 0) or 0,
                )
            final_url = resp.geturl() or url
            raw: bytes = resp.read()
            html = _decode_body(raw, resp.headers, url, encoding)
    except urllib.error.HTTPError as exc:
        if 300 <= exc.code < 400:
            raise FetchError(
                f"Too many redirects fetching {url} (limit {max_redirects})",
                url=url,
                status=exc.code,
            ) from exc
        raise FetchError(
            f"HTTP {exc.code} fetching {url}: {exc.reason}", url=url, status=exc.code,
        ) from exc
    except urllib.error.URLError as exc:
        raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc
    except OSError as exc:
        raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc
    except http.client.InvalidURL as exc:
        raise FetchError(f"Invalid URL {url}: {exc}", url=url) from exc
    except http.client.HTTPException as exc:
        raise FetchError(f"Bad HTTP response from {url}: {exc!r}", url=url) from exc
    except ValueError as exc:
        raise FetchError(f"Invalid URL {url}: {exc}", url=url) from exc

    if final_url != url:
        logger.debug("fetch: %s redirected to %s", url, final_url)
    return HTMLPage(html, final_url)


class HTTPPageFetcher:
    """Default :class:`PageFetcher` driven by a :class:`PreviewConfig`."""

    def __init__(self, config: PreviewConfig) -> None:
        self._config = config

    def fetch(self, url: str) -> HTMLPage:
        return fetch_page(
            url,
            max_redirects=self._config.max_redirects,
            encoding=self._config.encoding,
            timeout=self._config.timeout,
            user_agent=self._config.user_agent,
        )
