"""linkpreview.pipeline - URL → cached-or-fetched record → rendered HTML.

Basic usage::

    from linkpreview import LinkPreview, PreviewConfig

    previewer = LinkPreview(PreviewConfig(source_dir="site", cache_dir="_cache"))
    html = previewer.preview("https://example.com/blog/post")

Several URLs at once::

    html_blocks = previewer.preview_many(urls, max_workers=4)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from urllib.parse import urlparse

from pydantic import ValidationError

from linkpreview.cache import CacheStore
from linkpreview.config import PreviewConfig
from linkpreview.errors import CacheCorrupt
from linkpreview.extractors.selector import select_for_page, select_for_record
from linkpreview.page import HTTPPageFetcher, PageFetcher
from linkpreview.records import FallbackProperties, PropertyRecord
from linkpreview.render import TemplateRenderer

logger = logging.getLogger(__name__)

_ON_ERROR_MODES = ("raise", "skip", "include")


class LinkPreview:
    """Produces preview HTML for URLs, caching extracted records on disk.

    Calls for the same URL are serialized so only one of them fetches and
    writes the cache entry; calls for different URLs run independently.
    """

    def __init__(
        self,
        config: PreviewConfig | None = None,
        *,
        fetcher: PageFetcher | None = None,
        renderer: TemplateRenderer | None = None,
        store: CacheStore | None = None,
    ) -> None:
        self.config = config or PreviewConfig()
        self.fetcher = fetcher or HTTPPageFetcher(self.config)
        self.renderer = renderer or TemplateRenderer(self.config)
        self.store = store or CacheStore(self.config.cache_dir)
        # url -> [lock, number of callers holding or waiting on it]
        self._locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _single_flight(self, url: str) -> Iterator[None]:
        """Hold the lock for *url*; the entry is dropped once nobody needs it."""
        with self._locks_guard:
            entry = self._locks.setdefault(url, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[url]

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def properties(self, url: str) -> PropertyRecord:
        """Return the property record for *url*, from cache or a live fetch.

        Raises:
            FetchError:   The page could not be fetched.
            CacheCorrupt: A cache entry exists but cannot be decoded.
        """
        with self._single_flight(url):
            logger.debug("url ==> %s, filepath ==> %s", url, self.store.path_for(url))

            cached = self.store.get(url)
            if cached is not None:
                return self._from_cache(url, cached)

            page = self.fetcher.fetch(url)
            extractor = select_for_page(page)
            record = extractor.build_from_page(page, self.config.image_overrides)
            logger.debug("extracted %s record for %s", extractor.variant.value, url)
            self.store.put(url, record)
            return record

    def _from_cache(self, url: str, data: dict) -> PropertyRecord:
        extractor = select_for_record(data)
        try:
            return extractor.build_from_record(data)
        except ValidationError as exc:
            raise CacheCorrupt(
                f"Cache entry for {url} does not hold a valid record: {exc}",
                url=url,
                path=str(self.store.path_for(url)),
            ) from exc

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, record: PropertyRecord) -> str:
        return self.renderer.render(record, self.config.descriptor(record.variant))

    def preview(self, url: str) -> str:
        """Return the rendered preview block for *url*."""
        return self.render(self.properties(url))

    def preview_manual(self, title: str, url: str) -> str:
        """Render *url* with a literal *title*; nothing is fetched or cached."""
        record = FallbackProperties(title=title, url=url, domain=urlparse(url).hostname)
        return self.render(record)

    def preview_many(
        self,
        urls: list[str],
        *,
        max_workers: int = 4,
        on_error: str = "raise",
    ) -> list[str | None]:
        """Render several URLs concurrently, returning blocks in input order.

        Duplicate URLs run the pipeline once and share the result.

        Args:
            urls:        URLs to preview.
            max_workers: Maximum number of concurrent fetch threads.
            on_error:    ``"raise"`` (default) re-raises the first failure;
                         ``"skip"`` drops failed URLs from the result;
                         ``"include"`` keeps ``None`` in their slot.
        """
        if on_error not in _ON_ERROR_MODES:
            raise ValueError(f"on_error must be 'raise', 'skip', or 'include'; got {on_error!r}")

        unique = list(dict.fromkeys(urls))
        rendered: dict[str, str | None] = {}

        def _preview_one(url: str) -> tuple[str, str | None]:
            try:
                return url, self.preview(url)
            except Exception as exc:
                if on_error == "raise":
                    raise
                logger.warning("preview_many: failed to preview %s: %s", url, exc)
                return url, None

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for url, html in executor.map(_preview_one, unique):
                rendered[url] = html

        results = [rendered[url] for url in urls]
        if on_error == "include":
            return results
        return [r for r in results if r is not None]
