"""Content-addressed JSON cache of property records.

Every entry lives at ``<cache_dir>/<md5(url)>.json``.  Entries are never
revalidated: once a URL is cached it is not fetched again until the file is
removed by hand.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from linkpreview.errors import CacheCorrupt

if TYPE_CHECKING:
    from linkpreview.records import PropertyRecord

logger = logging.getLogger(__name__)


def cache_key(url: str) -> str:
    """Lowercase hex MD5 of the raw URL; no normalization is applied."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()  # noqa: S324 - identity, not security


class CacheStore:
    """Reads and writes ``<md5>.json`` entries under *cache_dir*."""

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir)

    @property
    def available(self) -> bool:
        return self.cache_dir.is_dir()

    def path_for(self, url: str) -> Path:
        return self.cache_dir / f"{cache_key(url)}.json"

    def get(self, url: str) -> dict[str, Any] | None:
        """Return the cached JSON object for *url*, or ``None`` on a miss.

        Raises:
            CacheCorrupt: The entry exists but is not a JSON object.
        """
        path = self.path_for(url)
        if not path.is_file():
            logger.debug("cache miss: %s (%s)", url, path)
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CacheCorrupt(
                f"Cache entry {path} for {url} is not valid JSON: {exc}",
                url=url,
                path=str(path),
            ) from exc
        if not isinstance(data, dict):
            raise CacheCorrupt(
                f"Cache entry {path} for {url} is not a JSON object",
                url=url,
                path=str(path),
            )
        logger.debug("cache hit: %s (%s)", url, path)
        return data

    def put(self, url: str, record: PropertyRecord) -> bool:
        """Persist *record* for *url*.

        Returns ``False`` without writing when the cache directory is
        missing; a warning is logged and the build carries on uncached.
        """
        if not self.available:
            logger.warning(
                "'%s' directory does not exist. Create it for caching.", self.cache_dir,
            )
            return False

        path = self.path_for(url)
        payload = json.dumps(record.to_dict(), ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}.", suffix=".tmp", dir=self.cache_dir,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("cache write: %s -> %s", url, path)
        return True
