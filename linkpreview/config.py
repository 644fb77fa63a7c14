"""Build-wide settings for the preview pipeline.

One :class:`PreviewConfig` is created per build and handed to
:class:`~linkpreview.pipeline.LinkPreview`; nothing in the package reads
module-level settings at call time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from linkpreview.overrides import DEFAULT_OVERRIDES, ImageOverride
from linkpreview.records import TemplateDescriptor, Variant

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
CACHE_DIR = "_cache"
INCLUDES_DIR = "_includes"

OPENGRAPH_TEMPLATE = "linkpreview.html"
FALLBACK_TEMPLATE = "linkpreview_nog.html"

MAX_REDIRECTS = 2
ENCODING = "utf-8"
FETCH_TIMEOUT = 30

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

_ENV_PREFIX = "LINKPREVIEW_"


@dataclass(frozen=True)
class PreviewConfig:
    """Immutable configuration for one build.

    Attributes:
        source_dir:       Site source directory; custom templates are looked
                          up under ``source_dir / includes_dir``.
        cache_dir:        Directory holding ``<md5>.json`` cache entries.
                          Relative paths resolve against the CWD.  Caching is
                          skipped (with a warning) when it does not exist.
        includes_dir:     Template include directory name inside *source_dir*.
        opengraph_template / fallback_template:
                          Custom template file names per extractor variant.
        max_redirects:    Redirects followed before the fetch fails.
        encoding:         Text encoding forced on every fetched page.
        timeout:          Network timeout in seconds.
        user_agent:       User-Agent header sent with every fetch.
        image_overrides:  Ordered image patch rules; first match wins.
    """

    source_dir: Path = Path(".")
    cache_dir: Path = Path(CACHE_DIR)
    includes_dir: str = INCLUDES_DIR
    opengraph_template: str = OPENGRAPH_TEMPLATE
    fallback_template: str = FALLBACK_TEMPLATE
    max_redirects: int = MAX_REDIRECTS
    encoding: str = ENCODING
    timeout: int = FETCH_TIMEOUT
    user_agent: str = USER_AGENT
    image_overrides: tuple[ImageOverride, ...] = field(default=DEFAULT_OVERRIDES)

    def __post_init__(self) -> None:
        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must be >= 0; got {self.max_redirects}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0; got {self.timeout}")
        # Accept plain strings from callers and CLI flags
        object.__setattr__(self, "source_dir", Path(self.source_dir))
        object.__setattr__(self, "cache_dir", Path(self.cache_dir))
        object.__setattr__(self, "image_overrides", tuple(self.image_overrides))

    def descriptor(self, variant: Variant) -> TemplateDescriptor:
        """Return the template descriptor for an extractor *variant*."""
        if variant is Variant.OPENGRAPH:
            return TemplateDescriptor(variant, self.opengraph_template)
        return TemplateDescriptor(variant, self.fallback_template)

    @property
    def templates_dir(self) -> Path:
        return self.source_dir.resolve() / self.includes_dir

    def with_overrides(self, *rules: ImageOverride) -> PreviewConfig:
        """Return a copy whose override table checks *rules* first."""
        return replace(self, image_overrides=(*rules, *self.image_overrides))

    @classmethod
    def from_env(cls, **overrides: object) -> PreviewConfig:
        """Build a config from ``LINKPREVIEW_*`` environment variables.

        Recognised variables: ``LINKPREVIEW_SOURCE_DIR``,
        ``LINKPREVIEW_CACHE_DIR``, ``LINKPREVIEW_INCLUDES_DIR``,
        ``LINKPREVIEW_TIMEOUT``, ``LINKPREVIEW_USER_AGENT``.  Keyword
        arguments win over the environment.
        """
        values: dict[str, object] = {}
        for name in ("source_dir", "cache_dir", "includes_dir", "user_agent"):
            raw = os.environ.get(_ENV_PREFIX + name.upper())
            if raw:
                values[name] = raw
        raw_timeout = os.environ.get(_ENV_PREFIX + "TIMEOUT")
        if raw_timeout:
            try:
                values["timeout"] = int(raw_timeout)
            except ValueError as exc:
                raise ValueError(
                    f"{_ENV_PREFIX}TIMEOUT must be an integer; got {raw_timeout!r}",
                ) from exc
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
