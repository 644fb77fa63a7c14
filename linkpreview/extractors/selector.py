"""Pick the extractor for a freshly fetched page or a cached record.

The two rules deliberately differ.  A cache entry carries no information
about which tags the page had, so a cached record is treated as OpenGraph
whenever it has an image.  A fallback record that found an image is
therefore rebuilt as OpenGraph on the next cache hit.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from linkpreview.extractors.fallback import FallbackExtractor
from linkpreview.extractors.opengraph import OpenGraphExtractor
from linkpreview.records import Variant

if TYPE_CHECKING:
    from linkpreview.overrides import ImageOverride
    from linkpreview.page import HTMLPage
    from linkpreview.records import PropertyRecord

REQUIRED_OG_TAGS: tuple[str, ...] = ("og:title", "og:type", "og:url", "og:image")


@runtime_checkable
class Extractor(Protocol):
    """Builds one record variant from a page or from cached JSON."""

    variant: Variant

    def build_from_page(
        self, page: HTMLPage, overrides: Sequence[ImageOverride] = ...,
    ) -> PropertyRecord:
        ...

    def build_from_record(self, data: Mapping[str, Any]) -> PropertyRecord:
        ...


EXTRACTORS: dict[Variant, Extractor] = {
    Variant.OPENGRAPH: OpenGraphExtractor(),
    Variant.FALLBACK: FallbackExtractor(),
}


def has_opengraph(properties: Mapping[str, Any]) -> bool:
    return all(tag in properties for tag in REQUIRED_OG_TAGS)


def select_for_page(page: HTMLPage) -> Extractor:
    """OpenGraph when the page declares every tag in :data:`REQUIRED_OG_TAGS`."""
    if has_opengraph(page.meta_properties):
        return EXTRACTORS[Variant.OPENGRAPH]
    return EXTRACTORS[Variant.FALLBACK]


def select_for_record(data: Mapping[str, Any]) -> Extractor:
    """OpenGraph when the cached record has a truthy ``image``."""
    if data.get("image"):
        return EXTRACTORS[Variant.OPENGRAPH]
    return EXTRACTORS[Variant.FALLBACK]
