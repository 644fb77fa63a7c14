"""Heuristic extractor for pages without OpenGraph markup."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from linkpreview.overrides import DEFAULT_OVERRIDES, ImageOverride, resolve_image
from linkpreview.records import FallbackProperties, Variant

if TYPE_CHECKING:
    from linkpreview.page import HTMLPage


def find_logo(page: HTMLPage) -> str | None:
    """First ``<img>`` whose source mentions ``logo``, made absolute."""
    logos = list(dict.fromkeys(src for src in page.image_sources if "logo" in src))
    if not logos:
        return None
    return page.absolute(logos[0])


def best_image(page: HTMLPage) -> str:
    """Page's best image, else a logo, else ``""`` (searched, nothing found)."""
    image = page.best_image
    if image:
        return image
    return find_logo(page) or ""


class FallbackExtractor:
    variant = Variant.FALLBACK

    def build_from_page(
        self,
        page: HTMLPage,
        overrides: Sequence[ImageOverride] = DEFAULT_OVERRIDES,
    ) -> FallbackProperties:
        return FallbackProperties(
            title=page.best_title,
            url=page.url,
            description=page.best_description,
            domain=page.host,
            image=resolve_image(page.url, best_image(page), overrides),
        )

    def build_from_record(self, data: Mapping[str, Any]) -> FallbackProperties:
        return FallbackProperties.model_validate(dict(data))
