"""Extractor for pages carrying the basic OpenGraph tags."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from linkpreview.overrides import DEFAULT_OVERRIDES, ImageOverride, resolve_image
from linkpreview.records import OpenGraphProperties, Variant

if TYPE_CHECKING:
    from linkpreview.page import HTMLPage

# Record field -> OpenGraph property
_OG_FIELDS: dict[str, str] = {
    "title": "og:title",
    "type": "og:type",
    "url": "og:url",
    "image": "og:image",
    "description": "og:description",
    "determiner": "og:determiner",
    "locale": "og:locale",
    "locale_alternate": "og:locale:alternate",
    "site_name": "og:site_name",
}


def _first_property(properties: Mapping[str, Sequence[str]], key: str) -> str | None:
    values = properties.get(key)
    if not values:
        return None
    return values[0]


def _absolute_from_root(url: str | None, root_url: str) -> str | None:
    """Resolve a root-relative ``/path`` against *root_url*; leave others alone."""
    if url is None:
        return None
    if url.startswith("/"):
        return urljoin(root_url, url)
    return url


class OpenGraphExtractor:
    variant = Variant.OPENGRAPH

    def build_from_page(
        self,
        page: HTMLPage,
        overrides: Sequence[ImageOverride] = DEFAULT_OVERRIDES,
    ) -> OpenGraphProperties:
        properties = page.meta_properties
        fields: dict[str, Any] = {
            name: _first_property(properties, key) for name, key in _OG_FIELDS.items()
        }
        image = _absolute_from_root(fields["image"], page.root_url)
        fields["image"] = resolve_image(page.url, image, overrides)
        fields["domain"] = page.host
        return OpenGraphProperties(**fields)

    def build_from_record(self, data: Mapping[str, Any]) -> OpenGraphProperties:
        return OpenGraphProperties.model_validate(dict(data))
