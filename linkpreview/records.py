"""Pydantic models for link preview property records.

A record is what gets cached and rendered.  Two variants exist, one per
extractor, and each serializes to a flat JSON object whose keys are exactly
its field names (in declaration order) followed by any extra keys it was
loaded with.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, NamedTuple

from pydantic import BaseModel, ConfigDict, model_validator


class Variant(str, Enum):
    """Which extractor produced (or should reconstruct) a record."""

    OPENGRAPH = "opengraph"
    FALLBACK = "fallback"


class TemplateDescriptor(NamedTuple):
    """Custom template file name required by an extractor variant."""

    variant: Variant
    template_file: str


CANONICAL_FIELDS: tuple[str, ...] = ("title", "url", "description", "domain", "image")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class PropertyRecord(BaseModel):
    """Common behaviour of both record variants.

    Keys a variant does not declare are kept as extras, so a cached OpenGraph
    entry rebuilt as a fallback record still carries its ``type``,
    ``site_name`` and so on.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    variant: ClassVar[Variant]

    @model_validator(mode="after")
    def check_extras_are_strings(self) -> PropertyRecord:
        for key, value in (self.model_extra or {}).items():
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{key} must be a string or null, got {type(value).__name__}")
        return self

    def to_dict(self) -> dict[str, str | None]:
        """Ordered field mapping (declared fields, then extras), as written to the cache."""
        return self.model_dump(mode="json")

    def canonical(self) -> dict[str, str | None]:
        """The five fields every variant carries."""
        return {name: getattr(self, name, None) for name in CANONICAL_FIELDS}


class OpenGraphProperties(PropertyRecord):
    """Record built from a page carrying the basic OpenGraph tags (https://ogp.me/#metadata)."""

    variant: ClassVar[Variant] = Variant.OPENGRAPH

    title: str | None = None
    type: str | None = None
    url: str | None = None
    image: str | None = None
    description: str | None = None
    determiner: str | None = None
    locale: str | None = None
    locale_alternate: str | None = None
    site_name: str | None = None
    domain: str | None = None


class FallbackProperties(PropertyRecord):
    """Record built from page heuristics when OpenGraph markup is missing.

    ``image`` is ``""`` rather than ``None`` when the page was searched and
    nothing usable turned up.
    """

    variant: ClassVar[Variant] = Variant.FALLBACK

    title: str | None = None
    url: str | None = None
    description: str | None = None
    domain: str | None = None
    image: str | None = None


RECORD_TYPES: dict[Variant, type[PropertyRecord]] = {
    Variant.OPENGRAPH: OpenGraphProperties,
    Variant.FALLBACK: FallbackProperties,
}


def legacy_template_context(fields: dict[str, Any]) -> dict[str, Any]:
    """Return *fields* plus a ``link_``-prefixed duplicate of every key.

    Custom templates written against 0.x read ``link_title``, ``link_url``
    and so on.  The duplicates are deprecated and go away in 1.0.0; only
    the custom-template render path calls this.
    """
    context = dict(fields)
    for key, value in fields.items():
        context["link_" + key] = value
    return context
