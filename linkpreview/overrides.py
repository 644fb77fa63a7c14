"""Patch table for preview images that some sites publish broken.

Rules are checked in order and the first match wins::

    from linkpreview.overrides import resolve_image

    resolve_image("https://docs.aws.amazon.com/x", "https://a/warning.png")
    # -> the AWS cloud icon
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

AWS_ICON = "https://upload.wikimedia.org/wikipedia/commons/5/5c/AWS_Simple_Icons_AWS_Cloud.svg"
TERRAFORM_LOGO = (
    "https://raw.githubusercontent.com/github/explore/"
    "80688e429a7d4ef2fca1e82350fe8e3517d3494d/topics/terraform/terraform.png"
)


class ImageOverride(NamedTuple):
    """Replace the preview image of pages whose URL contains *page_marker*.

    When *image_marker* is set the candidate image URL must contain it too,
    so a missing candidate never matches such a rule.
    """

    page_marker: str
    image: str
    image_marker: str | None = None

    def matches(self, page_url: str, candidate: str | None) -> bool:
        if self.page_marker not in page_url:
            return False
        if self.image_marker is None:
            return True
        return candidate is not None and self.image_marker in candidate


DEFAULT_OVERRIDES: tuple[ImageOverride, ...] = (
    # AWS docs pages advertise their "warning" admonition icon as og:image
    ImageOverride("://docs.aws.amazon.", AWS_ICON, image_marker="warning"),
    ImageOverride("://www.terraform.io", TERRAFORM_LOGO),
)


def resolve_image(
    page_url: str,
    candidate: str | None,
    rules: Sequence[ImageOverride] = DEFAULT_OVERRIDES,
) -> str | None:
    """Return the replacement image for *page_url*, or *candidate* unchanged."""
    for rule in rules:
        if rule.matches(page_url, candidate):
            return rule.image
    return candidate
