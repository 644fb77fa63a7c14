"""linkpreview - cached link preview blocks for static site builds.

Quick usage::

    from linkpreview import LinkPreview, PreviewConfig

    previewer = LinkPreview(PreviewConfig(source_dir="site"))
    html = previewer.preview("https://example.com/blog/some-post")

Inside Jinja2 templates::

    from linkpreview.tag import PreviewExtension, install

    env = Environment(extensions=[PreviewExtension])
    install(env, PreviewConfig(source_dir="site"))
    # {% preview page.link %}
"""

from linkpreview.cache import CacheStore, cache_key
from linkpreview.config import PreviewConfig
from linkpreview.errors import CacheCorrupt, FetchError, LinkPreviewError
from linkpreview.overrides import ImageOverride, resolve_image
from linkpreview.pipeline import LinkPreview
from linkpreview.records import (
    FallbackProperties,
    OpenGraphProperties,
    PropertyRecord,
    TemplateDescriptor,
    Variant,
)

__version__ = "0.9.0"
__all__ = [
    "CacheCorrupt",
    "CacheStore",
    "FallbackProperties",
    "FetchError",
    "ImageOverride",
    "LinkPreview",
    "LinkPreviewError",
    "OpenGraphProperties",
    "PreviewConfig",
    "PropertyRecord",
    "TemplateDescriptor",
    "Variant",
    "cache_key",
    "resolve_image",
]
