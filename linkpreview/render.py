"""Render property records to HTML.

A site can ship its own ``linkpreview.html`` / ``linkpreview_nog.html`` in
its include directory; otherwise the built-in card below is used.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, select_autoescape

from linkpreview.records import legacy_template_context

if TYPE_CHECKING:
    from pathlib import Path

    from linkpreview.config import PreviewConfig
    from linkpreview.records import PropertyRecord, TemplateDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """\
<div class="preview-wrapper">
  <div class="preview-wrapper-inner">
    <div class="preview-content">
{%- if image %}
      <div class="preview-image">
        <a href="{{ url }}" target="_blank" class="preview-img-wrapper">
          <img src="{{ image }}" />
        </a>
      </div>
{%- endif %}
      <div class="preview-body">
        <h2 class="preview-title">
          <a href="{{ url }}" target="_blank">{{ title }}</a>
        </h2>
        <div class="preview-description">{{ description }}</div>
        <div class="preview-footer">
          <a href="//{{ domain }}" target="_blank">{{ domain }}</a>
        </div>
      </div>
    </div>
  </div>
</div>
"""


class TemplateRenderer:
    """Chooses between a site's custom template and :data:`DEFAULT_TEMPLATE`."""

    def __init__(self, config: PreviewConfig) -> None:
        self._config = config
        self._default_env = Environment(autoescape=True, keep_trailing_newline=True)
        self._default = self._default_env.from_string(DEFAULT_TEMPLATE)
        self._custom_env: Environment | None = None

    def custom_template_path(self, descriptor: TemplateDescriptor) -> Path:
        return self._config.templates_dir / descriptor.template_file

    def _custom_environment(self) -> Environment:
        if self._custom_env is None:
            self._custom_env = Environment(
                loader=FileSystemLoader(str(self._config.templates_dir)),
                autoescape=select_autoescape(["html", "htm", "xml"]),
                keep_trailing_newline=True,
            )
        return self._custom_env

    def render(self, record: PropertyRecord, descriptor: TemplateDescriptor) -> str:
        path = self.custom_template_path(descriptor)
        if path.is_file():
            logger.debug("render: custom template %s", path)
            template = self._custom_environment().get_template(descriptor.template_file)
            return template.render(legacy_template_context(record.to_dict()))
        return self.render_default(record)

    def render_default(self, record: PropertyRecord) -> str:
        return self._default.render(record.canonical())
