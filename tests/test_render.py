"""Tests for linkpreview.render."""

from __future__ import annotations

from linkpreview.records import (
    FallbackProperties,
    OpenGraphProperties,
    Variant,
    legacy_template_context,
)
from linkpreview.render import TemplateRenderer


def _record(**overrides) -> FallbackProperties:
    fields = {
        "title": "A Title",
        "url": "https://example.com/post",
        "description": "Something worth reading.",
        "domain": "example.com",
        "image": "https://example.com/cover.png",
    }
    fields.update(overrides)
    return FallbackProperties(**fields)


class TestDefaultTemplate:
    def test_structure(self, config):
        html = TemplateRenderer(config).render_default(_record())
        assert html.startswith('<div class="preview-wrapper">')
        assert '<div class="preview-wrapper-inner">' in html
        assert '<div class="preview-content">' in html
        assert '<a href="https://example.com/post" target="_blank">A Title</a>' in html
        assert '<div class="preview-description">Something worth reading.</div>' in html
        assert '<a href="//example.com" target="_blank">example.com</a>' in html

    def test_single_img_when_image_present(self, config):
        html = TemplateRenderer(config).render_default(_record())
        assert html.count("<img") == 1
        assert '<img src="https://example.com/cover.png" />' in html
        assert 'class="preview-image"' in html

    def test_image_block_omitted_for_none(self, config):
        html = TemplateRenderer(config).render_default(_record(image=None))
        assert "<img" not in html
        assert "preview-image" not in html

    def test_image_block_omitted_for_empty_string(self, config):
        html = TemplateRenderer(config).render_default(_record(image=""))
        assert "<img" not in html
        assert "preview-image" not in html

    def test_values_escaped(self, config):
        html = TemplateRenderer(config).render_default(_record(title="<script>x</script> & co"))
        assert "<script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt; &amp; co" in html

    def test_opengraph_record_uses_canonical_fields(self, config):
        record = OpenGraphProperties(title="OG", url="https://e.com/", domain="e.com", site_name="Site")
        html = TemplateRenderer(config).render_default(record)
        assert "OG" in html
        assert "Site" not in html


class TestCustomTemplate:
    def test_default_used_when_no_custom_template(self, config):
        renderer = TemplateRenderer(config)
        html = renderer.render(_record(), config.descriptor(Variant.FALLBACK))
        assert 'class="preview-wrapper"' in html

    def test_custom_template_path(self, config, site):
        renderer = TemplateRenderer(config)
        path = renderer.custom_template_path(config.descriptor(Variant.OPENGRAPH))
        assert path == site.resolve() / "_includes" / "linkpreview.html"

    def test_custom_template_rendered(self, config, site):
        (site / "_includes" / "linkpreview_nog.html").write_text(
            "<p>{{ title }}|{{ link_title }}|{{ link_domain }}</p>", encoding="utf-8",
        )
        html = TemplateRenderer(config).render(_record(), config.descriptor(Variant.FALLBACK))
        assert html == "<p>A Title|A Title|example.com</p>"

    def test_custom_template_sees_opengraph_fields(self, config, site):
        (site / "_includes" / "linkpreview.html").write_text(
            "{{ site_name }}/{{ link_site_name }}/{{ type }}", encoding="utf-8",
        )
        record = OpenGraphProperties(title="T", type="article", site_name="Blog")
        html = TemplateRenderer(config).render(record, config.descriptor(Variant.OPENGRAPH))
        assert html == "Blog/Blog/article"

    def test_template_chosen_by_descriptor(self, config, site):
        (site / "_includes" / "linkpreview.html").write_text("og", encoding="utf-8")
        renderer = TemplateRenderer(config)
        assert renderer.render(_record(), config.descriptor(Variant.OPENGRAPH)) == "og"
        assert "preview-wrapper" in renderer.render(_record(), config.descriptor(Variant.FALLBACK))

    def test_custom_includes_dir(self, site):
        from linkpreview.config import PreviewConfig

        (site / "partials").mkdir()
        (site / "partials" / "linkpreview_nog.html").write_text("{{ url }}", encoding="utf-8")
        config = PreviewConfig(source_dir=site, includes_dir="partials")
        html = TemplateRenderer(config).render(_record(), config.descriptor(Variant.FALLBACK))
        assert html == "https://example.com/post"


class TestLegacyContext:
    def test_duplicates_every_key(self):
        context = legacy_template_context({"title": "T", "image": None})
        assert context == {"title": "T", "image": None, "link_title": "T", "link_image": None}

    def test_does_not_mutate_input(self):
        fields = {"title": "T"}
        legacy_template_context(fields)
        assert fields == {"title": "T"}
