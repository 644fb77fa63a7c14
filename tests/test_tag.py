"""Tests for the Jinja2 {% preview %} tag."""

from __future__ import annotations

import threading
import time
from unittest.mock import patch

import pytest
from conftest import OG_URL
from jinja2 import Environment, TemplateSyntaxError

from linkpreview.errors import FetchError
from linkpreview.pipeline import LinkPreview
from linkpreview.tag import PreviewExtension, install


@pytest.fixture
def env(config, stub_fetcher) -> Environment:
    environment = Environment(extensions=[PreviewExtension], autoescape=True)
    install(environment, config, previewer=LinkPreview(config, fetcher=stub_fetcher))
    return environment


def test_url_from_context(env):
    html = env.from_string("{% preview link %}").render(link=OG_URL)
    assert '<div class="preview-wrapper">' in html
    assert "Caching Link Previews" in html


def test_url_from_attribute(env):
    html = env.from_string("{% preview page.link %}").render(page={"link": OG_URL})
    assert "Caching Link Previews" in html


def test_literal_url(env):
    html = env.from_string('{% preview "' + OG_URL + '" %}').render()
    assert "Caching Link Previews" in html


def test_manual_title(env, stub_fetcher):
    html = env.from_string('{% preview "Some Article" link %}').render(
        link="https://example.com/some-article.html",
    )
    assert "Some Article" in html
    assert stub_fetcher.calls == []


def test_manual_title_with_literal_url(env, stub_fetcher):
    html = env.from_string(
        '{% preview "Some Article" "https://example.com/some-article.html" %}',
    ).render()
    assert "Some Article" in html
    assert "https://example.com/some-article.html" in html
    assert "manualhttps" not in html
    assert stub_fetcher.calls == []


def test_literal_url_with_filter(env):
    html = env.from_string('{% preview "' + OG_URL + '" | trim %}').render()
    assert "Caching Link Previews" in html


def test_title_must_be_string_literal(env):
    with pytest.raises(TemplateSyntaxError):
        env.from_string("{% preview title link %}")


def test_fetch_failure_propagates(env):
    with pytest.raises(FetchError):
        env.from_string("{% preview link %}").render(link="https://missing.example/")


def test_install_adds_extension_and_lazy_previewer(config):
    environment = Environment()
    install(environment, config)
    assert "linkpreview.tag.PreviewExtension" in environment.extensions
    html = environment.from_string('{% preview "Manual" "https://e.com/x" %}').render()
    assert "Manual" in html
    assert isinstance(environment.linkpreview, LinkPreview)
    assert environment.linkpreview.config is config


def test_lazy_previewer_created_once_under_concurrent_renders(config):
    created: list[LinkPreview] = []

    def slow_previewer(cfg):
        time.sleep(0.05)
        previewer = LinkPreview(cfg)
        created.append(previewer)
        return previewer

    environment = Environment(extensions=[PreviewExtension])
    environment.linkpreview_config = config
    template = environment.from_string('{% preview "Manual" "https://e.com/x" %}')
    barrier = threading.Barrier(8)
    seen: list[LinkPreview] = []
    seen_lock = threading.Lock()

    def render() -> None:
        barrier.wait()
        template.render()
        with seen_lock:
            seen.append(environment.linkpreview)

    threads = [threading.Thread(target=render) for _ in range(8)]
    with patch("linkpreview.tag.LinkPreview", side_effect=slow_previewer):
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert len(created) == 1
    assert len(seen) == 8
    assert len({id(p) for p in seen}) == 1
