"""Jinja2 ``{% preview %}`` tag for site builds.

Usage::

    from jinja2 import Environment
    from linkpreview.tag import PreviewExtension, install

    env = Environment(extensions=[PreviewExtension])
    install(env, PreviewConfig(source_dir="site"))

    env.from_string("{% preview post.link %}").render(post=post)

    # When the page title cannot be fetched, give it by hand:
    env.from_string('{% preview "Some Article" post.link %}').render(post=post)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from jinja2 import nodes
from jinja2.ext import Extension
from markupsafe import Markup

from linkpreview.pipeline import LinkPreview

if TYPE_CHECKING:
    from jinja2 import Environment
    from jinja2.lexer import Token
    from jinja2.parser import Parser

    from linkpreview.config import PreviewConfig


_OPERATOR_NAMES = frozenset({"if", "else", "is", "in", "not", "and", "or"})


def _starts_operand(token: Token) -> bool:
    """True when *token* begins a new expression rather than continuing one."""
    if token.type == "name":
        return token.value not in _OPERATOR_NAMES
    return token.type in ("string", "integer", "float", "lparen", "lbracket")


class PreviewExtension(Extension):
    """Adds ``{% preview url %}`` and ``{% preview "title" url %}``."""

    tags = {"preview"}

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        environment.extend(linkpreview_config=None, linkpreview=None)
        self._lock = threading.Lock()

    def parse(self, parser: Parser) -> nodes.Node:
        lineno = next(parser.stream).lineno
        stream = parser.stream
        # Jinja concatenates adjacent string literals, so a quoted title is
        # taken as a single token before the URL expression is parsed.
        if stream.current.type == "string" and _starts_operand(stream.look()):
            title = nodes.Const(next(stream).value, lineno=lineno)
            url = parser.parse_expression()
            call = self.call_method("_render_manual", [title, url])
        else:
            url = parser.parse_expression()
            if stream.current.type != "block_end":
                parser.fail("preview title must be a quoted string", lineno)
            call = self.call_method("_render_url", [url])
        return nodes.Output([call]).set_lineno(lineno)

    def _previewer(self) -> LinkPreview:
        env = self.environment
        if env.linkpreview is None:  # type: ignore[attr-defined]
            with self._lock:
                if env.linkpreview is None:  # type: ignore[attr-defined]
                    env.linkpreview = LinkPreview(env.linkpreview_config)  # type: ignore[attr-defined]
        return env.linkpreview  # type: ignore[attr-defined]

    def _render_url(self, url: str) -> Markup:
        return Markup(self._previewer().preview(str(url)))

    def _render_manual(self, title: str, url: str) -> Markup:
        return Markup(self._previewer().preview_manual(title, str(url)))


def install(
    environment: Environment,
    config: PreviewConfig | None = None,
    previewer: LinkPreview | None = None,
) -> None:
    """Attach a config (or a ready-made previewer) to *environment*."""
    if PreviewExtension.identifier not in environment.extensions:
        environment.add_extension(PreviewExtension)
    environment.linkpreview_config = config  # type: ignore[attr-defined]
    environment.linkpreview = previewer  # type: ignore[attr-defined]
