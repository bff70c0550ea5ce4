"""
quire: render document trees to HTML or to caret control-code markup

Two renderers share one walker: handlers are declared per node type, a
visit stack carries ancestor context down to descendants and restores it
on the way back up, and structurally grouped children (table parts) are
reordered before serialization.

Quick Start:
    >>> from quire import node, render_html, render_markup, Theme
    >>> tree = node(
    ...     "document",
    ...     node("header", node("text", text="Title"), level=1),
    ...     node("paragraph", node("emphasisText", node("text", text="bold"), level=2)),
    ... )
    >>> print(render_html(tree, Theme()))
    <div class="book-source">
    <h1>Title</h1>
    <p><strong>bold</strong></p>
    <BLANKLINE>
    </div>
    <BLANKLINE>
    >>> render_markup(tree)
    '^+^_# Title^:\\n\\n^+bold^:\\n\\n'

Installation:
    pip install quire              # core renderers (zero deps)
    pip install quire[syntax]      # + syntax highlighting via Rosettes
"""

from typing import Any

from quire.accumulator import ColorRegistry
from quire.config import RenderConfig, UngroupedPolicy
from quire.errors import (
    ConfigurationError,
    HandlerDeclarationError,
    MissingContextError,
    QuireError,
    UngroupedChildError,
    UnknownNodeTypeError,
)
from quire.handlers import (
    HandlerTable,
    HandlerTableBuilder,
    grouped,
    handler,
    previsit,
)
from quire.highlighting import Highlighter, get_highlighter, set_highlighter
from quire.nodes import Node, node
from quire.renderers import BaseRenderer, HtmlRenderer, MarkupRenderer, RenderResult
from quire.renderers.html import get_builtin_css, get_builtin_css_path
from quire.renderers.protocol import TreeRenderer
from quire.stack import Frame, VisitStack
from quire.style import Color, Style
from quire.theme import DictPalette, Palette, Theme
from quire.walker import Walker

__version__ = "0.3.0"


def render_html(tree: Node, theme: Any, **options: Any) -> str:
    """Render a tree to HTML with a one-off HtmlRenderer.

    Args:
        tree: Tree to render (normally a ``document`` node)
        theme: Palette and scalar tables
        **options: RenderConfig options (``standalone``, ``coreCss``, ...)
    """
    return HtmlRenderer(theme, **options).render(tree)


def render_markup(tree: Node, theme: Any = None, **options: Any) -> str:
    """Render a tree to caret control-code markup with a one-off MarkupRenderer."""
    return MarkupRenderer(theme, **options).render(tree)


__all__ = [
    "BaseRenderer",
    "Color",
    "ColorRegistry",
    "ConfigurationError",
    "DictPalette",
    "Frame",
    "HandlerDeclarationError",
    "HandlerTable",
    "HandlerTableBuilder",
    "Highlighter",
    "HtmlRenderer",
    "MarkupRenderer",
    "MissingContextError",
    "Node",
    "Palette",
    "QuireError",
    "RenderConfig",
    "RenderResult",
    "Style",
    "Theme",
    "TreeRenderer",
    "UngroupedChildError",
    "UngroupedPolicy",
    "UnknownNodeTypeError",
    "VisitStack",
    "Walker",
    "__version__",
    "get_builtin_css",
    "get_builtin_css_path",
    "get_highlighter",
    "grouped",
    "handler",
    "node",
    "previsit",
    "render_html",
    "render_markup",
    "set_highlighter",
]
