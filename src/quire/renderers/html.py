"""HTML renderer: nested tags plus a generated stylesheet.

Inline styles are expressed as classes (``bold``, ``text-red``,
``bg-accent``). Every color referenced that way is recorded in the render
call's color registry, and the stylesheet projector later declares one CSS
variable and two utility classes per color.

Output modes:
- fragment (default): ``<div class="book-source">...</div>``, styles
  scoped to ``.book-source`` and available through stylesheet()
- standalone: a complete HTML page with the theme, color and literal CSS
  embedded in its head

Thread Safety:
    Per-render state lives in the visit stack of each call. Multiple
    threads can share one HtmlRenderer.
"""

from __future__ import annotations

import html
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from quire.accumulator import ColorRegistry
from quire.config import RenderConfig
from quire.handlers import grouped, handler, previsit
from quire.highlighting import Highlighter, SimpleHighlighter, get_highlighter, run_highlighter
from quire.projector import BODY_SCOPE, FRAGMENT_SCOPE, project_stylesheet
from quire.renderers.base import BaseRenderer
from quire.stack import Frame, VisitStack
from quire.stringbuilder import StringBuilder
from quire.style import Style, as_style
from quire.theme import ThemeLike
from quire.utils.logger import get_logger

logger = get_logger(__name__)

CSS_DIR = Path(__file__).resolve().parent.parent / "css"
BUILTIN_CSS_KINDS: tuple[str, ...] = ("core", "standalone", "code")

DEFAULT_TITLE = "Document with no name"

_ALIGN_CLASSES = {
    "left": "align-left",
    "right": "align-right",
    "center": "align-center",
    "justify": "align-justify",
}


def escape_text(text: str | None) -> str:
    """Escape text for element content; line breaks become ``<br />``."""
    return html.escape(text or "", quote=False).replace("\n", "<br />")


def escape_attr(text: str | None) -> str:
    """Escape text for a double-quoted attribute value."""
    return html.escape(str(text) if text is not None else "", quote=True)


def get_builtin_css_path(kind: str) -> Path:
    """Path of a bundled stylesheet.

    Raises:
        ValueError: kind is not one of core, standalone, code
    """
    if kind not in BUILTIN_CSS_KINDS:
        msg = f"There is no built-in CSS of type '{kind}'"
        raise ValueError(msg)
    return CSS_DIR / f"{kind}.css"


def get_builtin_css(kind: str) -> str:
    """Contents of a bundled stylesheet."""
    return get_builtin_css_path(kind).read_text(encoding="utf-8")


def class_attr(classes: Mapping[str, None]) -> str:
    """`` class="..."`` for a non-empty ordered class set, else ""."""
    if not classes:
        return ""
    return f' class="{" ".join(classes)}"'


def _content(data: Mapping[str, Any], children: str) -> str:
    # Inline nodes carry either child nodes or a plain ``text`` attribute.
    return children if children else escape_text(data.get("text"))


def _span_attrs(data: Mapping[str, Any]) -> str:
    attrs = ""
    if data.get("columnSpan"):
        attrs += f' colspan="{escape_attr(data["columnSpan"])}"'
    if data.get("rowSpan"):
        attrs += f' rowspan="{escape_attr(data["rowSpan"])}"'
    return attrs


class HtmlRenderer(BaseRenderer):
    """Render a node tree to HTML.

    Usage:
        >>> renderer = HtmlRenderer(theme)
        >>> renderer.render(node("document", node("paragraph", node("text", text="Hi"))))
        '<div class="book-source">\\n<p>Hi</p>\\n\\n</div>\\n'

    """

    requires_theme = True

    def __init__(
        self,
        theme: ThemeLike | None,
        config: RenderConfig | None = None,
        *,
        highlighter: Highlighter | SimpleHighlighter | None = None,
        **options: Any,
    ) -> None:
        """Initialize renderer.

        Args:
            theme: Palette and scalar tables (required)
            config: Render configuration
            highlighter: Code highlighter; defaults to the process-wide one
            **options: Config overrides (e.g. ``standalone=True``)
        """
        super().__init__(theme, config, **options)
        self._highlighter = highlighter

    # =========================================================================
    # Document
    # =========================================================================

    @handler("document")
    def document(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        """Wrap the rendered body; add the page envelope in standalone mode."""
        standalone = self.config.standalone
        sb = StringBuilder()

        if standalone:
            title = data.get("title") or self.config.title or DEFAULT_TITLE
            sb.append_line("<!DOCTYPE html>")
            sb.append_line("<html>")
            sb.append_line("<head>")
            sb.append_line(f"\t<title>{escape_text(title)}</title>")
            sb.append_line('\t<meta charset="UTF-8" />')
            sb.append_line("\t<style>")
            sb.append(project_stylesheet(BODY_SCOPE, self.theme, stack.accumulator))
            sb.append(self.config.stylesheet)
            sb.append_line("\t</style>")
            sb.append_line("</head>")
            sb.append_line("<body>")

        sb.append_line('<div class="book-source">')
        sb.append(children)
        sb.append_line().append_line("</div>")

        if standalone:
            sb.append_line("</body>")
            sb.append_line("</html>")

        return sb.build()

    def stylesheet(self, scope: str = FRAGMENT_SCOPE) -> str:
        """Theme and color declarations for every color this instance has seen.

        Meant for fragment mode, after all fragments have been rendered.
        """
        return project_stylesheet(scope, self.theme, self.colors)

    # =========================================================================
    # Blocks
    # =========================================================================

    @handler("paragraph")
    def paragraph(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<p>{children}</p>\n"

    @handler("quote")
    def quote(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<blockquote>{children}</blockquote>\n"

    @handler("header")
    def header(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        level = max(1, min(6, int(data.get("level", 1))))
        return f"<h{level}>{_content(data, children)}</h{level}>\n"

    @handler("cite")
    def cite(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<cite>{_content(data, children)}</cite>\n"

    @handler("list")
    def bullet_list(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<ul>\n{children}</ul>\n"

    @handler("orderedList")
    def ordered_list(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        start = data.get("start")
        start_attr = f' start="{escape_attr(start)}"' if start not in (None, 1) else ""
        return f"<ol{start_attr}>\n{children}</ol>\n"

    @handler("listItem", "orderedListItem")
    def list_item(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<li>{_content(data, children)}</li>\n"

    @handler("imageBlock")
    def image_block(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        sb = StringBuilder()
        sb.append("<figure")
        if data.get("float"):
            side = escape_attr(data["float"])
            sb.append(f' class="float float-{side}"')
        sb.append_line(">")

        sb.append(f'<img src="{escape_attr(data.get("href"))}"')
        if data.get("altText"):
            sb.append(f' alt="{escape_attr(data["altText"])}"')
        if data.get("title"):
            sb.append(f' title="{escape_attr(data["title"])}"')
        sb.append_line(" />")

        if data.get("caption"):
            sb.append_line(f"<figcaption>{escape_text(data['caption'])}</figcaption>")
        sb.append_line("</figure>")
        return sb.build()

    @handler("horizontalRule")
    def horizontal_rule(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        clear = ' class="clear-float"' if data.get("clearFloat") else ""
        return f"<hr{clear} />\n"

    @handler("clearFloat")
    def clear_float(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return '<div class="clear-float"></div>\n'

    @handler("codeBlock")
    def code_block(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        """Render a code block, highlighted when it declares a language."""
        lang = data.get("lang")
        text = data.get("text") or ""

        sb = StringBuilder()
        sb.append_line("<pre>")
        sb.append("<code")
        if lang:
            sb.append(f' class="lang-{escape_attr(lang)}"')
        # No newline after the opening tag: it would add a blank first line
        sb.append(">")
        sb.append(self._highlight(text, lang) if lang else html.escape(text, quote=False))
        sb.append_line("</code>")
        sb.append_line("</pre>")
        return sb.build()

    def _highlight(self, text: str, lang: str) -> str:
        highlighter = self._highlighter or get_highlighter()
        if highlighter is None:
            logger.debug("No highlighter available for language %r; emitting plain code", lang)
            return html.escape(text, quote=False)
        return run_highlighter(highlighter, text, lang)

    @handler("anchor")
    def anchor(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f'<a name="{escape_attr(data.get("href"))}"></a>\n'

    # =========================================================================
    # Tables
    # =========================================================================

    @previsit("table")
    def table_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        """Expose per-column metadata to the cells below."""
        frame["columns"] = tuple(data.get("columns") or ())

    @handler("table")
    def table(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<table>\n{children}</table>\n"

    @grouped("table", "tableCaption", order=1)
    def table_caption_group(self, data: Mapping[str, Any], rendered: str, stack: VisitStack) -> str:
        # The caption produces its own markup
        return rendered

    @grouped("table", "tableHeadRow", order=2)
    def table_head_group(self, data: Mapping[str, Any], rendered: str, stack: VisitStack) -> str:
        return f"<thead>\n{rendered}</thead>\n"

    @grouped("table", "tableRow", order=3)
    def table_body_group(self, data: Mapping[str, Any], rendered: str, stack: VisitStack) -> str:
        return f"<tbody>\n{rendered}</tbody>\n"

    @handler("tableCaption")
    def table_caption(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        classes = self.style_to_classes(data.get("style"), {}, stack.accumulator)
        return f"<caption{class_attr(classes)}>{_content(data, children)}</caption>\n"

    @handler("tableRow", "tableHeadRow")
    def table_row(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        classes = self.style_to_classes(data.get("style"), {}, stack.accumulator)
        if data.get("rowSeparator"):
            classes["row-separator"] = None
        return f"<tr{class_attr(classes)}>{children}</tr>\n"

    def _column(self, data: Mapping[str, Any], stack: VisitStack) -> Mapping[str, Any] | None:
        # Frames: table, row, cell
        columns = stack.require("columns", -3)
        index = data.get("column")
        if index is None or not 0 <= index < len(columns):
            return None
        return columns[index]

    @handler("tableCell")
    def table_cell(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        """Render a body cell; column style is merged under the cell's own style."""
        column = self._column(data, stack) or {}
        classes: dict[str, None] = {}

        align_class = _ALIGN_CLASSES.get(column.get("align"))
        if align_class:
            classes[align_class] = None
        if column.get("columnSeparator") or data.get("columnSeparator"):
            classes["column-separator"] = None

        column_style = as_style(column.get("style"))
        cell_style = as_style(data.get("style"))
        if column_style is not None:
            style = column_style.merge(cell_style)
        else:
            style = cell_style
        self.style_to_classes(style, classes, stack.accumulator)

        return f"<td{class_attr(classes)}{_span_attrs(data)}>{_content(data, children)}</td>\n"

    @handler("tableHeadCell")
    def table_head_cell(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        column = self._column(data, stack) or {}
        classes: dict[str, None] = {}
        if column.get("columnSeparator") or data.get("columnSeparator"):
            classes["column-separator"] = None
        self.style_to_classes(data.get("style"), classes, stack.accumulator)

        scope = ""
        is_row_head = bool(data.get("isRowHead"))
        is_column_head = bool(data.get("isColumnHead"))
        if is_row_head and not is_column_head:
            scope = ' scope="row"'
        elif is_column_head and not is_row_head:
            scope = ' scope="column"'

        return (
            f"<th{class_attr(classes)}{_span_attrs(data)}{scope}>"
            f"{_content(data, children)}</th>\n"
        )

    # =========================================================================
    # Inlines
    # =========================================================================

    @handler("text")
    def text(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return escape_text(data.get("text"))

    @handler("emphasisText")
    def emphasis_text(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        content = _content(data, children)
        level = int(data.get("level", 1))
        if level == 2:
            return f"<strong>{content}</strong>"
        if level >= 3:
            return f"<strong><em>{content}</em></strong>"
        return f"<em>{content}</em>"

    @handler("decoratedText")
    def decorated_text(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        # Level 2 decoration has no distinct rendering yet
        return f'<span class="underline">{_content(data, children)}</span>'

    @handler("code")
    def code(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return f"<code>{_content(data, children)}</code>"

    @handler("link")
    def link(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        title = f' title="{escape_attr(data["title"])}"' if data.get("title") else ""
        return f'<a href="{escape_attr(data.get("href"))}"{title}>{_content(data, children)}</a>'

    @handler("styledText")
    def styled_text(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        classes: dict[str, None] = {}
        if data.get("title"):
            classes["title-tooltip"] = None
        self.style_to_classes(data.get("style"), classes, stack.accumulator)

        title = f' title="{escape_attr(data["title"])}"' if data.get("title") else ""
        return f"<span{class_attr(classes)}{title}>{_content(data, children)}</span>"

    @handler("image")
    def image(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        attrs = f'src="{escape_attr(data.get("href"))}"'
        if data.get("altText"):
            attrs += f' alt="{escape_attr(data["altText"])}"'
        if data.get("title"):
            attrs += f' title="{escape_attr(data["title"])}"'
        return f"<img {attrs} />"

    @handler("pictogram")
    def pictogram(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        """Render an emoji pictogram; image pictograms are not supported yet."""
        emoji = data.get("emoji")
        if not emoji:
            return ""
        tooltip = data.get("title") or data.get("altText")
        title = f' title="{escape_attr(tooltip)}"' if tooltip else ""
        return f'<span class="pictogram-emoji"{title}>{escape_text(emoji)}</span>'

    # =========================================================================
    # Helpers
    # =========================================================================

    def style_to_classes(
        self,
        style: Style | Mapping[str, Any] | None,
        classes: dict[str, None],
        registry: ColorRegistry,
    ) -> dict[str, None]:
        """Add the classes expressing style to the ordered class set.

        Colors are registered in registry so the projector declares them.
        """
        style = as_style(style)
        if style is None:
            return classes

        if style.bold:
            classes["bold"] = None
        if style.italic:
            classes["italic"] = None
        if style.underline:
            classes["underline"] = None

        if style.text_color is not None:
            cname = registry.register(style.text_color)
            classes["text-styled"] = None
            classes[f"text-{cname}"] = None

        if style.background_color is not None:
            cname = registry.register(style.background_color)
            classes["bg-styled"] = None
            classes[f"bg-{cname}"] = None

        return classes
