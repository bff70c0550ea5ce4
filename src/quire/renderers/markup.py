"""Control-code renderer: linear caret markup.

Formatting is expressed by in-band control codes rather than paired
tags. A code stays active until a reset (``^:``) countermands every active
code at once:

    ========  ==========================
    ``^+``    bold
    ``^/``    italic
    ``^_``    underline
    ``^-``    dim (inline code)
    ``^[fg:name]``  text color
    ``^[bg:name]``  background color
    ``^:``    reset to neutral
    ``^^``    a literal caret
    ========  ==========================

Since a reset also cancels the formatting of enclosing nodes, every
formatting node records two sequences in its frame during pre-visit: the
codes it introduces itself (``own_markup``) and the cumulative codes
active inside it (``full_markup`` = parent's full markup + own markup).
When the node closes it emits::

    own_markup + children + "^:" + parent_full_markup

so the state after the node is exactly the state before it, at any depth.

Example:
    >>> tree = node("paragraph", node("emphasisText", node("text", text="bold"), level=2))
    >>> MarkupRenderer().render(tree)
    '^+bold^:\\n\\n'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from quire.accumulator import ColorRegistry
from quire.handlers import grouped, handler, previsit
from quire.renderers.base import BaseRenderer
from quire.stack import FULL_MARKUP, OWN_MARKUP, Frame, VisitStack
from quire.style import Style, as_style

BOLD = "^+"
ITALIC = "^/"
UNDERLINE = "^_"
DIM = "^-"
RESET = "^:"
CARET = "^"

_LIST_TYPES = frozenset({"list", "orderedList"})
_ITEM_TYPES = frozenset({"listItem", "orderedListItem"})

# One control code: ^^, ^[...] or ^ followed by a single character
_CODE = re.compile(r"\^(\[[^\]]*\]|.)", re.DOTALL)


def escape_text(text: str | None) -> str:
    """Escape literal text: the caret is doubled, nothing else changes."""
    return (text or "").replace(CARET, CARET + CARET)


# Control-code markup has no quoted attribute positions; attribute values
# (link targets, alt texts) are inlined as text.
escape_attr = escape_text


def foreground(cname: str) -> str:
    return f"^[fg:{cname}]"


def background(cname: str) -> str:
    return f"^[bg:{cname}]"


def style_markup(style: Style | None, registry: ColorRegistry) -> str:
    """Control codes for a style; colors are registered in registry."""
    if style is None:
        return ""
    codes = ""
    if style.bold:
        codes += BOLD
    if style.italic:
        codes += ITALIC
    if style.underline:
        codes += UNDERLINE
    if style.text_color is not None:
        codes += foreground(registry.register(style.text_color))
    if style.background_color is not None:
        codes += background(registry.register(style.background_color))
    return codes


def styled_runs(markup: str) -> list[tuple[frozenset[str], str]]:
    """Interpret markup into (active codes, literal text) runs.

    This is the reading side of the notation: a reset clears all active
    codes, a doubled caret is literal text, any other code is added to the
    active set. Adjacent text under the same state is merged.
    """
    runs: list[tuple[frozenset[str], str]] = []
    active: set[str] = set()
    position = 0

    def emit(text: str) -> None:
        if not text:
            return
        state = frozenset(active)
        if runs and runs[-1][0] == state:
            runs[-1] = (state, runs[-1][1] + text)
        else:
            runs.append((state, text))

    for match in _CODE.finditer(markup):
        emit(markup[position : match.start()])
        position = match.end()
        code = match.group(0)
        if code == CARET + CARET:
            emit(CARET)
        elif code == RESET:
            active.clear()
        else:
            active.add(code)
    emit(markup[position:])
    return runs


def strip_markup(markup: str) -> str:
    """Plain text of markup, control codes removed and carets unescaped."""
    return "".join(text for _state, text in styled_runs(markup))


def _set_markup(frame: Frame, stack: VisitStack, own: str) -> None:
    frame[OWN_MARKUP] = own
    frame[FULL_MARKUP] = stack.full_markup + own


def _close(content: str, stack: VisitStack) -> str:
    """Wrap content in the top frame's own codes and restore the parent state."""
    own = stack.top.get(OWN_MARKUP, "") if stack.top is not None else ""
    if not own:
        return content
    return own + content + RESET + stack.ancestors.full_markup


def _content(data: Mapping[str, Any], children: str) -> str:
    return children if children else escape_text(data.get("text"))


class MarkupRenderer(BaseRenderer):
    """Render a node tree to caret control-code markup.

    A theme is optional; when given it is validated like for HtmlRenderer.
    """

    # =========================================================================
    # Formatting context (pre-visit)
    # =========================================================================

    @previsit("header")
    def header_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        level = int(data.get("level", 1))
        _set_markup(frame, stack, BOLD + UNDERLINE if level <= 1 else BOLD)

    @previsit("emphasisText")
    def emphasis_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        level = int(data.get("level", 1))
        if level == 2:
            own = BOLD
        elif level >= 3:
            own = BOLD + ITALIC
        else:
            own = ITALIC
        _set_markup(frame, stack, own)

    @previsit("decoratedText", "link")
    def underline_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        _set_markup(frame, stack, UNDERLINE)

    @previsit("quote")
    def quote_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        _set_markup(frame, stack, ITALIC)

    @previsit("code")
    def code_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        _set_markup(frame, stack, DIM)

    @previsit("styledText", "tableCaption", "tableHeadCell")
    def style_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        _set_markup(frame, stack, style_markup(as_style(data.get("style")), stack.accumulator))

    @previsit("tableHeadRow")
    def head_row_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        own = BOLD + style_markup(as_style(data.get("style")), stack.accumulator)
        _set_markup(frame, stack, own)

    @previsit("tableRow")
    def row_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        _set_markup(frame, stack, style_markup(as_style(data.get("style")), stack.accumulator))

    @previsit("tableCell")
    def cell_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        """Merge the column style under the cell's own style."""
        # Ancestor frames: ..., table, row
        columns = stack.require("columns", -2)
        index = data.get("column")
        in_range = index is not None and 0 <= index < len(columns)
        column = (columns[index] if in_range else None) or {}

        style = as_style(column.get("style"))
        cell_style = as_style(data.get("style"))
        style = style.merge(cell_style) if style is not None else cell_style
        _set_markup(frame, stack, style_markup(style, stack.accumulator))

    @previsit("table")
    def table_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        frame["columns"] = tuple(data.get("columns") or ())

    @previsit("orderedList")
    def ordered_list_context(self, data: Mapping[str, Any], frame: Frame, stack: VisitStack) -> None:
        frame["start"] = data.get("start", 1)

    # =========================================================================
    # Blocks
    # =========================================================================

    @handler("document")
    def document(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return children

    @handler("header")
    def header(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        level = max(1, min(6, int(data.get("level", 1))))
        return _close("#" * level + " " + _content(data, children), stack) + "\n\n"

    @handler("paragraph")
    def paragraph(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return children + "\n\n"

    @handler("quote")
    def quote(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        body = children.rstrip("\n").replace("\n", "\n> ")
        return _close("> " + body, stack) + "\n\n"

    @handler("cite")
    def cite(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return "-- " + _content(data, children) + "\n\n"

    @handler("list", "orderedList")
    def any_list(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        parent = stack.ancestors.top
        if parent is not None and parent.node_type in _ITEM_TYPES:
            # Nested: continue the enclosing item on the next line
            return "\n" + children.rstrip("\n")
        return children + "\n"

    def _indent(self, stack: VisitStack) -> str:
        lists = sum(1 for frame in stack if frame.node_type in _LIST_TYPES)
        return "  " * max(0, lists - 1)

    @handler("listItem")
    def list_item(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        content = _content(data, children).strip("\n")
        return f"{self._indent(stack)}- {content}\n"

    @handler("orderedListItem")
    def ordered_list_item(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        number = stack.require("start", -2) + stack.top.index
        content = _content(data, children).strip("\n")
        return f"{self._indent(stack)}{number}. {content}\n"

    @handler("codeBlock")
    def code_block(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        lines = (data.get("text") or "").split("\n")
        return "".join(f"    {escape_text(line)}\n" for line in lines) + "\n"

    @handler("horizontalRule")
    def horizontal_rule(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return "---\n\n"

    @handler("clearFloat", "anchor")
    def invisible(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        # Floats and anchors have no linear representation
        return ""

    @handler("imageBlock")
    def image_block(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        out = self.image(data, children, stack) + "\n"
        if data.get("caption"):
            out += escape_text(data["caption"]) + "\n"
        return out + "\n"

    # =========================================================================
    # Tables
    # =========================================================================

    @handler("table")
    def table(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return children + "\n"

    @grouped("table", "tableCaption", order=1)
    def table_caption_group(self, data: Mapping[str, Any], rendered: str, stack: VisitStack) -> str:
        return rendered

    @grouped("table", "tableHeadRow", order=2)
    def table_head_group(self, data: Mapping[str, Any], rendered: str, stack: VisitStack) -> str:
        columns = len(stack.require("columns"))
        return rendered + "|" + "---|" * max(1, columns) + "\n"

    @grouped("table", "tableRow", order=3)
    def table_body_group(self, data: Mapping[str, Any], rendered: str, stack: VisitStack) -> str:
        return rendered

    @handler("tableCaption")
    def table_caption(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return _close(_content(data, children), stack) + "\n"

    @handler("tableRow", "tableHeadRow")
    def table_row(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return _close("|" + children, stack) + "\n"

    @handler("tableCell", "tableHeadCell")
    def table_cell(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return " " + _close(_content(data, children), stack) + " |"

    # =========================================================================
    # Inlines
    # =========================================================================

    @handler("text")
    def text(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return escape_text(data.get("text"))

    @handler("emphasisText", "decoratedText", "styledText", "code")
    def formatted(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return _close(_content(data, children), stack)

    @handler("link")
    def link(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        content = _content(data, children)
        href = data.get("href")
        out = _close(content or escape_text(href), stack)
        if href and content and content != escape_text(href):
            out += f" ({escape_attr(href)})"
        return out

    @handler("image")
    def image(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        label = data.get("altText") or data.get("title") or data.get("href") or ""
        return f"[image: {escape_attr(label)}]"

    @handler("pictogram")
    def pictogram(self, data: Mapping[str, Any], children: str, stack: VisitStack) -> str:
        return escape_text(data.get("emoji"))
