"""Tests for the caret control-code renderer."""

import pytest

from quire import (
    Color,
    ConfigurationError,
    MarkupRenderer,
    MissingContextError,
    Style,
    Theme,
    node,
)
from quire.accumulator import ColorRegistry
from quire.nodes import Node
from quire.renderers.markup import (
    escape_text,
    strip_markup,
    style_markup,
    styled_runs,
)


def _render(*children: Node) -> str:
    return MarkupRenderer().render(node("document", *children))


def _text(value: str) -> Node:
    return node("text", text=value)


def _para(*children: Node) -> Node:
    return node("paragraph", *children)


class TestConstruction:
    """Theme handling."""

    def test_theme_optional(self) -> None:
        assert MarkupRenderer().theme is None

    def test_theme_validated_when_given(self) -> None:
        with pytest.raises(ConfigurationError):
            MarkupRenderer(object())

    def test_accepts_theme(self) -> None:
        assert MarkupRenderer(Theme()).render(_para(_text("x"))) == "x\n\n"


class TestFormatting:
    """Own codes, resets and restoration of the enclosing state."""

    def test_header_and_bold_paragraph(self) -> None:
        out = _render(
            node("header", _text("Title"), level=1),
            _para(node("emphasisText", _text("bold"), level=2)),
        )
        assert out == "^+^_# Title^:\n\n^+bold^:\n\n"

    def test_subheader(self) -> None:
        assert _render(node("header", _text("Sub"), level=2)) == "^+## Sub^:\n\n"

    def test_string_levels_coerced(self) -> None:
        assert _render(node("header", _text("Sub"), level="2")) == "^+## Sub^:\n\n"
        out = _render(_para(node("emphasisText", _text("x"), level="3")))
        assert out == "^+^/x^:\n\n"

    @pytest.mark.parametrize(
        ("level", "codes"),
        [(1, "^/"), (2, "^+"), (3, "^+^/")],
    )
    def test_emphasis_levels(self, level: int, codes: str) -> None:
        out = _render(_para(node("emphasisText", _text("x"), level=level)))
        assert out == f"{codes}x^:\n\n"

    def test_nested_formatting_restores_parent(self) -> None:
        tree = _para(
            node(
                "styledText",
                node("emphasisText", _text("both"), level=1),
                _text(" bold"),
                style=Style(bold=True),
            ),
            _text(" plain"),
        )
        assert _render(tree) == "^+^/both^:^+ bold^: plain\n\n"

    def test_three_levels(self) -> None:
        tree = _para(
            node(
                "decoratedText",
                node("emphasisText", node("code", text="c"), _text("i"), level=1),
                _text("u"),
            )
        )
        assert _render(tree) == "^_^/^-c^:^_^/i^:^_u^:\n\n"

    def test_colors_registered(self) -> None:
        renderer = MarkupRenderer()
        style = Style(text_color=Color("Red"), background_color=Color("dark blue"))
        out = renderer.render(_para(node("styledText", _text("x"), style=style)))
        assert out == "^[fg:red]^[bg:dark-blue]x^:\n\n"
        assert list(renderer.colors) == ["red", "dark-blue"]

    def test_empty_style_emits_no_reset(self) -> None:
        assert _render(_para(node("styledText", _text("x")))) == "x\n\n"

    def test_caret_escaped(self) -> None:
        assert _render(_para(_text("2^3"))) == "2^^3\n\n"

    def test_link(self) -> None:
        out = _render(_para(node("link", _text("site"), href="http://x.org")))
        assert out == "^_site^: (http://x.org)\n\n"

    def test_link_without_label(self) -> None:
        assert _render(_para(node("link", href="http://x.org"))) == "^_http://x.org^:\n\n"


class TestBlocks:
    """Block layout."""

    def test_quote(self) -> None:
        out = _render(node("quote", _para(_text("one\ntwo"))))
        assert out == "^/> one\n> two^:\n\n"

    def test_cite(self) -> None:
        assert _render(node("cite", text="me")) == "-- me\n\n"

    def test_bullet_list(self) -> None:
        out = _render(node("list", node("listItem", _text("a")), node("listItem", _text("b"))))
        assert out == "- a\n- b\n\n"

    def test_ordered_list_numbers_from_start(self) -> None:
        out = _render(
            node(
                "orderedList",
                node("orderedListItem", _text("a")),
                node("orderedListItem", _text("b")),
                start=3,
            )
        )
        assert out == "3. a\n4. b\n\n"

    def test_nested_list(self) -> None:
        out = _render(
            node("list", node("listItem", _text("a"), node("list", node("listItem", _text("b")))))
        )
        assert out == "- a\n  - b\n\n"

    def test_code_block(self) -> None:
        assert _render(node("codeBlock", text="x = 1\ny ^ 2")) == "    x = 1\n    y ^^ 2\n\n"

    def test_rule_and_invisible_blocks(self) -> None:
        out = _render(node("horizontalRule"), node("clearFloat"), node("anchor", href="a"))
        assert out == "---\n\n"

    def test_image_block(self) -> None:
        out = _render(node("imageBlock", href="a.png", altText="Chart", caption="Fig 1"))
        assert out == "[image: Chart]\nFig 1\n\n"

    def test_inline_image_and_pictogram(self) -> None:
        out = _render(_para(node("image", href="a.png"), node("pictogram", emoji="★")))
        assert out == "[image: a.png]★\n\n"


class TestTables:
    """Grouped table parts and column context."""

    def test_table_layout(self) -> None:
        out = _render(
            node(
                "table",
                node("tableRow", node("tableCell", column=0, text="1"), node("tableCell", column=1, text="2")),
                node("tableHeadRow", node("tableHeadCell", column=0, text="A"), node("tableHeadCell", column=1, text="B")),
                node("tableCaption", text="Cap"),
                columns=({}, {}),
            )
        )
        assert out == "Cap\n^+| A | B |^:\n|---|---|\n| 1 | 2 |\n\n"

    def test_head_cell_restores_row_state(self) -> None:
        out = _render(
            node(
                "table",
                node("tableHeadRow", node("tableHeadCell", text="H", style={"italic": True})),
            )
        )
        assert out == "^+| ^/H^:^+ |^:\n|---|\n\n"

    def test_column_style_merged_under_cell_style(self) -> None:
        out = _render(
            node(
                "table",
                node("tableRow", node("tableCell", column=0, text="x", style={"italic": True})),
                columns=({"style": Style(bold=True)},),
            )
        )
        assert out == "| ^+^/x^: |\n\n"

    def test_column_without_metadata(self) -> None:
        out = _render(
            node(
                "table",
                node(
                    "tableRow",
                    node("tableCell", column=0, text="a"),
                    node("tableCell", column=1, text="b"),
                ),
                columns=(None, {"style": Style(bold=True)}),
            )
        )
        assert out == "| a | ^+b^: |\n\n"

    def test_cell_outside_table(self) -> None:
        with pytest.raises(MissingContextError) as exc_info:
            _render(node("tableCell", text="x"))
        assert exc_info.value.key == "columns"


class TestStyleMarkup:
    """Module-level helpers."""

    def test_style_markup_order(self) -> None:
        registry = ColorRegistry()
        style = Style(underline=True, bold=True, italic=True, text_color=Color("red"))
        assert style_markup(style, registry) == "^+^/^_^[fg:red]"
        assert list(registry) == ["red"]

    def test_style_markup_none(self) -> None:
        assert style_markup(None, ColorRegistry()) == ""

    def test_styled_runs(self) -> None:
        runs = styled_runs("a^+b^/c^:d^^e")
        assert runs == [
            (frozenset(), "a"),
            (frozenset({"^+"}), "b"),
            (frozenset({"^+", "^/"}), "c"),
            (frozenset(), "d^e"),
        ]

    def test_strip_markup(self) -> None:
        assert strip_markup("^[fg:red]x^:^^y") == "x^y"

    def test_escape_text(self) -> None:
        assert escape_text("^^") == "^^^^"
        assert escape_text(None) == ""
