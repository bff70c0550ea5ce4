"""Error taxonomy and failure paths.

Every failure surfaces as a QuireError subclass (or the palette or
highlighter's own exception) and no partial output is returned.
"""

import pytest

from quire import (
    Color,
    ConfigurationError,
    HandlerDeclarationError,
    HtmlRenderer,
    MarkupRenderer,
    MissingContextError,
    QuireError,
    Style,
    Theme,
    UngroupedChildError,
    UnknownNodeTypeError,
    node,
)

# =========================================================================
# Messages
# =========================================================================


class TestErrorMessages:
    """Error construction and formatting."""

    def test_unknown_node_type(self) -> None:
        err = UnknownNodeTypeError("blink", "HtmlRenderer")
        assert str(err) == "No handler for node type 'blink' in HtmlRenderer"
        assert str(UnknownNodeTypeError("blink")) == "No handler for node type 'blink'"

    def test_missing_context(self) -> None:
        err = MissingContextError("columns", -3, "document")
        assert str(err) == "Missing required context 'columns' at stack index -3 (document)"
        assert str(MissingContextError("columns")) == "Missing required context 'columns'"

    def test_ungrouped_child(self) -> None:
        err = UngroupedChildError("table", "paragraph")
        assert str(err) == "Node type 'paragraph' is not a grouped child of 'table'"

    @pytest.mark.parametrize(
        "error_type",
        [
            UnknownNodeTypeError,
            MissingContextError,
            UngroupedChildError,
            ConfigurationError,
            HandlerDeclarationError,
        ],
    )
    def test_hierarchy(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, QuireError)


# =========================================================================
# Render failures
# =========================================================================


class TestRenderFailures:
    """Failures abort the whole render call."""

    def test_unknown_type_deep_in_tree(self) -> None:
        tree = node(
            "document",
            node("paragraph", node("text", text="fine")),
            node("list", node("listItem", node("marquee"))),
        )
        with pytest.raises(UnknownNodeTypeError):
            MarkupRenderer().render(tree)

    def test_failed_render_adds_no_colors(self) -> None:
        renderer = HtmlRenderer(Theme())
        tree = node(
            "document",
            node("styledText", style=Style(text_color=Color("red"))),
            node("marquee"),
        )
        with pytest.raises(UnknownNodeTypeError):
            renderer.render(tree)
        assert len(renderer.colors) == 0

    def test_ungrouped_error_policy(self) -> None:
        renderer = HtmlRenderer(Theme(), ungrouped="error")
        tree = node("document", node("table", node("paragraph")))
        with pytest.raises(UngroupedChildError):
            renderer.render(tree)

    def test_ungrouped_default_policy_appends(self) -> None:
        tree = node(
            "document",
            node("table", node("paragraph", node("text", text="p")), node("tableRow")),
        )
        out = HtmlRenderer(Theme()).render(tree)
        assert out.index("<tbody>") < out.index("<p>p</p>")

    def test_renderer_usable_after_failure(self) -> None:
        renderer = MarkupRenderer()
        with pytest.raises(MissingContextError):
            renderer.render(node("tableCell"))
        assert renderer.render(node("text", text="ok")) == "ok"
