"""Tests for stylesheet projection."""

import pytest

from quire import Color, ColorRegistry, DictPalette, Theme
from quire.projector import (
    BODY_SCOPE,
    FRAGMENT_SCOPE,
    color_css,
    color_variable,
    project_stylesheet,
    theme_color_css,
    theme_font_css,
    theme_size_css,
)

PALETTE = DictPalette({"red": "#d33", "sea green": "#2e8b57"})


def _registry(*names: str) -> ColorRegistry:
    registry = ColorRegistry()
    for name in names:
        registry.register(Color(name))
    return registry


class TestColorCss:
    """Discovered color declarations and utility classes."""

    def test_fragment_scope(self) -> None:
        css = color_css(FRAGMENT_SCOPE, _registry("red", "Sea Green"), PALETTE)
        assert css == (
            ".book-source {\n"
            "\t--color-red: #d33;\n"
            "\t--color-sea-green: #2e8b57;\n"
            "}\n"
            "\n"
            ".book-source .text-red { color: var(--color-red); }\n"
            ".book-source .bg-red { background-color: var(--color-red); }\n"
            ".book-source .text-sea-green { color: var(--color-sea-green); }\n"
            ".book-source .bg-sea-green { background-color: var(--color-sea-green); }\n"
            "\n"
        )

    def test_body_scope_rules_unprefixed(self) -> None:
        css = color_css(BODY_SCOPE, _registry("red"), PALETTE)
        assert css.startswith("body {\n\t--color-red: #d33;\n}\n")
        assert "\n.text-red { color: var(--color-red); }\n" in css

    def test_empty_registry(self) -> None:
        assert color_css(BODY_SCOPE, ColorRegistry(), PALETTE) == "body {\n}\n\n\n"

    def test_palette_errors_propagate(self) -> None:
        with pytest.raises(KeyError):
            color_css(BODY_SCOPE, _registry("plum"), PALETTE)

    def test_color_variable(self) -> None:
        assert color_variable("dark-blue") == "--color-dark-blue"


class TestThemeCss:
    """Theme scalar tables."""

    def test_theme_colors(self) -> None:
        theme = Theme(palette=PALETTE, colors={"linkColor": Color("red"), "rule": "#eee"})
        registry = ColorRegistry()
        css = theme_color_css(BODY_SCOPE, theme, registry)
        assert css == (
            "body {\n"
            "\t--link-color-color: var(--color-red);\n"
            "\t--rule-color: #eee;\n"
            "}\n\n"
        )
        assert list(registry) == ["red"]

    def test_sizes_then_print_sizes(self) -> None:
        theme = Theme(sizes={"lineHeight": "1.4"}, print_sizes={"text": "10pt"})
        assert theme_size_css(BODY_SCOPE, theme) == (
            "body {\n\t--line-height-size: 1.4;\n\t--text-printsize: 10pt;\n}\n\n"
        )

    def test_fonts(self) -> None:
        theme = Theme(fonts={"monospace": "Menlo, monospace"})
        assert theme_font_css(FRAGMENT_SCOPE, theme) == (
            ".book-source {\n\t--monospace-font: Menlo, monospace;\n}\n\n"
        )


class TestProjectStylesheet:
    """Full projection order."""

    def test_order(self) -> None:
        theme = Theme(
            palette=PALETTE,
            colors={"accent": Color("sea green")},
            sizes={"text": "14px"},
            fonts={"body": "serif"},
        )
        registry = _registry("red")
        css = project_stylesheet(BODY_SCOPE, theme, registry)
        positions = [
            css.index("--accent-color"),
            css.index("--text-size"),
            css.index("--body-font"),
            css.index("--color-red:"),
            css.index("--color-sea-green:"),
        ]
        assert positions == sorted(positions)

    def test_deterministic(self) -> None:
        theme = Theme(palette=PALETTE)
        first = project_stylesheet(FRAGMENT_SCOPE, theme, _registry("red", "sea green"))
        second = project_stylesheet(FRAGMENT_SCOPE, theme, _registry("red", "sea green"))
        assert first == second
