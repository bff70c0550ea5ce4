"""Post-pass stylesheet projection for the HTML renderer.

Runs after the body is rendered. The body references colors by class name
(``text-<cname>``, ``bg-<cname>``) and theme values by CSS variable; these
functions emit the declarations those references resolve against.

Output layout for a scope (``body`` for standalone documents,
``.book-source`` for fragments)::

    .book-source {
        --color-red: #d33;
    }

    .book-source .text-red { color: var(--color-red); }
    .book-source .bg-red { background-color: var(--color-red); }

Colors are declared in registry order (first referenced, first declared),
so the same tree always projects the same stylesheet.

Thread Safety:
    Pure functions over their arguments, except that theme_color_css()
    registers theme colors into the registry it is given.

"""

from __future__ import annotations

from collections.abc import Mapping

from quire.accumulator import ColorRegistry
from quire.stringbuilder import StringBuilder
from quire.style import Color
from quire.theme import Palette, ThemeLike
from quire.utils.text import camel_to_dash

BODY_SCOPE = "body"
FRAGMENT_SCOPE = ".book-source"


def color_variable(cname: str) -> str:
    """CSS variable bound to a discovered color."""
    return f"--color-{cname}"


def _declarations(scope: str, declarations: Mapping[str, str]) -> str:
    sb = StringBuilder()
    sb.append(scope).append_line(" {")
    for name, value in declarations.items():
        sb.append(f"\t{name}: {value};").append_line()
    sb.append_line("}").append_line()
    return sb.build()


def color_css(scope: str, registry: ColorRegistry, palette: Palette) -> str:
    """Declare every discovered color plus its foreground/background classes.

    Palette errors propagate unchanged.
    """
    rule_prefix = "" if scope == BODY_SCOPE else f"{FRAGMENT_SCOPE} "

    variables: dict[str, str] = {}
    rules = StringBuilder()
    for cname, color in registry.items():
        var_name = color_variable(cname)
        variables[var_name] = palette.resolve(color)
        rules.append_line(f"{rule_prefix}.text-{cname} {{ color: var({var_name}); }}")
        rules.append_line(f"{rule_prefix}.bg-{cname} {{ background-color: var({var_name}); }}")

    return _declarations(scope, variables) + rules.build() + "\n"


def theme_color_css(scope: str, theme: ThemeLike, registry: ColorRegistry) -> str:
    """Declare the theme's semantic colors.

    Color values point at the discovered-color variable and are registered,
    so color_css() must run afterwards. Literal values are emitted as-is.
    """
    variables: dict[str, str] = {}
    for prop, value in theme.colors.items():
        var_name = f"--{camel_to_dash(prop)}-color"
        if isinstance(value, Color):
            cname = registry.register(value)
            variables[var_name] = f"var({color_variable(cname)})"
        else:
            variables[var_name] = str(value)
    return _declarations(scope, variables)


def theme_size_css(scope: str, theme: ThemeLike) -> str:
    """Declare screen sizes (``-size``) then print sizes (``-printsize``)."""
    variables = {f"--{camel_to_dash(prop)}-size": str(v) for prop, v in theme.sizes.items()}
    variables.update(
        {f"--{camel_to_dash(prop)}-printsize": str(v) for prop, v in theme.print_sizes.items()}
    )
    return _declarations(scope, variables)


def theme_font_css(scope: str, theme: ThemeLike) -> str:
    """Declare font stacks (``-font``)."""
    variables = {f"--{camel_to_dash(prop)}-font": str(v) for prop, v in theme.fonts.items()}
    return _declarations(scope, variables)


def project_stylesheet(scope: str, theme: ThemeLike, registry: ColorRegistry) -> str:
    """All theme and color declarations, in envelope order."""
    sb = StringBuilder()
    sb.append(theme_color_css(scope, theme, registry))
    sb.append(theme_size_css(scope, theme))
    sb.append(theme_font_css(scope, theme))
    sb.append(color_css(scope, registry, theme.palette))
    return sb.build()
