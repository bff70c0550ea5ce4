"""Theme capabilities consumed by the renderers.

Renderers never inspect a theme beyond two capabilities:

- ``theme.palette.resolve(color)`` turns a symbolic Color into a concrete
  value (e.g. ``#d33``)
- ``theme.colors``, ``theme.sizes``, ``theme.print_sizes`` and
  ``theme.fonts`` are mappings of property name to value

Any object providing those attributes works. ``Theme`` and ``DictPalette``
are small concrete implementations for applications and tests.

Example:
    >>> theme = Theme.from_dict({
    ...     "palette": {"red": "#d33"},
    ...     "sizes": {"text": "14px"},
    ... })
    >>> theme.palette.resolve(Color("red"))
    '#d33'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from quire.errors import ConfigurationError
from quire.style import Color
from quire.utils.text import camel_to_snake

#: Scalar tables every theme must expose.
SCALAR_TABLES: tuple[str, ...] = ("colors", "sizes", "print_sizes", "fonts")


@runtime_checkable
class Palette(Protocol):
    """Resolves symbolic colors to concrete values."""

    def resolve(self, color: Color) -> str:
        """Return the concrete value for color.

        Contract:
            - MAY raise for unknown colors; renderers propagate the error
        """
        ...


class ThemeLike(Protocol):
    """What a renderer needs from a theme."""

    palette: Palette
    colors: Mapping[str, Color | str]
    sizes: Mapping[str, str]
    print_sizes: Mapping[str, str]
    fonts: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class DictPalette:
    """Palette backed by a name -> value mapping.

    Lookups use the color's cname, so "Dark Blue" and "dark-blue" resolve
    to the same entry. Unknown colors raise KeyError.
    """

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        canonical = {Color(name).cname: value for name, value in self.values.items()}
        object.__setattr__(self, "values", MappingProxyType(canonical))

    def resolve(self, color: Color) -> str:
        try:
            return self.values[color.cname]
        except KeyError:
            msg = f"Color '{color.name}' is not in the palette"
            raise KeyError(msg) from None


@dataclass(frozen=True, slots=True)
class Theme:
    """Concrete, immutable theme.

    Attributes:
        palette: Symbolic color resolver
        colors: Semantic colors (e.g. ``linkColor``), Color or literal values
        sizes: Screen sizes
        print_sizes: Print sizes
        fonts: Font stacks
    """

    palette: Palette = field(default_factory=DictPalette)
    colors: Mapping[str, Color | str] = field(default_factory=dict)
    sizes: Mapping[str, str] = field(default_factory=dict)
    print_sizes: Mapping[str, str] = field(default_factory=dict)
    fonts: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in SCALAR_TABLES:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> Theme:
        """Create a Theme from a dictionary.

        ``palette`` may be a mapping (wrapped in DictPalette) or a Palette.
        Keys may be snake_case or camelCase (``printSizes``). Color values
        written as ``{"color": "name"}`` become Color references; unknown
        keys are ignored.
        """
        values: dict[str, Any] = {}
        for key, value in config.items():
            name = camel_to_snake(key)
            if name == "palette":
                values[name] = value if isinstance(value, Palette) else DictPalette(value)
            elif name in SCALAR_TABLES:
                values[name] = dict(value)

        if "colors" in values:
            values["colors"] = {
                key: Color(value["color"]) if isinstance(value, Mapping) else value
                for key, value in values["colors"].items()
            }
        return cls(**values)


def validate_theme(theme: Any) -> None:
    """Fail fast on a theme renderers cannot use.

    Raises:
        ConfigurationError: theme is None, has no palette, or lacks one of
            the scalar tables
    """
    if theme is None:
        raise ConfigurationError("A theme is required to construct this renderer")

    palette = getattr(theme, "palette", None)
    if palette is None or not callable(getattr(palette, "resolve", None)):
        raise ConfigurationError("Theme has no palette with a resolve() method")

    for name in SCALAR_TABLES:
        table = getattr(theme, name, None)
        if not isinstance(table, Mapping):
            raise ConfigurationError(f"Theme is missing the '{name}' table")
