"""Style value objects carried in node data.

``Color`` is a symbolic color reference (resolved to a concrete value by the
theme palette only when the stylesheet is projected). ``Style`` bundles the
inline formatting attributes a node may declare.

Both are frozen and safe to share across threads.

Example:
    >>> column = Style(bold=True, text_color=Color("red"))
    >>> cell = Style(text_color=Color("dark blue"))
    >>> merged = column.merge(cell)
    >>> merged.bold, merged.text_color.cname
    (True, 'dark-blue')
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from quire.utils.text import camel_to_snake

_NON_CNAME = re.compile(r"[^a-z0-9-]+")


@dataclass(frozen=True, slots=True)
class Color:
    """Symbolic color reference.

    Attributes:
        name: Palette color name (e.g. "red", "dark blue", "accent")
    """

    name: str

    @property
    def cname(self) -> str:
        """Canonical, CSS-safe name. Colors with equal cnames are one color."""
        return _NON_CNAME.sub("-", self.name.strip().lower()).strip("-")

    def __str__(self) -> str:
        return self.name


def as_color(value: Color | str | None) -> Color | None:
    """Coerce a color name to a Color, passing None and Color through."""
    if value is None or isinstance(value, Color):
        return value
    return Color(str(value))


@dataclass(frozen=True, slots=True)
class Style:
    """Inline formatting attributes.

    ``None`` means "not declared", which matters for merge(): only
    declared attributes override.
    """

    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    text_color: Color | None = None
    background_color: Color | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "text_color", as_color(self.text_color))
        object.__setattr__(self, "background_color", as_color(self.background_color))

    def merge(self, other: Style | None) -> Style:
        """Return a new style with other's declared attributes taking precedence."""
        if other is None:
            return self
        values = {}
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            values[f.name] = mine if theirs is None else theirs
        return Style(**values)

    @property
    def colors(self) -> tuple[Color, ...]:
        """Declared colors, text color first."""
        return tuple(c for c in (self.text_color, self.background_color) if c is not None)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> Style:
        """Create a Style from a mapping.

        Accepts snake_case or camelCase keys (``textColor``); unknown keys
        are ignored. Color values may be names or Color instances.

        Example:
            >>> Style.from_dict({"bold": True, "textColor": "red"}).text_color
            Color(name='red')
        """
        valid = {f.name for f in fields(cls)}
        filtered = {}
        for key, value in values.items():
            name = camel_to_snake(key)
            if name in valid:
                filtered[name] = value
        return cls(**filtered)

    def to_dict(self) -> dict[str, Any]:
        """Declared attributes only, colors as names."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = value.name if isinstance(value, Color) else value
        return result


def as_style(value: Style | Mapping[str, Any] | None) -> Style | None:
    """Coerce a mapping to a Style, passing None and Style through."""
    if value is None or isinstance(value, Style):
        return value
    return Style.from_dict(value)
