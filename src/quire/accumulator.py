"""Discovered-color registry.

Handlers register every symbolic color they reference while rendering. The
registry keeps one entry per canonical color name, in first-reference
order, so the stylesheet projected from it is reproducible.

Registries are append-only: a key is written once (first writer wins) and
never removed. A render call owns a fresh registry; concurrent branches
each own one and are merged back in document order, which yields the same
order as a sequential walk.

Example:
    >>> colors = ColorRegistry()
    >>> colors.register(Color("Red"))
    'red'
    >>> colors.register(Color("red"))
    'red'
    >>> len(colors)
    1
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

from quire.style import Color


class ColorRegistry:
    """Ordered, append-only mapping of cname -> Color.

    Thread Safety:
        register() and merge() take an internal lock, so a registry shared
        by a renderer instance can be merged into from several threads.
        First writer wins per key.
    """

    __slots__ = ("_colors", "_lock")

    def __init__(self) -> None:
        self._colors: dict[str, Color] = {}
        self._lock = threading.Lock()

    def register(self, color: Color) -> str:
        """Record color if its cname is new; return the cname."""
        cname = color.cname
        if cname not in self._colors:
            with self._lock:
                self._colors.setdefault(cname, color)
        return cname

    def merge(self, other: ColorRegistry) -> ColorRegistry:
        """Append other's colors (in its order) that are not yet known."""
        if other is self:
            return self
        with self._lock:
            for cname, color in other.items():
                self._colors.setdefault(cname, color)
        return self

    def items(self) -> list[tuple[str, Color]]:
        """Snapshot of (cname, color) pairs in insertion order."""
        return list(self._colors.items())

    def get(self, cname: str) -> Color | None:
        return self._colors.get(cname)

    def __contains__(self, cname: object) -> bool:
        return cname in self._colors

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._colors))

    def __len__(self) -> int:
        return len(self._colors)

    def __repr__(self) -> str:
        return f"ColorRegistry({list(self._colors)!r})"
