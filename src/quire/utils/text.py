"""Name conversion helpers.

Theme tables use camelCase property names; stylesheet variables use
dash-case and Python options use snake_case.

Example:
    >>> camel_to_dash("lineHeight")
    'line-height'
    >>> camel_to_snake("extraCoreCss")
    'extra_core_css'
"""

from __future__ import annotations

import re

_HUMP = re.compile(r"(?<=[a-z0-9])([A-Z])|(?<=[A-Z])([A-Z])(?=[a-z])")


def _split_humps(name: str, separator: str) -> str:
    return _HUMP.sub(lambda m: separator + (m.group(1) or m.group(2)), name).lower()


def camel_to_dash(name: str) -> str:
    """Convert ``camelCase`` to ``dash-case``.

    Already dashed or lowercase names pass through unchanged.

    Examples:
        >>> camel_to_dash("textColor")
        'text-color'
        >>> camel_to_dash("h1")
        'h1'
    """
    return _split_humps(name, "-")


def camel_to_snake(name: str) -> str:
    """Convert ``camelCase`` to ``snake_case``.

    Examples:
        >>> camel_to_snake("standaloneCss")
        'standalone_css'
        >>> camel_to_snake("max_workers")
        'max_workers'
    """
    return _split_humps(name, "_")
