"""Renderer configuration for quire.

RenderConfig is an immutable bundle set once at renderer construction and
read by every render call on that renderer.

Thread Safety:
    Frozen dataclass, safe to share across threads and renderers.

Usage:
    config = RenderConfig(standalone=True, core_css=get_builtin_css("core"))
    renderer = HtmlRenderer(theme, config)

    # Or from an options mapping (camelCase keys accepted, unknown ignored)
    config = RenderConfig.from_dict({"standalone": True, "extraCoreCss": "..."})

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any

from quire.errors import ConfigurationError
from quire.utils.text import camel_to_snake


class UngroupedPolicy(Enum):
    """Where a grouping parent places children of unclassified types.

    LAST: after every declared bucket, in document order (weight +inf)
    FIRST: before every declared bucket, in document order (weight -inf)
    ERROR: raise UngroupedChildError
    """

    LAST = "last"
    FIRST = "first"
    ERROR = "error"


# Literal stylesheet options, in the order the standalone envelope emits them.
CSS_OPTIONS: tuple[str, ...] = (
    "standalone_css",
    "extra_standalone_css",
    "core_css",
    "extra_core_css",
    "code_css",
    "extra_code_css",
)


def _normalize_css(css: str | None) -> str:
    css = (css or "").strip()
    return css + "\n" if css else ""


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Immutable render configuration.

    Attributes:
        standalone: Emit a full HTML document instead of a scoped fragment
        standalone_css: Literal CSS for the standalone page
        extra_standalone_css: Additional standalone CSS
        core_css: Literal core stylesheet
        extra_core_css: Additional core CSS
        code_css: Literal CSS for highlighted code
        extra_code_css: Additional code CSS
        title: Fallback document title for the standalone envelope
        ungrouped: Placement of unclassified children under grouping parents
        max_workers: Threads used to render the root's children (1 = sequential)

    """

    standalone: bool = False
    standalone_css: str = ""
    extra_standalone_css: str = ""
    core_css: str = ""
    extra_core_css: str = ""
    code_css: str = ""
    extra_code_css: str = ""
    title: str | None = None
    ungrouped: UngroupedPolicy = UngroupedPolicy.LAST
    max_workers: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "standalone", bool(self.standalone))
        for name in CSS_OPTIONS:
            object.__setattr__(self, name, _normalize_css(getattr(self, name)))

        if not isinstance(self.ungrouped, UngroupedPolicy):
            try:
                object.__setattr__(self, "ungrouped", UngroupedPolicy(self.ungrouped))
            except ValueError:
                msg = f"Unknown ungrouped policy: {self.ungrouped!r}"
                raise ConfigurationError(msg) from None

        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            msg = f"max_workers must be a positive integer, got {self.max_workers!r}"
            raise ConfigurationError(msg)

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> RenderConfig:
        """Create RenderConfig from dictionary.

        Keys may be snake_case or camelCase (``extraCoreCss``). Only keys
        naming RenderConfig fields are used; unknown keys are silently
        ignored.

        Example:
            >>> config = RenderConfig.from_dict({
            ...     "standalone": True,
            ...     "coreCss": "p { margin: 0; }",
            ...     "unknown_key": "ignored",
            ... })
            >>> config.core_css
            'p { margin: 0; }\\n'

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {}
        for key, value in config_dict.items():
            name = camel_to_snake(key)
            if name in valid_fields:
                filtered[name] = value
        return cls(**filtered)

    def with_options(self, options: Mapping[str, Any]) -> RenderConfig:
        """Return a copy overridden by an options mapping (same rules as from_dict)."""
        if not options:
            return self
        valid_fields = {f.name for f in fields(self)}
        overrides = {}
        for key, value in options.items():
            name = camel_to_snake(key)
            if name in valid_fields:
                overrides[name] = value
        return replace(self, **overrides)

    @property
    def stylesheet(self) -> str:
        """All literal CSS in envelope order."""
        return "".join(getattr(self, name) for name in CSS_OPTIONS)


DEFAULT_CONFIG: RenderConfig = RenderConfig()


__all__ = [
    "CSS_OPTIONS",
    "DEFAULT_CONFIG",
    "RenderConfig",
    "UngroupedPolicy",
]
