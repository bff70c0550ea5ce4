"""Syntax highlighting protocol and injection for quire.

Code blocks that declare a language are passed to a highlighter, which
returns HTML markup for the code body. Blocks without a language never
reach it.

When quire[syntax] is installed, Rosettes is picked up automatically.

Usage:
    # Per renderer
    renderer = HtmlRenderer(theme, highlighter=my_highlighter)

    # Process-wide
    from quire.highlighting import set_highlighter

    def my_highlighter(code: str, language: str) -> str:
        return f'<span class="lang-{language}">{html.escape(code)}</span>'

    set_highlighter(my_highlighter)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from quire.utils.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Thread Safety:
        Implementations must be thread-safe. highlight() may be called
        concurrently when a renderer is shared across threads.
    """

    def highlight(self, code: str, language: str) -> str:
        """Highlight code.

        Args:
            code: Source code to highlight
            language: Language identifier (e.g., "python", "js")

        Returns:
            HTML markup for the inside of a ``<code>`` element

        Contract:
            - MUST escape HTML entities in code
            - MAY raise; renderers propagate the error unchanged
        """
        ...


# Support for simple callable-based highlighters
SimpleHighlighter = Callable[[str, str], str]

# Global highlighter
_highlighter: Highlighter | SimpleHighlighter | None = None
_tried_rosettes: bool = False


def set_highlighter(highlighter: Highlighter | SimpleHighlighter | None) -> None:
    """Set the process-wide syntax highlighter.

    Args:
        highlighter: A Highlighter implementation or a function taking
            (code, language). Pass None to clear it.
    """
    global _highlighter
    _highlighter = highlighter


def _try_import_rosettes() -> bool:
    """Try to import and configure the Rosettes highlighter."""
    global _highlighter, _tried_rosettes

    if _tried_rosettes:
        return _highlighter is not None

    _tried_rosettes = True

    try:
        import rosettes  # type: ignore[import-not-found]
    except ImportError:
        logger.debug("rosettes is not installed; code blocks render unhighlighted")
        return False

    class RosettesHighlighter:
        """Rosettes-based highlighter implementing the Highlighter protocol."""

        def highlight(self, code: str, language: str) -> str:
            result: str = rosettes.highlight(code, language=language)
            return result

    _highlighter = RosettesHighlighter()
    return True


def get_highlighter() -> Highlighter | SimpleHighlighter | None:
    """Get the process-wide highlighter, loading Rosettes on first use."""
    if _highlighter is None:
        _try_import_rosettes()
    return _highlighter


def has_highlighter() -> bool:
    """Check if a syntax highlighter is available."""
    return get_highlighter() is not None


def run_highlighter(highlighter: Highlighter | SimpleHighlighter, code: str, language: str) -> str:
    """Call either flavour of highlighter."""
    if isinstance(highlighter, Highlighter):
        return highlighter.highlight(code, language)
    return highlighter(code, language)
