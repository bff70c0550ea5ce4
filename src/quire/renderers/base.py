"""Base class shared by the quire renderers.

A renderer is a class whose methods are decorated with @handler,
@previsit and @grouped. The handler table is collected once when the
class is created and bound to each instance at construction.

Per-render state (visit stack, discovered colors) is created fresh for
each render call, so instances can be shared between threads. Colors
discovered by each call are afterwards merged into the instance's
cumulative ``colors`` registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from quire.accumulator import ColorRegistry
from quire.config import DEFAULT_CONFIG, RenderConfig
from quire.handlers import HandlerTable
from quire.nodes import Node
from quire.stack import VisitStack
from quire.theme import ThemeLike, validate_theme
from quire.utils.logger import get_logger
from quire.walker import Walker

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Output of one render call together with the colors it referenced.

    Attributes:
        output: Rendered document string
        colors: Colors discovered during this call, first-referenced first
    """

    output: str
    colors: ColorRegistry


class BaseRenderer:
    """Common construction and render entry point.

    Subclasses declare handlers; they normally need no other code.

    Attributes:
        handler_table: Unbound table collected from the class declarations
        requires_theme: Whether construction fails without a theme
    """

    handler_table: ClassVar[HandlerTable] = HandlerTable({}, {})
    requires_theme: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.handler_table = HandlerTable.from_class(cls)

    def __init__(
        self,
        theme: ThemeLike | None = None,
        config: RenderConfig | None = None,
        **options: Any,
    ) -> None:
        """Initialize renderer.

        Args:
            theme: Palette and scalar tables (required when requires_theme)
            config: Render configuration
            **options: Overrides applied on top of config; camelCase keys
                are accepted and unknown keys are ignored

        Raises:
            ConfigurationError: missing or incomplete theme, invalid options
        """
        if self.requires_theme or theme is not None:
            validate_theme(theme)

        self.theme = theme
        self.config = (config or DEFAULT_CONFIG).with_options(options)
        self.colors = ColorRegistry()

        self._table = type(self).handler_table.bind(self)
        self._walker = Walker(
            self._table,
            ungrouped=self.config.ungrouped,
            max_workers=self.config.max_workers,
        )

    @property
    def table(self) -> HandlerTable:
        """The handler table bound to this instance."""
        return self._table

    @property
    def walker(self) -> Walker:
        return self._walker

    def render_result(self, node: Node) -> RenderResult:
        """Render a tree and report the colors it referenced.

        Raises:
            QuireError: any handling failure; no partial output is returned
        """
        registry = ColorRegistry()
        output = self._walker.render(node, VisitStack(accumulator=registry))
        self.colors.merge(registry)
        logger.debug(
            "%s rendered '%s' (%d chars, %d colors)",
            type(self).__name__, node.type, len(output), len(registry),
        )
        return RenderResult(output, registry)

    def render(self, node: Node) -> str:
        """Render a tree to a string."""
        return self.render_result(node).output
