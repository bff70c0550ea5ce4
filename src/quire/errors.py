"""Exception classes for quire.

Every error raised by the renderers derives from QuireError. None of them
are recovered inside a render call: the caller receives the exception,
never a partially rendered string.
"""

from __future__ import annotations


class QuireError(Exception):
    """Base exception for all quire errors.

    Subclass this for specific error categories.
    """

    pass


class UnknownNodeTypeError(QuireError):
    """A node's type has no main handler in the active handler table.

    Raised instead of silently dropping the node's content.
    """

    def __init__(self, node_type: str, renderer: str | None = None) -> None:
        """Initialize unknown node type error.

        Args:
            node_type: The unhandled node type name
            renderer: Name of the renderer whose table was searched (optional)
        """
        self.node_type = node_type
        self.renderer = renderer

        where = f" in {renderer}" if renderer else ""
        super().__init__(f"No handler for node type '{node_type}'{where}")


class UngroupedChildError(QuireError):
    """A grouping parent received a child type it does not classify.

    Only raised when the ungrouped policy is ``UngroupedPolicy.ERROR``.
    """

    def __init__(self, parent_type: str, child_type: str) -> None:
        self.parent_type = parent_type
        self.child_type = child_type
        super().__init__(
            f"Node type '{child_type}' is not a grouped child of '{parent_type}'"
        )


class MissingContextError(QuireError):
    """A handler read an ancestor frame value no pre-visit hook set.

    Typical cause: a table cell rendered outside of a table, so the column
    metadata the cell expects is absent.
    """

    def __init__(self, key: str, index: int | None = None, node_type: str | None = None) -> None:
        """Initialize missing context error.

        Args:
            key: Frame key that was required
            index: Stack index that was searched (None = whole stack)
            node_type: Type of the node owning the searched frame (optional)
        """
        self.key = key
        self.index = index
        self.node_type = node_type

        location = ""
        if index is not None:
            location = f" at stack index {index}"
            if node_type:
                location += f" ({node_type})"
        super().__init__(f"Missing required context '{key}'{location}")


class ConfigurationError(QuireError):
    """Renderer constructed with an unusable theme or configuration.

    Raised at construction time, before any render call.
    """

    pass


class HandlerDeclarationError(QuireError):
    """A renderer declares an inconsistent handler table.

    Raised when the table is built, e.g. a pre-visit hook for a type that
    has no main handler.
    """

    pass
