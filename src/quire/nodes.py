"""Document tree nodes for quire.

A document is a tree of uniform nodes. Every node carries a ``type`` that
selects its handler, a ``data`` mapping of node-specific attributes (level,
href, style, column index, ...) and an ordered tuple of ``children``.

Nodes are frozen dataclasses with slots:
- Immutability: renderers only read the tree, and subtrees can be shared
  between threads
- Document order: ``children`` order is meaningful unless the parent's
  handler table groups its children by type

Common node types understood by the bundled renderers:

Block: document, header, paragraph, quote, cite, list, listItem,
orderedList, orderedListItem, imageBlock, horizontalRule, clearFloat,
codeBlock, anchor, table, tableCaption, tableHeadRow, tableRow,
tableHeadCell, tableCell

Inline: text, emphasisText, decoratedText, styledText, code, link, image,
pictogram

Example:
    >>> doc = node(
    ...     "document",
    ...     node("header", node("text", text="Title"), level=1),
    ... )
    >>> doc.children[0].get("level")
    1
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Node:
    """One element of the document tree.

    ``data`` is copied into a read-only mapping and ``children`` into a
    tuple on construction, so a node built from mutable inputs cannot be
    changed afterwards.

    Attributes:
        type: Node type name, the handler table key
        data: Node-specific attributes
        children: Child nodes in document order
    """

    type: str
    data: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    children: tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def get(self, key: str, default: Any = None) -> Any:
        """Read one data attribute."""
        return self.data.get(key, default)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants, depth-first, document order."""
        yield self
        for child in self.children:
            yield from child.walk()


def node(type: str, *children: Node | Iterable[Node], **data: Any) -> Node:
    """Build a node from positional children and keyword data.

    Iterables among the positional arguments are flattened one level so
    generated rows or items can be passed directly.

    Example:
        >>> node("paragraph", node("text", text="Hi")).children[0].type
        'text'
    """
    flat: list[Node] = []
    for child in children:
        if isinstance(child, Node):
            flat.append(child)
        else:
            flat.extend(child)
    return Node(type=type, data=data, children=tuple(flat))
