"""Handler table declaration and lookup.

A renderer declares what to do with each node type through decorators on
its methods. The declarations are collected once per renderer class into
an immutable HandlerTable, which is bound to each renderer instance at
construction; the walker only ever does dictionary lookups.

Declarations:

``@handler("type", ...)``
    Main render function, called bottom-up with the concatenated rendered
    children: ``(self, data, children, stack) -> str``.

``@previsit("type", ...)``
    Pre-visit hook, called top-down before any child is rendered:
    ``(self, data, frame, stack) -> None``. It fills ``frame``, the node's
    own (still writable) frame; ``stack`` holds the ancestors only.

``@grouped("parent", "child", order=n)``
    Declares that children of type ``child`` under a ``parent`` form one
    bucket, serialized in ascending ``order``. The decorated function wraps
    the bucket's concatenation: ``(self, parent_data, rendered, stack) -> str``.

Example:
    class MyRenderer(BaseRenderer):
        @handler("table")
        def table(self, data, children, stack):
            return f"<table>{children}</table>"

        @grouped("table", "tableRow", order=3)
        def table_body(self, data, rows, stack):
            return f"<tbody>{rows}</tbody>"

Thread Safety:
    HandlerTable is immutable after build(). Use HandlerTableBuilder for
    construction.

"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from quire.errors import HandlerDeclarationError, UnknownNodeTypeError
from quire.utils.logger import get_logger

if TYPE_CHECKING:
    from quire.stack import Frame, VisitStack

logger = get_logger(__name__)

RenderFunc = Callable[[Mapping[str, Any], str, "VisitStack"], str]
PrevisitFunc = Callable[[Mapping[str, Any], "Frame", "VisitStack"], None]
WrapFunc = Callable[[Mapping[str, Any], str, "VisitStack"], str]

# Attribute holding declarations on decorated functions
_DECLARATIONS_ATTR = "__quire_declarations__"


@dataclass(frozen=True, slots=True)
class Declaration:
    """Metadata a decorator attaches to a handler function."""

    kind: str  # "render", "previsit" or "group"
    node_type: str
    parent_type: str | None = None
    order: float = 0


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    """Resolved handlers for one node type."""

    node_type: str
    render: RenderFunc
    previsit: PrevisitFunc | None = None


@dataclass(frozen=True, slots=True)
class Bucket:
    """One structural bucket of a grouping parent.

    Attributes:
        node_type: Child type collected into this bucket
        order: Serialization weight (ascending)
        wrap: Optional envelope applied to the bucket's concatenation
    """

    node_type: str
    order: float
    wrap: WrapFunc | None = None


@dataclass(frozen=True, slots=True)
class GroupingDescriptor:
    """Fixed structural child order for one parent type."""

    parent_type: str
    buckets: Mapping[str, Bucket]

    def bucket_for(self, child_type: str) -> Bucket | None:
        return self.buckets.get(child_type)

    def ordered_buckets(self) -> list[Bucket]:
        """Buckets by ascending order; ties keep declaration order."""
        return sorted(self.buckets.values(), key=lambda b: b.order)


def _declare(func: Any, declaration: Declaration) -> Any:
    existing = getattr(func, _DECLARATIONS_ATTR, ())
    setattr(func, _DECLARATIONS_ATTR, (*existing, declaration))
    return func


def handler(*node_types: str) -> Callable[[Any], Any]:
    """Declare the decorated method as the main handler for node_types."""
    if not node_types:
        raise ValueError("At least one node type must be provided")

    def decorator(func: Any) -> Any:
        for node_type in node_types:
            _declare(func, Declaration("render", node_type))
        return func

    return decorator


def previsit(*node_types: str) -> Callable[[Any], Any]:
    """Declare the decorated method as the pre-visit hook for node_types."""
    if not node_types:
        raise ValueError("At least one node type must be provided")

    def decorator(func: Any) -> Any:
        for node_type in node_types:
            _declare(func, Declaration("previsit", node_type))
        return func

    return decorator


def grouped(parent_type: str, child_type: str, *, order: float) -> Callable[[Any], Any]:
    """Declare a bucket of parent_type's children, wrapped by the decorated method."""

    def decorator(func: Any) -> Any:
        return _declare(func, Declaration("group", child_type, parent_type, order))

    return decorator


def declarations_of(func: Any) -> tuple[Declaration, ...]:
    """Declarations attached to a function (empty if undecorated)."""
    return getattr(func, _DECLARATIONS_ATTR, ())


class HandlerTable:
    """Immutable mapping of node type -> handlers, plus grouping descriptors.

    Thread Safety:
        Immutable after creation. Safe to share across threads.

    """

    __slots__ = ("_entries", "_groupings", "_name")

    def __init__(
        self,
        entries: Mapping[str, HandlerEntry],
        groupings: Mapping[str, GroupingDescriptor],
        name: str | None = None,
    ) -> None:
        """Initialize table with pre-built mappings.

        Use HandlerTableBuilder or HandlerTable.from_class to create instances.
        """
        self._entries = MappingProxyType(dict(entries))
        self._groupings = MappingProxyType(dict(groupings))
        self._name = name

    @classmethod
    def from_class(cls, owner: type) -> HandlerTable:
        """Collect the declarations of owner and its bases.

        Bases are visited first, so a subclass declaration for a type
        replaces the inherited one. Declaring the same main handler or
        pre-visit hook twice within one class body is an error.
        """
        builder = HandlerTableBuilder(name=owner.__name__)
        for klass in reversed(owner.__mro__):
            seen: set[tuple[str, str, str | None]] = set()
            for attr, value in vars(klass).items():
                func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
                for decl in declarations_of(func):
                    key = (decl.kind, decl.node_type, decl.parent_type)
                    if key in seen:
                        msg = (
                            f"{klass.__name__} declares {decl.kind} for "
                            f"'{decl.node_type}' more than once (at {attr})"
                        )
                        raise HandlerDeclarationError(msg)
                    seen.add(key)
                    builder.declare(decl, attr)
        return builder.build()

    def bind(self, instance: Any) -> HandlerTable:
        """Return a table whose functions are instance's methods.

        Functions stored by from_class are looked up by attribute name on
        instance, so method overrides without decorators are honoured.
        """

        def resolve(func: Any) -> Any:
            if isinstance(func, str):
                return getattr(instance, func)
            return func

        entries = {
            node_type: HandlerEntry(
                node_type=node_type,
                render=resolve(entry.render),
                previsit=resolve(entry.previsit) if entry.previsit is not None else None,
            )
            for node_type, entry in self._entries.items()
        }
        groupings = {
            parent: GroupingDescriptor(
                parent_type=parent,
                buckets=MappingProxyType(
                    {
                        child: Bucket(
                            bucket.node_type,
                            bucket.order,
                            resolve(bucket.wrap) if bucket.wrap is not None else None,
                        )
                        for child, bucket in descriptor.buckets.items()
                    }
                ),
            )
            for parent, descriptor in self._groupings.items()
        }
        return HandlerTable(entries, groupings, name=type(instance).__name__)

    def lookup(self, node_type: str) -> HandlerEntry:
        """Get the handlers for node_type.

        Raises:
            UnknownNodeTypeError: node_type has no main handler
        """
        entry = self._entries.get(node_type)
        if entry is None:
            raise UnknownNodeTypeError(node_type, self._name)
        return entry

    def grouping(self, parent_type: str) -> GroupingDescriptor | None:
        """Grouping descriptor for parent_type's children, if any."""
        return self._groupings.get(parent_type)

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def types(self) -> frozenset[str]:
        """All node types with a main handler."""
        return frozenset(self._entries)

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class HandlerTableBuilder:
    """Mutable builder for HandlerTable.

    Example:
        >>> builder = HandlerTableBuilder()
        >>> _ = builder.render("text", lambda data, children, stack: data["text"])
        >>> table = builder.build()
        >>> "text" in table
        True

    """

    __slots__ = ("_renders", "_previsits", "_groups", "_name")

    def __init__(self, name: str | None = None) -> None:
        self._renders: dict[str, Any] = {}
        self._previsits: dict[str, Any] = {}
        self._groups: dict[str, dict[str, Bucket]] = {}
        self._name = name

    def render(self, node_type: str, func: RenderFunc | str) -> HandlerTableBuilder:
        """Set the main handler for node_type (replacing any previous one)."""
        self._renders[node_type] = func
        return self

    def previsit(self, node_type: str, func: PrevisitFunc | str) -> HandlerTableBuilder:
        """Set the pre-visit hook for node_type (replacing any previous one)."""
        self._previsits[node_type] = func
        return self

    def group(
        self,
        parent_type: str,
        child_type: str,
        order: float,
        wrap: WrapFunc | str | None = None,
    ) -> HandlerTableBuilder:
        """Declare a bucket for child_type under parent_type."""
        self._groups.setdefault(parent_type, {})[child_type] = Bucket(child_type, order, wrap)
        return self

    def declare(self, decl: Declaration, func: Any) -> HandlerTableBuilder:
        """Apply one decorator declaration."""
        if decl.kind == "render":
            return self.render(decl.node_type, func)
        if decl.kind == "previsit":
            return self.previsit(decl.node_type, func)
        if decl.kind == "group":
            assert decl.parent_type is not None
            return self.group(decl.parent_type, decl.node_type, decl.order, func)
        msg = f"Unknown declaration kind: {decl.kind!r}"
        raise HandlerDeclarationError(msg)

    def build(self) -> HandlerTable:
        """Create the immutable table.

        Raises:
            HandlerDeclarationError: a pre-visit hook or grouping refers to
                a type without a main handler
        """
        orphans = sorted(set(self._previsits) - set(self._renders))
        if orphans:
            msg = f"Pre-visit hooks declared without a main handler: {', '.join(orphans)}"
            raise HandlerDeclarationError(msg)

        orphan_parents = sorted(set(self._groups) - set(self._renders))
        if orphan_parents:
            msg = f"Grouping declared for types without a main handler: {', '.join(orphan_parents)}"
            raise HandlerDeclarationError(msg)

        entries = {
            node_type: HandlerEntry(node_type, func, self._previsits.get(node_type))
            for node_type, func in self._renders.items()
        }
        groupings = {
            parent: GroupingDescriptor(parent, MappingProxyType(dict(buckets)))
            for parent, buckets in self._groups.items()
        }
        logger.debug(
            "Built handler table %s: %d types, %d groupings",
            self._name, len(entries), len(groupings),
        )
        return HandlerTable(entries, groupings, name=self._name)
