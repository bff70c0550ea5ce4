"""Visit stack: per-ancestor context threaded through a render walk.

Every node being rendered owns one Frame. The walker creates the frame
empty, lets the node's pre-visit hook fill it, then seals it before any
child is rendered. Descendants (and the node's own main handler) read it
through the VisitStack, which lists the open frames from the root
(index 0) to the innermost node (index -1).

The stack is persistent: push() returns a new stack and never changes the
receiver. Siblings therefore never observe each other's frames, and
independent subtrees can be rendered on different threads from the same
parent stack.

Example:
    >>> frame = Frame("styledText")
    >>> frame["own_markup"] = "^+"
    >>> frame.seal()
    >>> stack = VisitStack().push(frame)
    >>> stack.require("own_markup")
    '^+'
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from quire.accumulator import ColorRegistry
from quire.errors import MissingContextError

_MISSING = object()

#: Frame key holding the cumulative control sequence active at a node.
FULL_MARKUP = "full_markup"
#: Frame key holding the control sequence a node introduces itself.
OWN_MARKUP = "own_markup"


class Frame:
    """Renderer-defined state for one open node.

    Attributes:
        node_type: Type of the node owning the frame
        index: Position of the node among its parent's ordered children
    """

    __slots__ = ("node_type", "index", "_values", "_sealed")

    def __init__(self, node_type: str, index: int = 0) -> None:
        self.node_type = node_type
        self.index = index
        self._values: dict[str, Any] = {}
        self._sealed = False

    def __setitem__(self, key: str, value: Any) -> None:
        if self._sealed:
            msg = f"Frame for '{self.node_type}' is sealed; only its pre-visit hook may write it"
            raise TypeError(msg)
        self._values[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def keys(self) -> list[str]:
        return list(self._values)

    def seal(self) -> None:
        """Make the frame read-only."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __repr__(self) -> str:
        return f"Frame({self.node_type!r}, index={self.index}, {self._values!r})"


class VisitStack:
    """Immutable sequence of open frames, root first.

    Attributes:
        accumulator: Discovered-color registry of the current render branch
    """

    __slots__ = ("_frames", "accumulator")

    def __init__(
        self,
        frames: tuple[Frame, ...] = (),
        accumulator: ColorRegistry | None = None,
    ) -> None:
        self._frames = frames
        self.accumulator = accumulator if accumulator is not None else ColorRegistry()

    def push(self, frame: Frame) -> VisitStack:
        """Return a new stack with frame on top."""
        return VisitStack(self._frames + (frame,), self.accumulator)

    def with_accumulator(self, accumulator: ColorRegistry) -> VisitStack:
        """Same frames, different color registry (used for concurrent branches)."""
        return VisitStack(self._frames, accumulator)

    @property
    def top(self) -> Frame | None:
        """Innermost frame, or None for an empty stack."""
        return self._frames[-1] if self._frames else None

    @property
    def parent(self) -> Frame | None:
        """Frame just below the top, or None."""
        return self._frames[-2] if len(self._frames) > 1 else None

    @property
    def ancestors(self) -> VisitStack:
        """The stack without its top frame."""
        return VisitStack(self._frames[:-1], self.accumulator)

    @property
    def depth(self) -> int:
        return len(self._frames)

    def require(self, key: str, index: int = -1) -> Any:
        """Return key from the frame at index, failing fast when absent.

        Raises:
            MissingContextError: no frame at index, or the frame lacks key
        """
        try:
            frame = self._frames[index]
        except IndexError:
            raise MissingContextError(key, index) from None

        value = frame.get(key, _MISSING)
        if value is _MISSING:
            raise MissingContextError(key, index, frame.node_type)
        return value

    def lookup(self, key: str, default: Any = None) -> Any:
        """Return key from the nearest frame that defines it."""
        for frame in reversed(self._frames):
            value = frame.get(key, _MISSING)
            if value is not _MISSING:
                return value
        return default

    @property
    def full_markup(self) -> str:
        """Cumulative control sequence of the innermost formatting frame ("" at root)."""
        return self.lookup(FULL_MARKUP, "")

    def __getitem__(self, index: int) -> Frame:
        return self._frames[index]

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        path = " > ".join(frame.node_type for frame in self._frames)
        return f"VisitStack({path})"
