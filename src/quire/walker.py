"""Tree walker: node dispatch, context propagation and child grouping.

For every node the walker:

1. looks up the node type's handlers (UnknownNodeTypeError if none)
2. creates an empty Frame and runs the pre-visit hook on it (top-down)
3. seals the frame and pushes it onto the visit stack
4. orders the children, bucketing them when the node type declares a
   grouping, and renders each child recursively
5. calls the main handler with the concatenated children (bottom-up)
6. returns the handler's string; the extended stack is simply dropped

Rendering is a synchronous, pure recursive descent. The only mutable
shared state is the discovered-color registry carried by the stack.

Thread Safety:
    A Walker holds only immutable configuration and may be shared. With
    ``max_workers > 1`` the children of the root are rendered on a thread
    pool; each branch records colors into its own registry and the branch
    registries are merged back in document order, so the result is
    identical to a sequential walk.

"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeAlias

from quire.accumulator import ColorRegistry
from quire.config import UngroupedPolicy
from quire.errors import UngroupedChildError
from quire.handlers import Bucket, HandlerTable
from quire.nodes import Node
from quire.stack import Frame, VisitStack
from quire.utils.logger import get_logger

logger = get_logger(__name__)

# A run of sibling nodes serialized together, with the bucket wrapping it
# (None for document order or the fallback bucket).
Run: TypeAlias = "tuple[Bucket | None, tuple[Node, ...]]"


class Walker:
    """Render a node tree through a handler table.

    Usage:
        >>> walker = Walker(table)
        >>> walker.render(tree)

    """

    __slots__ = ("_table", "_ungrouped", "_max_workers")

    def __init__(
        self,
        table: HandlerTable,
        *,
        ungrouped: UngroupedPolicy = UngroupedPolicy.LAST,
        max_workers: int = 1,
    ) -> None:
        """Initialize walker.

        Args:
            table: Bound handler table to dispatch through
            ungrouped: Placement of unclassified children of grouping parents
            max_workers: Threads for rendering the root's children
        """
        self._table = table
        self._ungrouped = ungrouped
        self._max_workers = max_workers

    @property
    def table(self) -> HandlerTable:
        return self._table

    def render(self, node: Node, stack: VisitStack | None = None) -> str:
        """Render node (and its subtree) to a string.

        Args:
            node: Subtree root
            stack: Ancestor frames; a fresh empty stack (with a fresh color
                registry) when omitted

        Returns:
            The string produced by node's main handler
        """
        if stack is None:
            stack = VisitStack()
        return self._render(node, stack, 0)

    def _render(self, node: Node, stack: VisitStack, index: int) -> str:
        entry = self._table.lookup(node.type)

        frame = Frame(node.type, index)
        if entry.previsit is not None:
            entry.previsit(node.data, frame, stack)
        frame.seal()

        inner = stack.push(frame)
        runs = self.order_children(node.type, node.children)

        if self._max_workers > 1 and inner.depth == 1 and len(node.children) > 1:
            children = self._render_runs_concurrently(node, runs, inner)
        else:
            children = self._render_runs(node, runs, inner)

        return entry.render(node.data, children, inner)

    def _render_runs(self, node: Node, runs: Sequence[Run], stack: VisitStack) -> str:
        parts: list[str] = []
        for bucket, members in runs:
            rendered = "".join(
                self._render(child, stack, i) for i, child in enumerate(members)
            )
            if bucket is not None and bucket.wrap is not None:
                rendered = bucket.wrap(node.data, rendered, stack)
            parts.append(rendered)
        return "".join(parts)

    def _render_runs_concurrently(
        self, node: Node, runs: Sequence[Run], stack: VisitStack
    ) -> str:
        logger.debug(
            "Rendering %d children of '%s' on %d workers",
            len(node.children), node.type, self._max_workers,
        )
        merged = stack.accumulator
        parts: list[str] = []

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            scheduled: list[list[tuple[Future[str], ColorRegistry]]] = []
            for _bucket, members in runs:
                futures = []
                for i, child in enumerate(members):
                    branch = ColorRegistry()
                    future = pool.submit(self._render, child, stack.with_accumulator(branch), i)
                    futures.append((future, branch))
                scheduled.append(futures)

            # Merge branch registries in document order, wrapping as we go,
            # so registration order matches a sequential walk.
            for (bucket, _members), futures in zip(runs, scheduled, strict=True):
                pieces = []
                for future, branch in futures:
                    pieces.append(future.result())
                    merged.merge(branch)
                rendered = "".join(pieces)
                if bucket is not None and bucket.wrap is not None:
                    rendered = bucket.wrap(node.data, rendered, stack)
                parts.append(rendered)

        return "".join(parts)

    def order_children(self, parent_type: str, children: Sequence[Node]) -> list[Run]:
        """Split children into serialization runs.

        Without a grouping descriptor for parent_type the children form a
        single run in document order. Otherwise they are bucketed by type,
        buckets are sorted by declared order (stable within a bucket), and
        children of undeclared types form a fallback run placed according
        to the ungrouped policy. Empty buckets are omitted.

        Raises:
            UngroupedChildError: an undeclared child type under the ERROR policy
        """
        descriptor = self._table.grouping(parent_type)
        if descriptor is None:
            return [(None, tuple(children))] if children else []

        collected: dict[str, list[Node]] = {b.node_type: [] for b in descriptor.ordered_buckets()}
        fallback: list[Node] = []
        for child in children:
            if child.type in collected:
                collected[child.type].append(child)
            elif self._ungrouped is UngroupedPolicy.ERROR:
                raise UngroupedChildError(parent_type, child.type)
            else:
                fallback.append(child)

        runs: list[Run] = [
            (bucket, tuple(collected[bucket.node_type]))
            for bucket in descriptor.ordered_buckets()
            if collected[bucket.node_type]
        ]
        if fallback:
            if self._ungrouped is UngroupedPolicy.FIRST:
                runs.insert(0, (None, tuple(fallback)))
            else:
                runs.append((None, tuple(fallback)))
        return runs
