"""TreeRenderer protocol: stable interface for node tree renderers.

Any renderer that implements ``render(node) -> str`` conforms to this
protocol. HtmlRenderer and MarkupRenderer are the built-in implementations.

Example:
    from quire.renderers.protocol import TreeRenderer

    def render_page(renderer: TreeRenderer, tree: Node) -> str:
        return renderer.render(tree)

"""

from typing import Protocol, runtime_checkable

from quire.nodes import Node


@runtime_checkable
class TreeRenderer(Protocol):
    """Protocol for node tree renderers."""

    def render(self, node: Node) -> str:
        """Render a tree to a string.

        Args:
            node: Root of the tree to render.

        Returns:
            Rendered string output.

        """
        ...
