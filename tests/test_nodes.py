"""Tests for the document tree node type."""

import dataclasses

import pytest

from quire.nodes import Node, node


class TestNode:
    """Construction and immutability."""

    def test_builder(self) -> None:
        tree = node("header", node("text", text="Title"), level=1)
        assert tree.type == "header"
        assert tree.get("level") == 1
        assert tree.children[0].get("text") == "Title"

    def test_builder_flattens_iterables(self) -> None:
        rows = [node("tableRow"), node("tableRow")]
        tree = node("table", node("tableCaption"), rows)
        assert [c.type for c in tree.children] == ["tableCaption", "tableRow", "tableRow"]

    def test_defaults(self) -> None:
        leaf = Node("text")
        assert leaf.children == ()
        assert dict(leaf.data) == {}
        assert leaf.is_leaf

    def test_data_is_copied_and_read_only(self) -> None:
        source = {"level": 2}
        n = Node("header", source)
        source["level"] = 5
        assert n.get("level") == 2
        with pytest.raises(TypeError):
            n.data["level"] = 3  # type: ignore[index]

    def test_children_coerced_to_tuple(self) -> None:
        n = Node("paragraph", {}, [Node("text")])  # type: ignore[arg-type]
        assert isinstance(n.children, tuple)

    def test_frozen(self) -> None:
        n = node("text", text="x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            n.type = "code"  # type: ignore[misc]

    def test_equality(self) -> None:
        assert node("text", text="a") == node("text", text="a")
        assert node("text", text="a") != node("text", text="b")

    def test_walk_document_order(self) -> None:
        tree = node("document", node("paragraph", node("text", text="a")), node("horizontalRule"))
        assert [n.type for n in tree.walk()] == ["document", "paragraph", "text", "horizontalRule"]
