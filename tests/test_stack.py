"""Tests for Frame, VisitStack and ColorRegistry."""

import pytest

from quire import Color, ColorRegistry, Frame, MissingContextError, VisitStack
from quire.stack import FULL_MARKUP


def _frame(node_type: str, **values: object) -> Frame:
    frame = Frame(node_type)
    for key, value in values.items():
        frame[key] = value
    frame.seal()
    return frame


class TestFrame:
    """Frame writes and sealing."""

    def test_write_before_seal(self) -> None:
        frame = Frame("table", index=2)
        frame["columns"] = ()
        assert frame["columns"] == ()
        assert "columns" in frame
        assert frame.index == 2
        assert frame.keys() == ["columns"]

    def test_sealed_frame_rejects_writes(self) -> None:
        frame = _frame("table", columns=())
        assert frame.sealed
        with pytest.raises(TypeError, match="sealed"):
            frame["columns"] = (1,)

    def test_get_default(self) -> None:
        assert Frame("row").get("missing", 7) == 7


class TestVisitStack:
    """Persistent push, reads and failures."""

    def test_push_is_persistent(self) -> None:
        root = VisitStack()
        one = root.push(_frame("document"))
        two = one.push(_frame("paragraph"))
        assert len(root) == 0
        assert len(one) == 1
        assert [f.node_type for f in two] == ["document", "paragraph"]

    def test_siblings_do_not_share_frames(self) -> None:
        parent = VisitStack().push(_frame("document"))
        left = parent.push(_frame("paragraph", mark="left"))
        right = parent.push(_frame("paragraph"))
        assert left.lookup("mark") == "left"
        assert right.lookup("mark") is None

    def test_top_parent_ancestors(self) -> None:
        stack = VisitStack().push(_frame("table")).push(_frame("tableRow"))
        assert stack.top is not None and stack.top.node_type == "tableRow"
        assert stack.parent is not None and stack.parent.node_type == "table"
        assert [f.node_type for f in stack.ancestors] == ["table"]
        assert VisitStack().top is None
        assert VisitStack().parent is None

    def test_require_by_index(self) -> None:
        stack = VisitStack().push(_frame("table", columns=("a",))).push(_frame("tableRow"))
        assert stack.require("columns", -2) == ("a",)
        assert stack.require("columns", 0) == ("a",)

    def test_require_missing_key(self) -> None:
        stack = VisitStack().push(_frame("document")).push(_frame("tableRow"))
        with pytest.raises(MissingContextError) as exc_info:
            stack.require("columns", -2)
        assert exc_info.value.key == "columns"
        assert exc_info.value.node_type == "document"

    def test_require_beyond_stack(self) -> None:
        stack = VisitStack().push(_frame("tableCell"))
        with pytest.raises(MissingContextError) as exc_info:
            stack.require("columns", -3)
        assert exc_info.value.index == -3
        assert exc_info.value.node_type is None

    def test_lookup_nearest_first(self) -> None:
        stack = (
            VisitStack()
            .push(_frame("quote", level="outer"))
            .push(_frame("paragraph"))
            .push(_frame("styledText", level="inner"))
        )
        assert stack.lookup("level") == "inner"
        assert stack.ancestors.lookup("level") == "outer"

    def test_full_markup_defaults_to_empty(self) -> None:
        assert VisitStack().full_markup == ""
        stack = VisitStack().push(_frame("emphasisText", **{FULL_MARKUP: "^/"}))
        assert stack.push(_frame("text")).full_markup == "^/"

    def test_accumulator_travels_with_push(self) -> None:
        registry = ColorRegistry()
        stack = VisitStack(accumulator=registry).push(_frame("document"))
        assert stack.accumulator is registry
        assert stack.ancestors.accumulator is registry

    def test_with_accumulator(self) -> None:
        stack = VisitStack().push(_frame("document"))
        branch = ColorRegistry()
        moved = stack.with_accumulator(branch)
        assert moved.accumulator is branch
        assert moved.top is stack.top

    def test_repr(self) -> None:
        stack = VisitStack().push(_frame("table")).push(_frame("tableRow"))
        assert repr(stack) == "VisitStack(table > tableRow)"


class TestColorRegistry:
    """Append-only, first-writer-wins registry."""

    def test_register_returns_cname(self) -> None:
        registry = ColorRegistry()
        assert registry.register(Color("Dark Blue")) == "dark-blue"
        assert "dark-blue" in registry

    def test_first_writer_wins(self) -> None:
        registry = ColorRegistry()
        registry.register(Color("Red"))
        registry.register(Color("red"))
        assert len(registry) == 1
        assert registry.get("red") == Color("Red")

    def test_insertion_order(self) -> None:
        registry = ColorRegistry()
        for name in ("blue", "red", "blue", "green"):
            registry.register(Color(name))
        assert list(registry) == ["blue", "red", "green"]

    def test_merge_appends_unknown_only(self) -> None:
        left = ColorRegistry()
        left.register(Color("red"))
        right = ColorRegistry()
        right.register(Color("Red"))
        right.register(Color("blue"))
        assert left.merge(right) is left
        assert [color.name for _, color in left.items()] == ["red", "blue"]

    def test_merge_self(self) -> None:
        registry = ColorRegistry()
        registry.register(Color("red"))
        assert len(registry.merge(registry)) == 1
