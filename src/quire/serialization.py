"""Tree serialization: JSON round-trip for quire node trees.

Converts node trees to/from JSON-compatible dicts. Useful for:
- Receiving trees from a producer in another process or language
- Caching trees on disk
- Debugging and inspection

A node serializes as ``{"type": ..., "data": {...}, "children": [...]}``.
Style and Color values inside ``data`` carry a ``_type`` discriminator so
they come back as value objects. Output keys are sorted for stable output.

Example:
    from quire.serialization import to_json, from_json

    tree = node("paragraph", node("text", text="Hi"))
    assert from_json(to_json(tree)) == tree

Thread Safety:
    All functions are pure. Safe to call from any thread.

"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from quire.nodes import Node
from quire.style import Color, Style


def to_dict(node: Node) -> dict[str, Any]:
    """Convert a node tree to a JSON-compatible dict."""
    result: dict[str, Any] = {"type": node.type}
    if node.data:
        result["data"] = {key: _serialize_value(value) for key, value in node.data.items()}
    if node.children:
        result["children"] = [to_dict(child) for child in node.children]
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Style):
        return {"_type": "Style", **value.to_dict()}
    if isinstance(value, Color):
        return {"_type": "Color", "name": value.name}
    if isinstance(value, Node):
        return to_dict(value)
    if isinstance(value, Mapping):
        return {key: _serialize_value(v) for key, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    return value


def from_dict(d: Mapping[str, Any]) -> Node:
    """Rebuild a node tree from a dict produced by to_dict().

    Raises:
        ValueError: d has no ``type``
    """
    node_type = d.get("type")
    if not isinstance(node_type, str):
        msg = f"Node dict has no 'type': {dict(d)!r}"
        raise ValueError(msg)

    data = {key: _deserialize_value(value) for key, value in (d.get("data") or {}).items()}
    children = tuple(from_dict(child) for child in d.get("children") or ())
    return Node(type=node_type, data=data, children=children)


def _deserialize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        tag = value.get("_type")
        if tag == "Style":
            return Style.from_dict({k: v for k, v in value.items() if k != "_type"})
        if tag == "Color":
            return Color(value["name"])
        return {key: _deserialize_value(v) for key, v in value.items()}
    if isinstance(value, list):
        return tuple(_deserialize_value(v) for v in value)
    return value


def to_json(node: Node, *, indent: int | None = None) -> str:
    """Serialize a node tree to a JSON string (sorted keys)."""
    return json.dumps(to_dict(node), indent=indent, sort_keys=True, ensure_ascii=False)


def from_json(text: str) -> Node:
    """Deserialize a node tree from a JSON string."""
    return from_dict(json.loads(text))
