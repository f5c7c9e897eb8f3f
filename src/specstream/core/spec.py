"""
Helpers for Spec documents.

A Spec is a flat, key-addressed UI tree:

    {
        "root": "main",
        "elements": {
            "main": {"type": "Card", "props": {"title": "Hi"}, "children": ["body"]},
            "body": {"type": "Text", "props": {"text": {"$state": "/greeting"}}},
        },
        "state": {"greeting": "Hello"},
    }
"""

from __future__ import annotations

from typing import Any


def empty_spec() -> dict[str, Any]:
    """A Spec with no root and no elements."""
    return {"root": "", "elements": {}}


def is_non_empty_spec(spec: Any) -> bool:
    """Check if ``spec`` has a string root and at least one element."""
    if not isinstance(spec, dict):
        return False
    elements = spec.get("elements")
    return isinstance(spec.get("root"), str) and isinstance(elements, dict) and len(elements) > 0


def nested_to_flat(nested: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a nested element tree into a flat Spec.

    Each node gets a generated key (``el-0``, ``el-1``, ... in pre-order).
    Fields other than type/props/children are carried over to the flat
    element; a ``state`` dict on the top node becomes the Spec's state.

    Example:
        nested_to_flat({"type": "Card", "children": [{"type": "Text", "props": {"text": "Hi"}}]})
        -> {"root": "el-0", "elements": {"el-0": {..., "children": ["el-1"]}, "el-1": {...}}}
    """
    elements: dict[str, Any] = {}
    counter = 0

    def walk(node: dict[str, Any]) -> str:
        nonlocal counter
        key = f"el-{counter}"
        counter += 1

        child_keys = []
        raw_children = node.get("children")
        if isinstance(raw_children, list):
            for child in raw_children:
                if isinstance(child, dict) and "type" in child:
                    child_keys.append(walk(child))

        element: dict[str, Any] = {
            "type": node.get("type") or "unknown",
            "props": node.get("props") or {},
            "children": child_keys,
        }
        for name, value in node.items():
            if name in ("type", "props", "children", "state") or value is None:
                continue
            element[name] = value
        elements[key] = element
        return key

    root = walk(nested)
    spec: dict[str, Any] = {"root": root, "elements": elements}
    if isinstance(nested.get("state"), dict):
        spec["state"] = nested["state"]
    return spec
