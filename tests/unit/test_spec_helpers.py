"""Tests for Spec document helpers."""

from __future__ import annotations

from specstream.core.spec import empty_spec, is_non_empty_spec, nested_to_flat
from specstream.core.validator import validate_spec


class TestNonEmptySpec:
    def test_empty(self) -> None:
        assert not is_non_empty_spec(empty_spec())
        assert not is_non_empty_spec(None)
        assert not is_non_empty_spec({"root": "a"})

    def test_non_empty(self) -> None:
        assert is_non_empty_spec({"root": "a", "elements": {"a": {"type": "Card"}}})


class TestNestedToFlat:
    def test_pre_order_keys(self) -> None:
        nested = {
            "type": "Card",
            "props": {"title": "Hi"},
            "children": [
                {"type": "Text", "props": {"text": "one"}},
                {"type": "Stack", "children": [{"type": "Text", "props": {"text": "two"}}]},
            ],
        }
        spec = nested_to_flat(nested)
        assert spec["root"] == "el-0"
        assert spec["elements"]["el-0"]["children"] == ["el-1", "el-2"]
        assert spec["elements"]["el-2"]["children"] == ["el-3"]
        assert spec["elements"]["el-3"]["props"] == {"text": "two"}
        assert spec["elements"]["el-2"]["props"] == {}
        assert validate_spec(spec).valid

    def test_carries_element_fields_and_state(self) -> None:
        nested = {
            "type": "Card",
            "visible": {"$state": "/show"},
            "state": {"show": True},
            "children": ["not a node", {"type": "Text"}],
        }
        spec = nested_to_flat(nested)
        assert spec["state"] == {"show": True}
        assert spec["elements"]["el-0"]["visible"] == {"$state": "/show"}
        assert spec["elements"]["el-0"]["children"] == ["el-1"]
