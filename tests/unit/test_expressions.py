"""Tests for expression parsing and resolution.

Covers:
- Expression classification
- Prop resolution (deep, repeat scope, conditionals)
- Two-way binding paths
- Action param resolution ($item/$index as locations)
"""

from __future__ import annotations

import logging

import pytest

from specstream.expressions import (
    BindItemRef,
    CondExpr,
    IndexRef,
    ItemRef,
    ResolutionContext,
    StateRef,
    parse_expression,
    resolve_action_param,
    resolve_action_params,
    resolve_bindings,
    resolve_dynamic_value,
    resolve_element_props,
    resolve_prop_value,
)
from specstream.expressions.nodes import bind_item, bind_state, cond, index, item, state

TODOS = {"todos": [{"title": "Milk", "done": False}, {"title": "Eggs", "done": True}]}


def _scope(i: int = 0) -> ResolutionContext:
    return ResolutionContext(state_model=TODOS).for_item(TODOS["todos"][i], i, f"/todos/{i}")


# ============================================================================
# Classification
# ============================================================================


class TestParseExpression:
    def test_variants(self) -> None:
        assert parse_expression(state("/a")) == StateRef(path="/a")
        assert parse_expression(item("title")) == ItemRef(path="title")
        assert parse_expression(index()) == IndexRef()
        assert parse_expression(bind_item("done")) == BindItemRef(path="done")
        assert isinstance(parse_expression(cond(True, 1, 2)), CondExpr)

    def test_literals_are_not_expressions(self) -> None:
        assert parse_expression("text") is None
        assert parse_expression([state("/a")]) is None
        assert parse_expression({"title": "x"}) is None
        assert parse_expression({"$index": False}) is None
        assert parse_expression({"$state": 5}) is None


# ============================================================================
# Prop resolution
# ============================================================================


class TestResolvePropValue:
    def test_literal(self) -> None:
        ctx = ResolutionContext()
        assert resolve_prop_value("plain", ctx) == "plain"
        assert resolve_prop_value(None, ctx) is None

    def test_state(self) -> None:
        ctx = ResolutionContext(state_model={"user": {"name": "Ada"}})
        assert resolve_prop_value(state("/user/name"), ctx) == "Ada"
        assert resolve_prop_value(state("/user/missing"), ctx) is None

    def test_deep_resolution(self) -> None:
        ctx = ResolutionContext(state_model={"a": 3}).for_item(7, 0, "/items/0")
        value = {"list": [{"$state": "/a"}, {"$item": ""}]}
        assert resolve_prop_value(value, ctx) == {"list": [3, 7]}

    def test_item_and_index(self) -> None:
        ctx = _scope(1)
        assert resolve_prop_value(item("title"), ctx) == "Eggs"
        assert resolve_prop_value(index(), ctx) == 1

    def test_item_outside_scope_is_none(self) -> None:
        ctx = ResolutionContext(state_model=TODOS)
        assert resolve_prop_value(item("title"), ctx) is None
        assert resolve_prop_value(index(), ctx) is None

    def test_bind_reads_value(self) -> None:
        ctx = _scope(1)
        assert resolve_prop_value(bind_item("done"), ctx) is True
        assert resolve_prop_value(bind_state("/todos/0/title"), ctx) == "Milk"

    def test_conditional(self) -> None:
        ctx = ResolutionContext(state_model={"admin": True, "n": 2})
        assert resolve_prop_value(cond({"$state": "/admin"}, "Admin", "User"), ctx) == "Admin"
        value = cond({"$state": "/n", "gt": 5}, "big", {"$state": "/n"})
        assert resolve_prop_value(value, ctx) == 2

    def test_element_props(self) -> None:
        ctx = _scope(0)
        props = {"label": item("title"), "checked": bind_item("done"), "size": "sm"}
        assert resolve_element_props(props, ctx) == {"label": "Milk", "checked": False, "size": "sm"}
        assert resolve_element_props(None, ctx) == {}


class TestResolveBindings:
    def test_paths(self) -> None:
        props = {"value": bind_state("/form/email"), "checked": bind_item("done"), "label": "x"}
        assert resolve_bindings(props, _scope(0)) == {
            "value": "/form/email",
            "checked": "/todos/0/done",
        }

    def test_none_when_unbound(self) -> None:
        assert resolve_bindings({"label": "x"}, ResolutionContext()) is None

    def test_bind_item_outside_scope_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert resolve_bindings({"v": bind_item("done")}, ResolutionContext()) is None
        assert "outside repeat scope" in caplog.text


class TestResolveActionParam:
    """Action params address the item; props read it."""

    def test_item_is_path(self) -> None:
        ctx = _scope(0)
        assert resolve_action_param({"$item": "done"}, ctx) == "/todos/0/done"
        assert resolve_prop_value({"$item": "done"}, ctx) is False

    def test_whole_item_path(self) -> None:
        assert resolve_action_param(item(), _scope(1)) == "/todos/1"

    def test_index(self) -> None:
        assert resolve_action_param(index(), _scope(1)) == 1

    def test_other_values_resolve_like_props(self) -> None:
        ctx = _scope(0)
        assert resolve_action_param(state("/todos/1/title"), ctx) == "Eggs"
        assert resolve_action_param({"a": [state("/todos/0/title")]}, ctx) == {"a": ["Milk"]}

    def test_params_mapping(self) -> None:
        params = {"statePath": "/todos", "index": index()}
        assert resolve_action_params(params, _scope(1)) == {"statePath": "/todos", "index": 1}
        assert resolve_action_params(None, _scope(1)) is None


class TestResolveDynamicValue:
    def test_only_state_is_interpreted(self) -> None:
        model = {"a": 1}
        assert resolve_dynamic_value(state("/a"), model) == 1
        assert resolve_dynamic_value(item("x"), model) == {"$item": "x"}
        assert resolve_dynamic_value(5, model) == 5
