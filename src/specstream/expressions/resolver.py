"""
Expression resolver.

One recursive resolver serves element props, visibility operands and action
params. Values that are not expressions are walked member by member, so
expressions can sit anywhere inside literal lists and objects.
"""

from __future__ import annotations

from typing import Any

from specstream.core.pointer import get_by_path

from .context import ResolutionContext, read_item, resolve_bind_item_path
from .nodes import (
    BindItemRef,
    BindStateRef,
    CondExpr,
    IndexRef,
    ItemRef,
    StateRef,
    parse_expression,
)


def resolve_prop_value(value: Any, ctx: ResolutionContext) -> Any:
    """
    Resolve a prop value against the context.

    Args:
        value: Literal, expression, or a container holding either
        ctx: State model and optional repeat scope

    Returns:
        The resolved value. $item/$index outside a repeat scope resolve to None.

    Example:
        ctx = ResolutionContext(state_model={"a": 3}, repeat_item=7, repeat_index=0,
                                repeat_base_path="/items/0")
        resolve_prop_value({"list": [{"$state": "/a"}, {"$item": ""}]}, ctx)
        -> {"list": [3, 7]}
    """
    if value is None:
        return None

    expr = parse_expression(value)
    if isinstance(expr, StateRef):
        return get_by_path(ctx.state_model, expr.path)
    if isinstance(expr, ItemRef):
        return read_item(expr.path, ctx)
    if isinstance(expr, IndexRef):
        return ctx.repeat_index
    if isinstance(expr, BindStateRef):
        return get_by_path(ctx.state_model, expr.path)
    if isinstance(expr, BindItemRef):
        path = resolve_bind_item_path(expr.path, ctx)
        if path is None:
            return None
        return get_by_path(ctx.state_model, path)
    if isinstance(expr, CondExpr):
        from .visibility import evaluate_visibility

        branch = expr.then if evaluate_visibility(expr.cond, ctx) else expr.else_
        return resolve_prop_value(branch, ctx)

    if isinstance(value, list):
        return [resolve_prop_value(member, ctx) for member in value]
    if isinstance(value, dict):
        return {key: resolve_prop_value(member, ctx) for key, member in value.items()}
    return value


def resolve_element_props(props: dict[str, Any] | None, ctx: ResolutionContext) -> dict[str, Any]:
    """Resolve every prop of an element."""
    return {key: resolve_prop_value(value, ctx) for key, value in (props or {}).items()}


def resolve_bindings(props: dict[str, Any] | None, ctx: ResolutionContext) -> dict[str, str] | None:
    """
    Collect write-back paths for two-way bound props.

    Returns:
        Mapping of prop name -> absolute state path, or None when no prop
        is bound.
    """
    bindings: dict[str, str] | None = None
    for key, value in (props or {}).items():
        expr = parse_expression(value)
        if isinstance(expr, BindStateRef):
            path: str | None = expr.path
        elif isinstance(expr, BindItemRef):
            path = resolve_bind_item_path(expr.path, ctx)
        else:
            continue
        if path is not None:
            if bindings is None:
                bindings = {}
            bindings[key] = path
    return bindings


def resolve_action_param(value: Any, ctx: ResolutionContext) -> Any:
    """
    Resolve an action param.

    ``$item`` yields the item's absolute state *path* (e.g. ``/todos/0/done``)
    rather than its value, and ``$index`` yields the position. Everything
    else resolves like a prop.
    """
    expr = parse_expression(value)
    if isinstance(expr, ItemRef):
        return resolve_bind_item_path(expr.path, ctx)
    if isinstance(expr, IndexRef):
        return ctx.repeat_index
    return resolve_prop_value(value, ctx)


def resolve_action_params(
    params: dict[str, Any] | None, ctx: ResolutionContext
) -> dict[str, Any] | None:
    if params is None:
        return None
    return {key: resolve_action_param(value, ctx) for key, value in params.items()}


def resolve_dynamic_value(value: Any, state_model: Any) -> Any:
    """Resolve a literal or a ``{"$state": path}`` reference; nothing else is interpreted."""
    if value is None:
        return None
    expr = parse_expression(value)
    if isinstance(expr, StateRef):
        return get_by_path(state_model, expr.path)
    return value
