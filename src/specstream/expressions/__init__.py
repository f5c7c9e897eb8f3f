"""
Expression language for Spec props, visibility conditions and action params.

Usage:
    from specstream.expressions import ResolutionContext, resolve_prop_value

    ctx = ResolutionContext(state_model={"user": {"name": "Ada"}})
    resolve_prop_value({"$state": "/user/name"}, ctx)
    # "Ada"
"""

from specstream.expressions.context import ResolutionContext, resolve_bind_item_path, truthy
from specstream.expressions.nodes import (
    BindItemRef,
    BindStateRef,
    CondExpr,
    Expr,
    IndexRef,
    ItemRef,
    StateRef,
    parse_expression,
)
from specstream.expressions.resolver import (
    resolve_action_param,
    resolve_action_params,
    resolve_bindings,
    resolve_dynamic_value,
    resolve_element_props,
    resolve_prop_value,
)
from specstream.expressions.visibility import evaluate_condition, evaluate_visibility

__all__ = [
    "BindItemRef",
    "BindStateRef",
    "CondExpr",
    "Expr",
    "IndexRef",
    "ItemRef",
    "ResolutionContext",
    "StateRef",
    "evaluate_condition",
    "evaluate_visibility",
    "parse_expression",
    "resolve_action_param",
    "resolve_action_params",
    "resolve_bind_item_path",
    "resolve_bindings",
    "resolve_dynamic_value",
    "resolve_element_props",
    "resolve_prop_value",
    "truthy",
]
