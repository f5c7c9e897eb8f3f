"""
Visibility conditions.

A condition is one of:

    true / false
    {"$state": "/path", <op>?: value, "not"?: true}     (also $item / $index)
    [cond, cond, ...]                                   implicit AND of single conditions
    {"$and": [...]} / {"$or": [...]}                    recursive

Comparison operators are checked in the order eq, neq, gt, gte, lt, lte and
only the first one present is used. With no operator the subject's
truthiness decides. ``not: true`` inverts the final result. Right-hand
sides go through the same resolver as props, so ``{"gt": {"$state": "/min"}}``
compares against state.
"""

from __future__ import annotations

from typing import Any

from specstream.core.pointer import deep_equal, get_by_path

from .context import ResolutionContext, is_number, read_item, truthy
from .resolver import resolve_prop_value

COMPARISON_OPS = ("eq", "neq", "gt", "gte", "lt", "lte")


def _subject(cond: dict[str, Any], ctx: ResolutionContext) -> Any:
    if "$index" in cond:
        return ctx.repeat_index
    if "$item" in cond:
        return read_item(cond["$item"], ctx)
    return get_by_path(ctx.state_model, cond.get("$state", ""))


def _numeric(op: str, left: Any, right: Any) -> bool:
    if not (is_number(left) and is_number(right)):
        return False
    if op == "gt":
        return bool(left > right)
    if op == "gte":
        return bool(left >= right)
    if op == "lt":
        return bool(left < right)
    return bool(left <= right)


def evaluate_condition(cond: dict[str, Any], ctx: ResolutionContext) -> bool:
    """Evaluate a single condition."""
    value = _subject(cond, ctx)

    op = next((name for name in COMPARISON_OPS if name in cond), None)
    if op is None:
        result = truthy(value)
    else:
        rhs = resolve_prop_value(cond[op], ctx)
        if op == "eq":
            result = deep_equal(value, rhs)
        elif op == "neq":
            result = not deep_equal(value, rhs)
        else:
            result = _numeric(op, value, rhs)

    return not result if cond.get("not") is True else result


def evaluate_visibility(condition: Any, ctx: ResolutionContext) -> bool:
    """
    Evaluate a visibility condition.

    A missing condition (None) means visible.
    """
    if condition is None:
        return True
    if isinstance(condition, bool):
        return condition
    if isinstance(condition, list):
        return all(evaluate_condition(c, ctx) for c in condition)
    if isinstance(condition, dict):
        if "$and" in condition:
            return all(evaluate_visibility(c, ctx) for c in condition["$and"])
        if "$or" in condition:
            return any(evaluate_visibility(c, ctx) for c in condition["$or"])
        return evaluate_condition(condition, ctx)
    return truthy(condition)


# =============================================================================
# Builders
# =============================================================================

always = True
never = False


def when(path: str) -> dict[str, Any]:
    """Visible when the state path is truthy."""
    return {"$state": path}


def unless(path: str) -> dict[str, Any]:
    """Visible when the state path is falsy."""
    return {"$state": path, "not": True}


def eq(path: str, value: Any) -> dict[str, Any]:
    return {"$state": path, "eq": value}


def neq(path: str, value: Any) -> dict[str, Any]:
    return {"$state": path, "neq": value}


def gt(path: str, value: Any) -> dict[str, Any]:
    return {"$state": path, "gt": value}


def gte(path: str, value: Any) -> dict[str, Any]:
    return {"$state": path, "gte": value}


def lt(path: str, value: Any) -> dict[str, Any]:
    return {"$state": path, "lt": value}


def lte(path: str, value: Any) -> dict[str, Any]:
    return {"$state": path, "lte": value}


def all_of(*conditions: Any) -> dict[str, Any]:
    return {"$and": list(conditions)}


def any_of(*conditions: Any) -> dict[str, Any]:
    return {"$or": list(conditions)}
