"""
Expression node types.

Element props, visibility conditions and action params may contain
declarative references instead of literal values. On the wire they are
single-purpose JSON objects:

    {"$state": "/user/name"}           read from the state model
    {"$item": "title"}                 read from the current repeat item ("" = whole item)
    {"$index": true}                   current repeat index
    {"$bindState": "/form/email"}      like $state, plus a write-back path
    {"$bindItem": "done"}              like $item, plus a write-back path
    {"$cond": ..., "$then": ..., "$else": ...}

parse_expression() maps a raw value onto exactly one node of this closed
set (or None for plain data); the smart constructors build the wire form.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class StateRef(BaseModel):
    """Read a value from the state model."""

    path: str

    model_config = ConfigDict(frozen=True)


class ItemRef(BaseModel):
    """Read a value from the current repeat item (empty path = the item itself)."""

    path: str

    model_config = ConfigDict(frozen=True)


class IndexRef(BaseModel):
    """The current repeat index."""

    model_config = ConfigDict(frozen=True)


class BindStateRef(BaseModel):
    """Two-way binding to a state path."""

    path: str

    model_config = ConfigDict(frozen=True)


class BindItemRef(BaseModel):
    """Two-way binding to a path inside the current repeat item."""

    path: str

    model_config = ConfigDict(frozen=True)


class CondExpr(BaseModel):
    """Pick one of two expressions based on a visibility condition."""

    cond: Any
    then: Any
    else_: Any

    model_config = ConfigDict(frozen=True)


Expr = StateRef | ItemRef | IndexRef | BindStateRef | BindItemRef | CondExpr


def parse_expression(value: Any) -> Expr | None:
    """
    Classify a raw value as an expression node.

    Returns None for literals and for containers that are plain data (those
    may still hold expressions in their members).
    """
    if not isinstance(value, dict):
        return None
    if isinstance(value.get("$state"), str):
        return StateRef(path=value["$state"])
    if isinstance(value.get("$item"), str):
        return ItemRef(path=value["$item"])
    if value.get("$index") is True:
        return IndexRef()
    if isinstance(value.get("$bindState"), str):
        return BindStateRef(path=value["$bindState"])
    if isinstance(value.get("$bindItem"), str):
        return BindItemRef(path=value["$bindItem"])
    if "$cond" in value and "$then" in value and "$else" in value:
        return CondExpr(cond=value["$cond"], then=value["$then"], else_=value["$else"])
    return None


# =============================================================================
# Smart constructors (wire form)
# =============================================================================


def state(path: str) -> dict[str, Any]:
    return {"$state": path}


def item(path: str = "") -> dict[str, Any]:
    return {"$item": path}


def index() -> dict[str, Any]:
    return {"$index": True}


def bind_state(path: str) -> dict[str, Any]:
    return {"$bindState": path}


def bind_item(path: str = "") -> dict[str, Any]:
    return {"$bindItem": path}


def cond(condition: Any, then: Any, otherwise: Any) -> dict[str, Any]:
    return {"$cond": condition, "$then": then, "$else": otherwise}
