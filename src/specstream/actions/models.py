"""
Action binding types.

An element's ``on`` field maps event names to one or many action bindings:

    "on": {
        "press": {
            "action": "deleteTodo",
            "params": {"path": {"$item": ""}},
            "confirm": {"title": "Delete?", "message": "Delete ${/selected/title}?"},
            "onSuccess": {"set": {"/status": "deleted"}},
            "onError": {"set": {"/error": "$error.message"}}
        }
    }
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Confirmation
# =============================================================================


class ActionConfirm(BaseModel):
    """
    Confirmation dialog shown before an action runs.

    ``title`` and ``message`` may contain ``${/state/path}`` placeholders.
    """

    title: str = Field(description="Dialog title")
    message: str = Field(description="Dialog message")
    confirm_label: str | None = Field(default=None, alias="confirmLabel")
    cancel_label: str | None = Field(default=None, alias="cancelLabel")
    variant: Literal["default", "danger"] | None = Field(default=None)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


# =============================================================================
# Continuations
# =============================================================================


class NavigateContinuation(BaseModel):
    """Navigate somewhere after the action."""

    navigate: str

    model_config = ConfigDict(frozen=True)


class SetContinuation(BaseModel):
    """
    Write state after the action.

    In ``onError`` the literal ``"$error.message"`` is replaced by the
    caught error's message.
    """

    set: dict[str, Any]

    model_config = ConfigDict(frozen=True)


class ActionContinuation(BaseModel):
    """Run another named action after this one."""

    action: str

    model_config = ConfigDict(frozen=True)


Continuation = NavigateContinuation | SetContinuation | ActionContinuation


# =============================================================================
# Bindings
# =============================================================================


class ActionBinding(BaseModel):
    """
    Declarative action invocation.

    Example:
        ActionBinding(action="save", params={"id": {"$state": "/form/id"}},
                      on_success=NavigateContinuation(navigate="/done"))
    """

    action: str = Field(description="Action name (built-in or registered handler)")
    params: dict[str, Any] | None = Field(default=None, description="Params; values may be expressions")
    confirm: ActionConfirm | None = Field(default=None)
    on_success: Continuation | None = Field(default=None, alias="onSuccess")
    on_error: Continuation | None = Field(default=None, alias="onError")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResolvedAction(BaseModel):
    """An action binding with params resolved and confirm text interpolated."""

    action: str
    params: dict[str, Any] = Field(default_factory=dict)
    confirm: ActionConfirm | None = None
    on_success: Continuation | None = Field(default=None, alias="onSuccess")
    on_error: Continuation | None = Field(default=None, alias="onError")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def parse_action_bindings(raw: Any) -> list[ActionBinding]:
    """Normalise a one-or-many binding value from an element's ``on`` map."""
    if raw is None:
        return []
    items = raw if isinstance(raw, list) else [raw]
    return [
        item if isinstance(item, ActionBinding) else ActionBinding.model_validate(item)
        for item in items
    ]


# =============================================================================
# Builders
# =============================================================================


def simple(action: str, params: dict[str, Any] | None = None) -> ActionBinding:
    return ActionBinding(action=action, params=params)


def with_confirm(
    action: str, confirm: ActionConfirm | dict[str, Any], params: dict[str, Any] | None = None
) -> ActionBinding:
    return ActionBinding.model_validate({"action": action, "params": params, "confirm": confirm})


def with_success(
    action: str, on_success: Continuation | dict[str, Any], params: dict[str, Any] | None = None
) -> ActionBinding:
    return ActionBinding.model_validate({"action": action, "params": params, "onSuccess": on_success})
