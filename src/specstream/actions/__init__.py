"""Action bindings: resolution, execution and the stateful runner."""

from .executor import execute_action
from .models import (
    ActionBinding,
    ActionConfirm,
    ActionContinuation,
    Continuation,
    NavigateContinuation,
    ResolvedAction,
    SetContinuation,
    parse_action_bindings,
)
from .resolve import interpolate_string, resolve_action
from .runner import ActionRunner, PendingConfirmation, generate_unique_id
from .state_store import StateStore

__all__ = [
    "ActionBinding",
    "ActionConfirm",
    "ActionContinuation",
    "ActionRunner",
    "Continuation",
    "NavigateContinuation",
    "PendingConfirmation",
    "ResolvedAction",
    "SetContinuation",
    "StateStore",
    "execute_action",
    "generate_unique_id",
    "interpolate_string",
    "parse_action_bindings",
    "resolve_action",
]
