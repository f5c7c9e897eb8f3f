"""
Resolve action bindings against the current state.
"""

from __future__ import annotations

import json
import re
from typing import Any

from specstream.core.pointer import get_by_path
from specstream.expressions.context import ResolutionContext
from specstream.expressions.resolver import resolve_action_params, resolve_prop_value

from .models import ActionBinding, ResolvedAction

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")


def js_string(value: Any) -> str:
    """Stringify a JSON value the way a template literal would (None -> "")."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def interpolate_string(template: str, state_model: Any) -> str:
    """
    Replace ``${/path}`` placeholders with state values.

    Example:
        interpolate_string("Delete ${/item/name}?", {"item": {"name": "Milk"}})
        -> "Delete Milk?"
    """
    return _PLACEHOLDER_RE.sub(lambda m: js_string(get_by_path(state_model, m.group(1))), template)


def resolve_action(
    binding: ActionBinding | dict[str, Any],
    state_model: Any,
    ctx: ResolutionContext | None = None,
) -> ResolvedAction:
    """
    Resolve an action binding for execution.

    Params are deep-resolved against the state model; confirm title and
    message get their placeholders interpolated. Continuations are passed
    through untouched.

    With a repeat-scoped ``ctx``, params resolve as action params: ``$item``
    becomes the item's state path and ``$index`` its position.
    """
    if not isinstance(binding, ActionBinding):
        binding = ActionBinding.model_validate(binding)

    if ctx is None:
        ctx = ResolutionContext(state_model=state_model)
        params = {key: resolve_prop_value(value, ctx) for key, value in (binding.params or {}).items()}
    else:
        ctx = ctx.with_state(state_model)
        params = resolve_action_params(binding.params, ctx) or {}

    confirm = binding.confirm
    if confirm is not None:
        confirm = confirm.model_copy(
            update={
                "title": interpolate_string(confirm.title, state_model),
                "message": interpolate_string(confirm.message, state_model),
            }
        )

    return ResolvedAction(
        action=binding.action,
        params=params,
        confirm=confirm,
        on_success=binding.on_success,
        on_error=binding.on_error,
    )
