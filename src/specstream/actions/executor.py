"""
Action execution protocol.

Runs a resolved action's handler and dispatches its continuation:
``onSuccess`` after the handler completes, ``onError`` when it raises.
Without ``onError`` the handler's exception propagates to the caller.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .models import ActionContinuation, Continuation, NavigateContinuation, ResolvedAction, SetContinuation

logger = logging.getLogger(__name__)

ERROR_MESSAGE_PLACEHOLDER = "$error.message"

Handler = Callable[[dict[str, Any]], Any]
SetState = Callable[[str, Any], Any]
Navigate = Callable[[str], Any]
ExecuteNamed = Callable[[str], Awaitable[None]]


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


async def _dispatch(
    continuation: Continuation,
    set_state: SetState,
    navigate: Navigate | None,
    execute_action: ExecuteNamed | None,
    error: BaseException | None = None,
) -> None:
    if isinstance(continuation, NavigateContinuation):
        if navigate is None:
            logger.warning("No navigate callback; ignoring navigate to %s", continuation.navigate)
            return
        await _maybe_await(navigate(continuation.navigate))
    elif isinstance(continuation, SetContinuation):
        for path, value in continuation.set.items():
            if error is not None and value == ERROR_MESSAGE_PLACEHOLDER:
                value = str(error)
            await _maybe_await(set_state(path, value))
    elif isinstance(continuation, ActionContinuation):
        if execute_action is None:
            logger.warning("No executor for chained action %s", continuation.action)
            return
        await execute_action(continuation.action)


async def execute_action(
    action: ResolvedAction,
    handler: Handler,
    set_state: SetState,
    navigate: Navigate | None = None,
    execute_action: ExecuteNamed | None = None,
) -> None:
    """
    Invoke ``handler`` with the action's params and run its continuation.

    Args:
        action: Resolved action
        handler: Sync or async callable taking the params dict
        set_state: Callback for ``set`` continuations
        navigate: Callback for ``navigate`` continuations
        execute_action: Callback that runs another action by name (chaining)

    Raises:
        Exception: Whatever the handler raised, when no ``onError`` is declared.
    """
    try:
        await _maybe_await(handler(action.params))
    except Exception as e:
        if action.on_error is None:
            raise
        logger.debug("Action %s failed, dispatching onError: %s", action.action, e)
        await _dispatch(action.on_error, set_state, navigate, execute_action, error=e)
        return

    if action.on_success is not None:
        await _dispatch(action.on_success, set_state, navigate, execute_action)
