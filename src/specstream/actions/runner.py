"""
Action runner.

Binds action execution to a state store: built-in state and navigation
actions, a registry of named handlers, in-flight tracking and a single
pending confirmation at a time.

Usage:
    store = StateStore({"todos": []})
    runner = ActionRunner(store, handlers={"save": save_handler})
    await runner.execute({"action": "pushState",
                          "params": {"statePath": "/todos", "value": {"id": "$id"}}})
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from specstream.core.errors import ActionCancelledError
from specstream.expressions.nodes import StateRef, parse_expression

from .executor import Handler, Navigate, execute_action
from .models import ActionBinding, ResolvedAction
from .resolve import resolve_action
from .state_store import StateStore

logger = logging.getLogger(__name__)

ID_SENTINEL = "$id"
CURRENT_SCREEN_PATH = "/currentScreen"
NAV_STACK_PATH = "/navStack"

_id_counter = 0


def generate_unique_id() -> str:
    """Unique id of the form ``<epoch-ms>-<counter>``."""
    global _id_counter
    _id_counter += 1
    return f"{int(time.time() * 1000)}-{_id_counter}"


def deep_resolve_value(value: Any, get: Callable[[str], Any]) -> Any:
    """
    Resolve a pushState value.

    ``"$id"`` and ``{"$id": ...}`` become fresh unique ids and ``{"$state": path}``
    reads through ``get``; containers are walked.
    """
    if value is None:
        return None
    if value == ID_SENTINEL:
        return generate_unique_id()
    if isinstance(value, dict):
        if len(value) == 1 and ID_SENTINEL in value:
            return generate_unique_id()
        if isinstance(parse_expression(value), StateRef):
            return get(value["$state"])
        return {key: deep_resolve_value(member, get) for key, member in value.items()}
    if isinstance(value, list):
        return [deep_resolve_value(member, get) for member in value]
    return value


# =============================================================================
# Confirmation
# =============================================================================


@dataclass
class PendingConfirmation:
    """An action waiting for the user to confirm or cancel."""

    action: ResolvedAction
    future: asyncio.Future[None] = field(repr=False)

    def resolve(self) -> None:
        if not self.future.done():
            self.future.set_result(None)

    def reject(self) -> None:
        if not self.future.done():
            self.future.set_exception(ActionCancelledError(self.action.action))


# =============================================================================
# Runner
# =============================================================================


class ActionRunner:
    """Executes action bindings against a state store."""

    def __init__(
        self,
        store: StateStore | None = None,
        handlers: dict[str, Handler] | None = None,
        navigate: Navigate | None = None,
    ):
        self.store = store if store is not None else StateStore()
        self.handlers: dict[str, Handler] = dict(handlers or {})
        self.navigate = navigate
        self.loading_actions: set[str] = set()
        self.pending_confirmation: PendingConfirmation | None = None

    def register_handler(self, name: str, handler: Handler) -> None:
        self.handlers[name] = handler

    def confirm(self) -> None:
        """Confirm the pending action, if any."""
        if self.pending_confirmation is not None:
            pending, self.pending_confirmation = self.pending_confirmation, None
            pending.resolve()

    def cancel(self) -> None:
        """Cancel the pending action; its ``execute`` raises ActionCancelledError."""
        if self.pending_confirmation is not None:
            pending, self.pending_confirmation = self.pending_confirmation, None
            pending.reject()

    async def execute(self, binding: ActionBinding | ResolvedAction | dict[str, Any]) -> None:
        """
        Resolve and run one action binding.

        Built-in actions are handled first. Other actions need a registered
        handler; unknown actions log a warning and do nothing.

        A ResolvedAction is run as given, without resolving its params again.
        Starting a confirmable action cancels any confirmation still pending.

        Raises:
            ActionCancelledError: The pending confirmation was cancelled.
        """
        if isinstance(binding, ResolvedAction):
            resolved = binding
        else:
            resolved = resolve_action(binding, self.store.state)

        if self._run_builtin(resolved):
            return

        handler = self.handlers.get(resolved.action)
        if handler is None:
            logger.warning("No handler registered for action: %s", resolved.action)
            return

        if resolved.confirm is not None:
            self.cancel()
            future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self.pending_confirmation = PendingConfirmation(action=resolved, future=future)
            await future

        self.loading_actions.add(resolved.action)
        try:
            await execute_action(
                resolved,
                handler,
                set_state=self.store.set,
                navigate=self.navigate,
                execute_action=self._execute_named,
            )
        finally:
            self.loading_actions.discard(resolved.action)

    async def _execute_named(self, name: str) -> None:
        await self.execute(ActionBinding(action=name))

    # -------------------------------------------------------------------------
    # Built-ins
    # -------------------------------------------------------------------------

    def _run_builtin(self, resolved: ResolvedAction) -> bool:
        params = resolved.params
        name = resolved.action

        if name == "setState" and params:
            if params.get("statePath"):
                self.store.set(params["statePath"], params.get("value"))
            return True

        if name == "pushState" and params:
            path = params.get("statePath")
            if path:
                value = deep_resolve_value(params.get("value"), self.store.get)
                current = self.store.get(path) or []
                self.store.set(path, [*current, value])
                if params.get("clearStatePath"):
                    self.store.set(params["clearStatePath"], "")
            return True

        if name == "removeState" and params:
            path = params.get("statePath")
            index = params.get("index")
            if path is not None and index is not None:
                current = self.store.get(path) or []
                self.store.set(path, [member for i, member in enumerate(current) if i != index])
            return True

        if name == "push" and params:
            screen = params.get("screen")
            if screen:
                current_screen = self.store.get(CURRENT_SCREEN_PATH)
                nav_stack = self.store.get(NAV_STACK_PATH) or []
                self.store.set(NAV_STACK_PATH, [*nav_stack, current_screen or ""])
                self.store.set(CURRENT_SCREEN_PATH, screen)
            return True

        if name == "pop":
            nav_stack = self.store.get(NAV_STACK_PATH) or []
            if nav_stack:
                previous = nav_stack[-1]
                self.store.set(NAV_STACK_PATH, nav_stack[:-1])
                self.store.set(CURRENT_SCREEN_PATH, previous or None)
            return True

        return False
