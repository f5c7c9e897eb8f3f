"""Tests for action resolution, execution and the action runner.

Covers:
- Param resolution and confirm interpolation
- onSuccess / onError continuations
- Built-in state and navigation actions
- Confirmation flow
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

import pytest

from specstream.actions import (
    ActionBinding,
    ActionRunner,
    NavigateContinuation,
    SetContinuation,
    StateStore,
    execute_action,
    generate_unique_id,
    interpolate_string,
    parse_action_bindings,
    resolve_action,
)
from specstream.actions.models import simple, with_confirm, with_success
from specstream.core.errors import ActionCancelledError

# ============================================================================
# Resolution
# ============================================================================


class TestResolveAction:
    def test_params_resolved(self) -> None:
        binding = {"action": "save", "params": {"id": {"$state": "/form/id"}, "tags": [{"$state": "/tag"}]}}
        resolved = resolve_action(binding, {"form": {"id": 42}, "tag": "x"})
        assert resolved.action == "save"
        assert resolved.params == {"id": 42, "tags": ["x"]}

    def test_confirm_interpolated(self) -> None:
        binding = with_confirm("delete", {"title": "Delete ${/item/name}?", "message": "Really remove ${/item/name} (${/count})?"})
        resolved = resolve_action(binding, {"item": {"name": "Milk"}, "count": 3})
        assert resolved.confirm is not None
        assert resolved.confirm.title == "Delete Milk?"
        assert resolved.confirm.message == "Really remove Milk (3)?"

    def test_continuations_passed_through(self) -> None:
        binding = ActionBinding.model_validate(
            {"action": "save", "onSuccess": {"navigate": "/done"}, "onError": {"set": {"/error": "$error.message"}}}
        )
        resolved = resolve_action(binding, {})
        assert resolved.on_success == NavigateContinuation(navigate="/done")
        assert isinstance(resolved.on_error, SetContinuation)

    def test_parse_action_bindings(self) -> None:
        assert parse_action_bindings(None) == []
        assert [b.action for b in parse_action_bindings({"action": "a"})] == ["a"]
        assert [b.action for b in parse_action_bindings([{"action": "a"}, simple("b")])] == ["a", "b"]

    def test_to_dict_uses_wire_names(self) -> None:
        binding = with_success("save", {"navigate": "/home"})
        assert binding.to_dict() == {"action": "save", "onSuccess": {"navigate": "/home"}}


class TestInterpolateString:
    def test_js_stringification(self) -> None:
        model = {"flag": True, "missing_parent": None, "n": 2.0, "items": [1, 2]}
        assert interpolate_string("${/flag}", model) == "true"
        assert interpolate_string("[${/nope}]", model) == "[]"
        assert interpolate_string("${/n}", model) == "2"
        assert interpolate_string("${/items}", model) == "[1,2]"

    def test_no_placeholders(self) -> None:
        assert interpolate_string("plain", {}) == "plain"


# ============================================================================
# Execution protocol
# ============================================================================


class _Recorder:
    def __init__(self) -> None:
        self.state: dict[str, Any] = {}
        self.navigated: list[str] = []
        self.chained: list[str] = []

    def set_state(self, path: str, value: Any) -> None:
        self.state[path] = value

    def navigate(self, to: str) -> None:
        self.navigated.append(to)

    async def execute(self, name: str) -> None:
        self.chained.append(name)


class TestExecuteAction:
    @pytest.mark.asyncio
    async def test_handler_receives_params(self) -> None:
        received: list[dict] = []
        rec = _Recorder()
        resolved = resolve_action({"action": "save", "params": {"a": 1}}, {})
        await execute_action(resolved, received.append, rec.set_state)
        assert received == [{"a": 1}]

    @pytest.mark.asyncio
    async def test_async_handler_and_on_success_set(self) -> None:
        rec = _Recorder()

        async def handler(params: dict) -> None:
            await asyncio.sleep(0)

        resolved = resolve_action({"action": "save", "onSuccess": {"set": {"/saved": True}}}, {})
        await execute_action(resolved, handler, rec.set_state)
        assert rec.state == {"/saved": True}

    @pytest.mark.asyncio
    async def test_on_success_navigate_and_chain(self) -> None:
        rec = _Recorder()
        nav = resolve_action({"action": "a", "onSuccess": {"navigate": "/next"}}, {})
        await execute_action(nav, lambda p: None, rec.set_state, rec.navigate, rec.execute)
        chain = resolve_action({"action": "a", "onSuccess": {"action": "refresh"}}, {})
        await execute_action(chain, lambda p: None, rec.set_state, rec.navigate, rec.execute)
        assert rec.navigated == ["/next"]
        assert rec.chained == ["refresh"]

    @pytest.mark.asyncio
    async def test_on_error_substitutes_message(self) -> None:
        rec = _Recorder()

        def handler(params: dict) -> None:
            raise RuntimeError("disk full")

        resolved = resolve_action(
            {"action": "save", "onSuccess": {"set": {"/saved": True}}, "onError": {"set": {"/error": "$error.message", "/busy": False}}},
            {},
        )
        await execute_action(resolved, handler, rec.set_state)
        assert rec.state == {"/error": "disk full", "/busy": False}

    @pytest.mark.asyncio
    async def test_error_propagates_without_on_error(self) -> None:
        rec = _Recorder()

        def handler(params: dict) -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await execute_action(resolve_action({"action": "x"}, {}), handler, rec.set_state)


# ============================================================================
# State store
# ============================================================================


class TestStateStore:
    def test_copy_on_write(self) -> None:
        store = StateStore({"form": {"name": "a"}})
        before = store.state
        store.set("/form/name", "b")
        assert before == {"form": {"name": "a"}}
        assert store.get("/form/name") == "b"
        assert store.state is not before

    def test_update_and_callback(self) -> None:
        changes: list[tuple[str, Any]] = []
        store = StateStore(on_state_change=lambda p, v: changes.append((p, v)))
        store.update({"/a": 1, "/b/c": 2})
        assert store.state == {"a": 1, "b": {"c": 2}}
        assert changes == [("/a", 1), ("/b/c", 2)]


# ============================================================================
# Runner
# ============================================================================


class TestBuiltinActions:
    @pytest.mark.asyncio
    async def test_set_state(self) -> None:
        runner = ActionRunner(StateStore({"count": 1}))
        await runner.execute({"action": "setState", "params": {"statePath": "/count", "value": 2}})
        assert runner.store.state == {"count": 2}

    @pytest.mark.asyncio
    async def test_push_state_with_id_and_clear(self) -> None:
        runner = ActionRunner(StateStore({"todos": [], "draft": "Milk"}))
        await runner.execute(
            {
                "action": "pushState",
                "params": {
                    "statePath": "/todos",
                    "value": {"id": "$id", "title": {"$state": "/draft"}, "done": False},
                    "clearStatePath": "/draft",
                },
            }
        )
        todos = runner.store.get("/todos")
        assert len(todos) == 1
        assert todos[0]["title"] == "Milk"
        assert re.fullmatch(r"\d+-\d+", todos[0]["id"])
        assert runner.store.get("/draft") == ""

    @pytest.mark.asyncio
    async def test_push_state_creates_array(self) -> None:
        runner = ActionRunner()
        await runner.execute({"action": "pushState", "params": {"statePath": "/items", "value": 1}})
        assert runner.store.state == {"items": [1]}

    @pytest.mark.asyncio
    async def test_remove_state_filters_index(self) -> None:
        runner = ActionRunner(StateStore({"todos": ["a", "b", "c"]}))
        await runner.execute({"action": "removeState", "params": {"statePath": "/todos", "index": 1}})
        assert runner.store.get("/todos") == ["a", "c"]

    @pytest.mark.asyncio
    async def test_navigation_stack(self) -> None:
        runner = ActionRunner(StateStore({"currentScreen": "home"}))
        await runner.execute({"action": "push", "params": {"screen": "detail"}})
        await runner.execute({"action": "push", "params": {"screen": "edit"}})
        assert runner.store.get("/currentScreen") == "edit"
        assert runner.store.get("/navStack") == ["home", "detail"]

        await runner.execute({"action": "pop"})
        await runner.execute({"action": "pop"})
        assert runner.store.get("/currentScreen") == "home"
        assert runner.store.get("/navStack") == []

    @pytest.mark.asyncio
    async def test_pop_to_empty_screen(self) -> None:
        runner = ActionRunner()
        await runner.execute({"action": "push", "params": {"screen": "a"}})
        await runner.execute({"action": "pop"})
        assert runner.store.get("/currentScreen") is None


class TestActionRunner:
    @pytest.mark.asyncio
    async def test_unknown_action_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        runner = ActionRunner()
        with caplog.at_level(logging.WARNING):
            await runner.execute({"action": "launchRockets"})
        assert "launchRockets" in caplog.text

    @pytest.mark.asyncio
    async def test_registered_handler_and_loading(self) -> None:
        seen_loading: list[set[str]] = []
        runner = ActionRunner()

        async def save(params: dict) -> None:
            seen_loading.append(set(runner.loading_actions))

        runner.register_handler("save", save)
        await runner.execute({"action": "save", "onSuccess": {"set": {"/saved": True}}})
        assert seen_loading == [{"save"}]
        assert runner.loading_actions == set()
        assert runner.store.state == {"saved": True}

    @pytest.mark.asyncio
    async def test_chained_action(self) -> None:
        calls: list[str] = []
        runner = ActionRunner(
            handlers={"first": lambda p: calls.append("first"), "second": lambda p: calls.append("second")}
        )
        await runner.execute({"action": "first", "onSuccess": {"action": "second"}})
        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_navigate_continuation(self) -> None:
        navigated: list[str] = []
        runner = ActionRunner(handlers={"go": lambda p: None}, navigate=navigated.append)
        await runner.execute({"action": "go", "onSuccess": {"navigate": "/next"}})
        assert navigated == ["/next"]


class TestConfirmation:
    @pytest.mark.asyncio
    async def test_confirm_runs_handler(self) -> None:
        calls: list[dict] = []
        runner = ActionRunner(StateStore({"name": "Milk"}), handlers={"delete": calls.append})
        binding = with_confirm("delete", {"title": "Delete ${/name}?", "message": "Sure?"}, {"id": 1})

        task = asyncio.create_task(runner.execute(binding))
        await asyncio.sleep(0)
        assert runner.pending_confirmation is not None
        assert runner.pending_confirmation.action.confirm.title == "Delete Milk?"
        assert calls == []

        runner.confirm()
        await task
        assert calls == [{"id": 1}]
        assert runner.pending_confirmation is None

    @pytest.mark.asyncio
    async def test_cancel_skips_handler(self) -> None:
        calls: list[dict] = []
        runner = ActionRunner(handlers={"delete": calls.append})
        binding = with_confirm("delete", {"title": "Delete?", "message": "Sure?"})

        task = asyncio.create_task(runner.execute(binding))
        await asyncio.sleep(0)
        runner.cancel()
        with pytest.raises(ActionCancelledError, match="Action cancelled"):
            await task
        assert calls == []

    @pytest.mark.asyncio
    async def test_new_confirmation_cancels_pending_one(self) -> None:
        calls: list[dict] = []
        runner = ActionRunner(handlers={"delete": calls.append})

        first = asyncio.create_task(runner.execute(with_confirm("delete", {"title": "A?", "message": "Sure?"}, {"id": 1})))
        await asyncio.sleep(0)
        second = asyncio.create_task(runner.execute(with_confirm("delete", {"title": "B?", "message": "Sure?"}, {"id": 2})))
        await asyncio.sleep(0)

        with pytest.raises(ActionCancelledError):
            await first
        assert runner.pending_confirmation is not None
        assert runner.pending_confirmation.action.confirm.title == "B?"

        runner.confirm()
        await second
        assert calls == [{"id": 2}]

    def test_confirm_without_pending_is_noop(self) -> None:
        runner = ActionRunner()
        runner.confirm()
        runner.cancel()
        assert runner.pending_confirmation is None


class TestGenerateUniqueId:
    def test_unique_and_shaped(self) -> None:
        first, second = generate_unique_id(), generate_unique_id()
        assert first != second
        assert re.fullmatch(r"\d+-\d+", first)
