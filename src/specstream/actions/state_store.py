"""
State model store used while executing actions.

Writes are copy-on-write: every set/update produces a new top-level state
dict and never mutates containers reachable from an earlier snapshot.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from specstream.core.pointer import copy_spine, get_by_path, set_by_path

StateChangeCallback = Callable[[str, Any], None]


class StateStore:
    """Pointer-addressed state with snapshot semantics."""

    def __init__(
        self,
        initial: dict[str, Any] | None = None,
        on_state_change: StateChangeCallback | None = None,
    ):
        self._state: dict[str, Any] = dict(initial or {})
        self.on_state_change = on_state_change

    @property
    def state(self) -> dict[str, Any]:
        """Current snapshot."""
        return self._state

    def get(self, path: str) -> Any:
        return get_by_path(self._state, path)

    def set(self, path: str, value: Any) -> None:
        self._write({path: value})

    def update(self, updates: dict[str, Any]) -> None:
        """Apply several writes as one snapshot."""
        self._write(updates)

    def _write(self, updates: dict[str, Any]) -> None:
        copied: set[int] = set()
        root: Any = self._state
        for path, value in updates.items():
            root = copy_spine(root, path, copied)
            set_by_path(root, path, value)
        self._state = root
        if self.on_state_change is not None:
            for path, value in updates.items():
                self.on_state_change(path, value)
