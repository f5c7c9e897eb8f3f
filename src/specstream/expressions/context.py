"""
Resolution context shared by prop, visibility and action-param resolution.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any

from specstream.core.pointer import get_by_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionContext:
    """
    Everything an expression can read.

    Attributes:
        state_model: The state document ($state / $bindState reads)
        repeat_item: Current item while expanding a repeat
        repeat_index: Current index while expanding a repeat
        repeat_base_path: Absolute state path of the current item (e.g. /todos/0)
    """

    state_model: Any = field(default_factory=dict)
    repeat_item: Any = None
    repeat_index: int | None = None
    repeat_base_path: str | None = None

    @property
    def has_repeat_scope(self) -> bool:
        return self.repeat_index is not None or self.repeat_base_path is not None

    def for_item(self, item: Any, index: int, base_path: str) -> ResolutionContext:
        """Context for one item of a repeated element."""
        return replace(self, repeat_item=item, repeat_index=index, repeat_base_path=base_path)

    def with_state(self, state_model: Any) -> ResolutionContext:
        return replace(self, state_model=state_model)


def read_item(item_path: str, ctx: ResolutionContext) -> Any:
    """Read from the current repeat item; None outside a repeat scope."""
    if not ctx.has_repeat_scope:
        return None
    if item_path == "":
        return ctx.repeat_item
    return get_by_path(ctx.repeat_item, item_path)


def resolve_bind_item_path(item_path: str, ctx: ResolutionContext) -> str | None:
    """
    Absolute state path for a path inside the current repeat item.

    Returns None (with a warning) outside a repeat scope.
    """
    if ctx.repeat_base_path is None:
        logger.warning('$bindItem used outside repeat scope: "%s"', item_path)
        return None
    if item_path == "":
        return ctx.repeat_base_path
    return f"{ctx.repeat_base_path}/{item_path}"


def truthy(value: Any) -> bool:
    """JavaScript-style truthiness: empty containers are truthy, NaN is not."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
