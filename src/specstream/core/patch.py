"""
JSON Patch (RFC 6902) operations applied to Spec documents.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import PatchTestError
from .pointer import add_by_path, deep_equal, get_by_path, remove_by_path, set_by_path

logger = logging.getLogger(__name__)


class PatchOp(StrEnum):
    """JSON Patch operations."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"


class Patch(BaseModel):
    """
    A single JSON Patch operation.

    ``op`` is kept as a plain string so that a line with an unrecognised
    operation still classifies as a patch; applying it is a no-op.

    Example:
        Patch(op="add", path="/elements/main", value={"type": "Card", "props": {}})
        Patch.model_validate({"op": "move", "from": "/a", "path": "/b"})
    """

    op: str = Field(description="Operation name (add, remove, replace, move, copy, test)")
    path: str = Field(description="Target JSON Pointer")
    value: Any = Field(default=None, description="Value for add/replace/test")
    from_: str | None = Field(default=None, alias="from", description="Source pointer for move/copy")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the patch (``from`` spelled as on the wire, unset fields omitted)."""
        return self.model_dump(by_alias=True, exclude_unset=True)


def patch_paths(patch: Patch) -> list[str]:
    """Pointers a patch writes to."""
    if patch.op == PatchOp.TEST:
        return []
    if patch.op == PatchOp.MOVE and patch.from_ is not None:
        return [patch.from_, patch.path]
    return [patch.path]


def apply_patch(doc: Any, patch: Patch) -> Any:
    """
    Apply one patch to ``doc`` in place.

    Semantics:
        add      object member create-or-replace; array insert or ``-`` append
        remove   delete; missing targets are ignored
        replace  direct set, no insert semantics
        move     read ``from``, remove ``from``, add at ``path``
        copy     read ``from``, add a copy at ``path``
        test     compare the value at ``path`` with ``value``

    Returns:
        The same document, for chaining.

    Raises:
        PatchTestError: If a ``test`` operation does not match.
    """
    op = patch.op
    if op == PatchOp.ADD:
        add_by_path(doc, patch.path, patch.value)
    elif op == PatchOp.REPLACE:
        set_by_path(doc, patch.path, patch.value)
    elif op == PatchOp.REMOVE:
        remove_by_path(doc, patch.path)
    elif op == PatchOp.MOVE:
        if patch.from_ is None:
            return doc
        value = get_by_path(doc, patch.from_)
        remove_by_path(doc, patch.from_)
        add_by_path(doc, patch.path, value)
    elif op == PatchOp.COPY:
        if patch.from_ is None:
            return doc
        value = copy.deepcopy(get_by_path(doc, patch.from_))
        add_by_path(doc, patch.path, value)
    elif op == PatchOp.TEST:
        actual = get_by_path(doc, patch.path)
        if not deep_equal(actual, patch.value):
            raise PatchTestError(patch.path, expected=patch.value, actual=actual)
    else:
        logger.debug("Ignoring unknown patch op %r at %s", op, patch.path)
    return doc


def apply_patches(doc: Any, patches: Iterable[Patch]) -> Any:
    """Apply patches in order, stopping at the first failure."""
    for patch in patches:
        apply_patch(doc, patch)
    return doc
