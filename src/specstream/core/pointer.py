"""
JSON Pointer (RFC 6901) addressing over plain JSON documents.

Documents are the structures produced by ``json.loads``: dicts, lists and
scalars. All mutating helpers work in place. Intermediate containers are
created on demand, choosing a list when the *next* token looks like an
array index (or ``-``) and a dict otherwise, so ``/a/0/b`` builds
``{"a": [{"b": ...}]}``.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import PointerError

_INDEX_RE = re.compile(r"^\d+$")

APPEND_TOKEN = "-"


# =============================================================================
# Pointer parsing
# =============================================================================


def unescape_token(token: str) -> str:
    """Unescape a single reference token (``~1`` -> ``/``, then ``~0`` -> ``~``)."""
    return token.replace("~1", "/").replace("~0", "~")


def escape_token(token: str) -> str:
    """Escape a single reference token for use in a pointer."""
    return token.replace("~", "~0").replace("/", "~1")


def parse_pointer(pointer: str) -> list[str]:
    """
    Split a pointer into unescaped reference tokens.

    Both ``""`` and ``"/"`` denote the document root and yield ``[]``.
    A pointer without a leading slash is treated as relative and split as-is.

    Examples:
        parse_pointer("/elements/main") -> ["elements", "main"]
        parse_pointer("/a~1b/c~0d") -> ["a/b", "c~d"]
    """
    if not pointer or pointer == "/":
        return []
    raw = pointer[1:] if pointer.startswith("/") else pointer
    return [unescape_token(token) for token in raw.split("/")]


def join_pointer(*tokens: str | int) -> str:
    """Build a pointer from raw tokens, escaping each one."""
    return "".join("/" + escape_token(str(token)) for token in tokens)


def is_index_token(token: str) -> bool:
    """Check if a token addresses an array position (digits or ``-``)."""
    return token == APPEND_TOKEN or bool(_INDEX_RE.match(token))


def _parse_index(token: str) -> int | None:
    if _INDEX_RE.match(token):
        return int(token)
    return None


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _new_container(next_token: str) -> dict[str, Any] | list[Any]:
    return [] if is_index_token(next_token) else {}


# =============================================================================
# Read
# =============================================================================


def get_by_path(doc: Any, pointer: str) -> Any:
    """
    Read the value at ``pointer``.

    Returns None for anything that cannot be reached: a missing key, an
    out-of-range or non-numeric array index, or a scalar in the middle of
    the path. Never raises.
    """
    current = doc
    for token in parse_pointer(pointer):
        if current is None:
            return None
        if isinstance(current, list):
            index = _parse_index(token)
            if index is None or index >= len(current):
                return None
            current = current[index]
        elif isinstance(current, dict):
            current = current.get(token)
        else:
            return None
    return current


def has_path(doc: Any, pointer: str) -> bool:
    """Check whether ``pointer`` addresses an existing location."""
    current = doc
    for token in parse_pointer(pointer):
        if isinstance(current, list):
            index = _parse_index(token)
            if index is None or index >= len(current):
                return False
            current = current[index]
        elif isinstance(current, dict):
            if token not in current:
                return False
            current = current[token]
        else:
            return False
    return True


# =============================================================================
# Write
# =============================================================================


def _replace_root(doc: Any, value: Any) -> None:
    if value is doc:
        return
    if isinstance(doc, dict) and isinstance(value, dict):
        snapshot = dict(value)
        doc.clear()
        doc.update(snapshot)
        return
    if isinstance(doc, list) and isinstance(value, list):
        doc[:] = list(value)
        return
    raise PointerError(
        f"Cannot replace document root of type {type(doc).__name__} "
        f"with {type(value).__name__}"
    )


def _walk_creating(doc: Any, tokens: list[str], pointer: str) -> Any:
    """Descend to the parent of the last token, creating containers as needed."""
    current = doc
    for i, token in enumerate(tokens[:-1]):
        next_token = tokens[i + 1]
        if isinstance(current, list):
            if token == APPEND_TOKEN:
                child = _new_container(next_token)
                current.append(child)
                current = child
                continue
            index = _parse_index(token)
            if index is None:
                raise PointerError(f'Invalid array index "{token}" in pointer "{pointer}"')
            if index >= len(current):
                current.extend([None] * (index + 1 - len(current)))
            child = current[index]
            if not _is_container(child):
                child = _new_container(next_token)
                current[index] = child
            current = child
        elif isinstance(current, dict):
            child = current.get(token)
            if not _is_container(child):
                child = _new_container(next_token)
                current[token] = child
            current = child
        else:
            raise PointerError(
                f'Cannot traverse into {type(current).__name__} at "{token}" in pointer "{pointer}"'
            )
    return current


def set_by_path(doc: Any, pointer: str, value: Any) -> None:
    """
    Set the value at ``pointer``, replacing whatever is there.

    Arrays are overwritten at the index (padded with None when the index is
    past the end); ``-`` appends.
    """
    tokens = parse_pointer(pointer)
    if not tokens:
        _replace_root(doc, value)
        return
    parent = _walk_creating(doc, tokens, pointer)
    last = tokens[-1]
    if isinstance(parent, list):
        if last == APPEND_TOKEN:
            parent.append(value)
            return
        index = _parse_index(last)
        if index is None:
            raise PointerError(f'Invalid array index "{last}" in pointer "{pointer}"')
        if index >= len(parent):
            parent.extend([None] * (index + 1 - len(parent)))
        parent[index] = value
    elif isinstance(parent, dict):
        parent[last] = value
    else:
        raise PointerError(f'Cannot set "{last}" on {type(parent).__name__}')


def add_by_path(doc: Any, pointer: str, value: Any) -> None:
    """
    Add a value at ``pointer`` with JSON Patch ``add`` semantics.

    Objects get the member created or replaced; arrays get the value
    inserted before the index (later elements shift right); ``-`` appends.
    """
    tokens = parse_pointer(pointer)
    if not tokens:
        _replace_root(doc, value)
        return
    parent = _walk_creating(doc, tokens, pointer)
    last = tokens[-1]
    if isinstance(parent, list):
        if last == APPEND_TOKEN:
            parent.append(value)
            return
        index = _parse_index(last)
        if index is None:
            raise PointerError(f'Invalid array index "{last}" in pointer "{pointer}"')
        parent.insert(index, value)
    elif isinstance(parent, dict):
        parent[last] = value
    else:
        raise PointerError(f'Cannot add "{last}" to {type(parent).__name__}')


def remove_by_path(doc: Any, pointer: str) -> None:
    """
    Remove the value at ``pointer``.

    Removing something that does not exist is a silent no-op. Removing the
    root clears the document container.
    """
    tokens = parse_pointer(pointer)
    if not tokens:
        if _is_container(doc):
            doc.clear()
        return
    current = doc
    for token in tokens[:-1]:
        if isinstance(current, list):
            index = _parse_index(token)
            if index is None or index >= len(current):
                return
            current = current[index]
        elif isinstance(current, dict):
            current = current.get(token)
        else:
            return
        if not _is_container(current):
            return
    last = tokens[-1]
    if isinstance(current, list):
        index = _parse_index(last)
        if index is not None and index < len(current):
            del current[index]
    elif isinstance(current, dict):
        current.pop(last, None)


# =============================================================================
# Comparison and copy-on-write
# =============================================================================


def deep_equal(a: Any, b: Any) -> bool:
    """
    Structural JSON equality.

    Unlike ``==``, booleans never equal numbers (``True`` vs ``1``).
    """
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, dict):
        if not isinstance(b, dict) or a.keys() != b.keys():
            return False
        return all(deep_equal(a[key], b[key]) for key in a)
    if isinstance(a, list):
        if not isinstance(b, list) or len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b, strict=True))
    if _is_container(b):
        return False
    return bool(a == b)


def _shallow_copy(container: Any, copied: set[int]) -> Any:
    if id(container) in copied:
        return container
    clone = dict(container) if isinstance(container, dict) else list(container)
    copied.add(id(clone))
    return clone


def copy_spine(doc: Any, pointer: str, copied: set[int]) -> Any:
    """
    Shallow-copy every existing container from the root to the parent of
    the pointer's last token.

    After this, mutating the location at ``pointer`` in the returned root
    cannot affect any structure shared with the original ``doc``.
    Containers already copied during the current batch (their ids are in
    ``copied``) are reused.

    Returns:
        The root to mutate (a copy unless ``doc`` was already copied).
    """
    if not _is_container(doc):
        return doc
    root = _shallow_copy(doc, copied)
    current = root
    for token in parse_pointer(pointer)[:-1]:
        if isinstance(current, dict):
            child = current.get(token)
            if not _is_container(child):
                break
            child = _shallow_copy(child, copied)
            current[token] = child
        else:
            index = _parse_index(token)
            if index is None or index >= len(current):
                break
            child = current[index]
            if not _is_container(child):
                break
            child = _shallow_copy(child, copied)
            current[index] = child
        current = child
    return root
