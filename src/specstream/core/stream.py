"""
Line classification for JSONL patch streams.

A generated stream mixes patch lines with whatever else the generator felt
like writing. Classification is speculative and never raises: a line is a
patch only if it looks like a JSON object, parses, and has the shape of a
patch operation.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from pydantic import ValidationError

from .config import DEFAULT_CONFIG, OnTestFailure, StreamConfig
from .errors import LineContext, PatchTestError
from .patch import Patch, apply_patch

logger = logging.getLogger(__name__)


def parse_spec_stream_line(line: str) -> Patch | None:
    """
    Classify a single line as a patch operation or not.

    Args:
        line: Raw line text (surrounding whitespace is ignored)

    Returns:
        The Patch, or None when the line is prose or malformed.

    Examples:
        parse_spec_stream_line('{"op":"add","path":"/root","value":"main"}') -> Patch(...)
        parse_spec_stream_line("Here is your dashboard:") -> None
        parse_spec_stream_line('{"op":"add","path":"/ro') -> None
    """
    trimmed = line.strip()
    if not trimmed or not trimmed.startswith("{"):
        return None
    try:
        data = json.loads(trimmed)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict) or not data.get("op") or "path" not in data:
        return None
    try:
        return Patch.model_validate(data)
    except ValidationError:
        logger.debug("Patch-like line has invalid field types: %s", trimmed)
        return None


def compile_spec_stream(
    text: str,
    initial: dict[str, Any] | None = None,
    config: StreamConfig | None = None,
) -> dict[str, Any]:
    """
    Compile a complete JSONL string in one pass.

    Unlike the streaming compiler, repeated lines are applied every time
    they occur. ``initial`` is copied, never mutated.

    Raises:
        PatchTestError: If a ``test`` line fails and the policy is ``raise``.
    """
    config = config or DEFAULT_CONFIG
    result: dict[str, Any] = copy.deepcopy(initial) if initial else {}
    for line_number, line in enumerate(text.split("\n"), start=1):
        patch = parse_spec_stream_line(line)
        if patch is None:
            continue
        try:
            apply_patch(result, patch)
        except PatchTestError as e:
            if config.on_test_failure == OnTestFailure.SKIP:
                logger.warning("Skipping failed test at %s (line %d)", e.path, line_number)
                continue
            raise e.with_context(LineContext(line_number, line.strip())) from e
    return result
