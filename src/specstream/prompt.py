"""
User prompt assembly for generation and edit rounds.

When a non-empty Spec is already on screen the prompt switches to edit
mode: the current Spec is shown and the model is told to emit only the
patches for the requested change.
"""

from __future__ import annotations

import json
from typing import Any

from specstream.core.spec import is_non_empty_spec
from specstream.core.validator import SpecIssue, format_spec_issues

PATCH_INSTRUCTIONS = """\
IMPORTANT: The current UI is already loaded. Output ONLY the patches needed to make the requested change:
- To add a new element: {"op":"add","path":"/elements/new-key","value":{...}}
- To modify an existing element: {"op":"replace","path":"/elements/existing-key","value":{...}}
- To remove an element: {"op":"remove","path":"/elements/old-key"}
- To update the root: {"op":"replace","path":"/root","value":"new-root-key"}
- To add children: update the parent element with new children array

DO NOT output patches for elements that don't need to change. Only output what's necessary for the requested modification."""

STREAMING_REMINDER = (
    "Remember: Output /root first, then interleave /elements and /state patches so the UI "
    "fills in progressively as it streams. Output each state patch right after the elements "
    "that use it, one per array item."
)


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def build_user_prompt(
    prompt: str | None,
    current_spec: dict[str, Any] | None = None,
    state: dict[str, Any] | None = None,
    max_prompt_length: int | None = None,
) -> str:
    """
    Build the user message for a generation request.

    Args:
        prompt: What the user asked for
        current_spec: Spec currently on screen; non-empty switches to edit mode
        state: State the generated UI may read
        max_prompt_length: Truncate the user text to this many characters

    Returns:
        The complete user message.
    """
    user_text = str(prompt or "")
    if max_prompt_length is not None and max_prompt_length > 0:
        user_text = user_text[:max_prompt_length]

    if is_non_empty_spec(current_spec):
        parts = [
            "CURRENT UI STATE (already loaded, DO NOT recreate existing elements):",
            _pretty(current_spec),
            "",
            f"USER REQUEST: {user_text}",
        ]
        if state:
            parts.append("")
            parts.append(f"AVAILABLE STATE:\n{_pretty(state)}")
        parts.append("")
        parts.append(PATCH_INSTRUCTIONS)
        return "\n".join(parts)

    parts = [user_text]
    if state:
        parts.append(f"\nAVAILABLE STATE:\n{_pretty(state)}")
    parts.append(f"\n{STREAMING_REMINDER}")
    return "\n".join(parts)


def build_repair_prompt(issues: list[SpecIssue]) -> str:
    """
    Ask the generator to fix a Spec that failed validation.

    Returns an empty string when ``issues`` holds no errors.
    """
    summary = format_spec_issues(issues)
    if not summary:
        return ""
    return f"{summary}\n\nOutput only the patches needed to fix these errors."
