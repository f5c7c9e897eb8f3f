"""
Error types for specstream patch application and action execution.
"""

from dataclasses import dataclass
from typing import Any, Optional


class SpecStreamError(Exception):
    """Base exception for all specstream errors."""

    def __init__(self, message: str, context: Optional["LineContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class PointerError(SpecStreamError):
    """
    Raised when a JSON Pointer operation cannot be performed.

    Examples:
    - Replacing the document root with a value of another container kind
    """

    pass


class PatchError(SpecStreamError):
    """
    Raised when a patch operation cannot be applied.
    """

    pass


class PatchTestError(PatchError):
    """
    Raised when a ``test`` operation finds a value that does not match.

    The whole patch is rejected; nothing it would have written is applied.
    """

    def __init__(
        self,
        path: str,
        expected: Any = None,
        actual: Any = None,
        context: Optional["LineContext"] = None,
    ):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f'Test operation failed: value at "{path}" does not match', context)

    def with_context(self, context: "LineContext") -> "PatchTestError":
        """Return a copy of this error that carries stream line context."""
        return PatchTestError(self.path, self.expected, self.actual, context)


class ActionError(SpecStreamError):
    """
    Raised when an action cannot be executed.
    """

    pass


class ActionCancelledError(ActionError):
    """Raised when a pending action confirmation is cancelled."""

    def __init__(self, action: str):
        self.action = action
        super().__init__("Action cancelled")


@dataclass
class LineContext:
    """
    Position of a line inside an ingested stream.

    Attributes:
        line_number: 1-indexed line number across the whole session
        text: The trimmed line text
    """

    line_number: int
    text: str

    def format(self) -> str:
        """
        Format line context as a human-readable string.

        Returns:
            Formatted string like: "line 3: {"op":"test",...}"
        """
        snippet = self.text if len(self.text) <= 120 else self.text[:117] + "..."
        return f"line {self.line_number}: {snippet}"
