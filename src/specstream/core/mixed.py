"""
Mixed-content stream parser.

Separates conversational prose from patch lines in a single text stream.
Patch lines are usually wrapped in a fenced block:

    Here is a card for you.
    ```spec
    {"op":"add","path":"/root","value":"main"}
    ```
    Anything else?

Inside the fence every non-blank line is treated as patch data and lines
that do not parse are dropped. Outside the fence a line is prose unless
heuristic mode is on and it parses as a patch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .config import DEFAULT_CONFIG, StreamConfig
from .patch import Patch
from .stream import parse_spec_stream_line

logger = logging.getLogger(__name__)

PatchCallback = Callable[[Patch], None]
TextCallback = Callable[[str], None]


class MixedStreamParser:
    """
    Line-oriented splitter for prose interleaved with patch lines.

    Callbacks are invoked synchronously, once per complete line, in stream
    order.
    """

    def __init__(
        self,
        on_patch: PatchCallback,
        on_text: TextCallback,
        config: StreamConfig | None = None,
    ):
        self.on_patch = on_patch
        self.on_text = on_text
        self.config = config or DEFAULT_CONFIG
        self._buffer = ""
        self._in_fence = False

    @property
    def in_fence(self) -> bool:
        """True while inside a fenced patch block."""
        return self._in_fence

    def push(self, chunk: str) -> None:
        """Feed a chunk; every line completed by it is dispatched."""
        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        for line in lines:
            self._process_line(line)

    def flush(self) -> None:
        """Dispatch the trailing partial line, if any."""
        if self._buffer.strip():
            self._process_line(self._buffer)
        self._buffer = ""

    def _process_line(self, line: str) -> None:
        trimmed = line.strip()

        if not self._in_fence and trimmed.startswith(self.config.fence_open):
            self._in_fence = True
            return
        if self._in_fence and trimmed == self.config.fence_close:
            self._in_fence = False
            return

        if not trimmed:
            return

        if self._in_fence:
            patch = parse_spec_stream_line(trimmed)
            if patch is not None:
                self.on_patch(patch)
            else:
                logger.debug("Dropping malformed line inside fence: %s", trimmed)
            return

        patch = parse_spec_stream_line(trimmed) if self.config.heuristic else None
        if patch is not None:
            self.on_patch(patch)
        else:
            self.on_text(line)
