"""
Character-level transform for chunked text-delta streams.

Generation SDKs deliver text as a sequence of parts (text-start, many
text-delta, text-end, plus parts of other kinds). This transform rewrites
that sequence so patch lines become ``data-spec`` parts and everything else
stays text:

- Prose is forwarded character by character as soon as it arrives, so a
  UI can render it without waiting for the end of the line.
- A line that starts with ``{`` or a backtick (or any line inside a fence)
  is held back until its newline arrives, then classified as a whole.

Parts of unknown kinds pass through untouched.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from .config import DEFAULT_CONFIG, StreamConfig
from .patch import Patch
from .stream import parse_spec_stream_line

logger = logging.getLogger(__name__)

SPEC_DATA_PART = "spec"
SPEC_DATA_PART_TYPE = f"data-{SPEC_DATA_PART}"


# =============================================================================
# Stream parts
# =============================================================================


class TextStartPart(BaseModel):
    """Start of a text block."""

    type: Literal["text-start"] = "text-start"
    id: str = ""

    model_config = ConfigDict(frozen=True)


class TextDeltaPart(BaseModel):
    """An incremental piece of text."""

    type: Literal["text-delta"] = "text-delta"
    id: str = ""
    delta: str

    model_config = ConfigDict(frozen=True)


class TextEndPart(BaseModel):
    """End of a text block."""

    type: Literal["text-end"] = "text-end"
    id: str = ""

    model_config = ConfigDict(frozen=True)


class SpecDataPart(BaseModel):
    """A patch extracted from the text stream."""

    type: Literal["data-spec"] = "data-spec"
    data: dict[str, Any]

    model_config = ConfigDict(frozen=True)

    @classmethod
    def for_patch(cls, patch: Patch) -> SpecDataPart:
        return cls(data={"type": "patch", "patch": patch.to_dict()})

    @property
    def patch(self) -> Patch:
        return Patch.model_validate(self.data["patch"])


StreamPart = TextStartPart | TextDeltaPart | TextEndPart | SpecDataPart


# =============================================================================
# Transform
# =============================================================================


class JsonRenderTransform:
    """
    Stateful rewriter of a part stream.

    Feed parts with transform(), then call flush() once the source ends.
    Both return the parts to forward downstream, in order.
    """

    def __init__(self, config: StreamConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._line_buffer = ""
        self._buffering = False
        self._in_fence = False
        self._text_id = ""

    def transform(self, part: Any) -> list[Any]:
        """Rewrite a single incoming part."""
        out: list[Any] = []
        if isinstance(part, TextStartPart):
            self._text_id = part.id
            out.append(part)
        elif isinstance(part, TextDeltaPart):
            self._text_id = part.id
            for ch in part.delta:
                self._feed_char(ch, out)
        elif isinstance(part, TextEndPart):
            self._flush_buffer(out)
            out.append(part)
        else:
            out.append(part)
        return out

    def flush(self) -> list[Any]:
        """Emit whatever is still buffered when the source stream ends."""
        out: list[Any] = []
        self._flush_buffer(out)
        return out

    def _text(self, delta: str, out: list[Any]) -> None:
        out.append(TextDeltaPart(id=self._text_id, delta=delta))

    def _patch(self, patch: Patch, out: list[Any]) -> None:
        out.append(SpecDataPart.for_patch(patch))

    def _feed_char(self, ch: str, out: list[Any]) -> None:
        if ch == "\n":
            if self._buffering:
                self._process_complete_line(self._line_buffer, out)
                self._line_buffer = ""
                self._buffering = False
            elif not self._in_fence:
                self._text("\n", out)
        elif self._buffering:
            self._line_buffer += ch
        elif not self._line_buffer and (self._in_fence or ch == "{" or ch == "`"):
            self._buffering = True
            self._line_buffer += ch
        else:
            self._text(ch, out)

    def _process_complete_line(self, line: str, out: list[Any]) -> None:
        trimmed = line.strip()

        if not self._in_fence and trimmed.startswith(self.config.fence_open):
            self._in_fence = True
            return
        if self._in_fence and trimmed == self.config.fence_close:
            self._in_fence = False
            return

        if self._in_fence:
            if trimmed:
                patch = parse_spec_stream_line(trimmed)
                if patch is not None:
                    self._patch(patch, out)
            return

        if not trimmed:
            self._text("\n", out)
            return

        patch = parse_spec_stream_line(trimmed) if self.config.heuristic else None
        if patch is not None:
            self._patch(patch, out)
        else:
            self._text(line + "\n", out)

    def _flush_buffer(self, out: list[Any]) -> None:
        if not self._line_buffer:
            return
        line = self._line_buffer
        trimmed = line.strip()
        self._line_buffer = ""
        self._buffering = False

        if self._in_fence:
            if trimmed:
                patch = parse_spec_stream_line(trimmed)
                if patch is not None:
                    self._patch(patch, out)
            return

        patch = parse_spec_stream_line(trimmed) if trimmed and self.config.heuristic else None
        if patch is not None:
            self._patch(patch, out)
        else:
            self._text(line, out)


def pipe_json_render(parts: Iterable[Any], config: StreamConfig | None = None) -> Iterator[Any]:
    """Run a synchronous part stream through a JsonRenderTransform."""
    transform = JsonRenderTransform(config)
    for part in parts:
        yield from transform.transform(part)
    yield from transform.flush()


async def apipe_json_render(
    parts: AsyncIterable[Any], config: StreamConfig | None = None
) -> AsyncIterator[Any]:
    """Run an asynchronous part stream through a JsonRenderTransform."""
    transform = JsonRenderTransform(config)
    async for part in parts:
        for out in transform.transform(part):
            yield out
    for out in transform.flush():
        yield out
