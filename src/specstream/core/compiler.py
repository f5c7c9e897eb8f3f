"""
Streaming Spec compiler.

Ingests text chunks cut at arbitrary boundaries, buffers the trailing
partial line, and applies every complete patch line to a running Spec
document in arrival order.

Snapshots handed out by the compiler are copy-on-write: a patch never
mutates a container that is reachable from a previously returned result.
Each batch that applies at least one patch yields a new top-level dict, so
``result is previous_result`` is a reliable "nothing changed" check.

Usage:
    compiler = SpecStreamCompiler()
    for chunk in response_chunks:
        update = compiler.push(chunk)
        if update.new_patches:
            render(update.result)
    spec = compiler.get_result()
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_CONFIG, OnTestFailure, StreamConfig
from .errors import LineContext, PatchTestError, PointerError
from .patch import Patch, apply_patch, patch_paths
from .pointer import copy_spine
from .stream import parse_spec_stream_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileResult:
    """Outcome of one push(): the current document and the patches this call applied."""

    result: dict[str, Any]
    new_patches: list[Patch] = field(default_factory=list)


class SpecStreamCompiler:
    """
    Stateful session that compiles a JSONL patch stream into a Spec.

    Not safe for concurrent use; create one compiler per stream.
    """

    def __init__(
        self,
        initial: dict[str, Any] | None = None,
        config: StreamConfig | None = None,
    ):
        """
        Initialize a compiler session.

        Args:
            initial: Seed document (copied, never mutated)
            config: Stream configuration (test failure policy, de-duplication)
        """
        self.config = config or DEFAULT_CONFIG
        self._result: dict[str, Any] = {}
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._applied: list[Patch] = []
        self._seen: set[str] = set()
        self._line_count = 0
        self.reset(initial)

    @property
    def result(self) -> dict[str, Any]:
        """The current document snapshot (no flush)."""
        return self._result

    @property
    def buffering(self) -> bool:
        """True while a partial line is waiting for more input."""
        return bool(self._buffer)

    def push(self, chunk: str | bytes) -> CompileResult:
        """
        Feed a chunk of the stream.

        Bytes are decoded incrementally as UTF-8, so a multi-byte character
        split across chunks is reassembled. Invalid bytes decode to U+FFFD and
        the line they sit on fails classification like any other bad line.

        Returns:
            CompileResult with the current snapshot and the patches applied by
            this call only.

        Raises:
            PatchTestError: If a ``test`` line fails and the policy is ``raise``.
                Earlier lines stay applied; later lines from the same chunk
                are kept buffered for the next call.
        """
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        new_patches = self._process(lines)
        return CompileResult(result=self._result, new_patches=new_patches)

    def get_result(self) -> dict[str, Any]:
        """
        Flush any buffered partial line as a complete line and return the document.

        Safe to call repeatedly.
        """
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer.strip():
            lines = self._buffer.split("\n")
            self._buffer = ""
            self._process(lines)
        self._buffer = ""
        return self._result

    def get_patches(self) -> list[Patch]:
        """All patches applied since the last reset, in order."""
        return list(self._applied)

    def reset(self, initial: dict[str, Any] | None = None) -> None:
        """Clear the buffer, seen lines and patch history, and reseed the document."""
        self._result = dict(initial) if initial else {}
        self._buffer = ""
        self._decoder.reset()
        self._applied.clear()
        self._seen.clear()
        self._line_count = 0

    def _process(self, lines: list[str]) -> list[Patch]:
        new_patches: list[Patch] = []
        working = self._result
        copied: set[int] = set()

        for i, line in enumerate(lines):
            self._line_count += 1
            trimmed = line.strip()
            if not trimmed:
                continue
            if self.config.dedupe_lines:
                if trimmed in self._seen:
                    logger.debug("Skipping duplicate line %d", self._line_count)
                    continue
                self._seen.add(trimmed)

            patch = parse_spec_stream_line(trimmed)
            if patch is None:
                continue

            try:
                for pointer in patch_paths(patch):
                    working = copy_spine(working, pointer, copied)
                apply_patch(working, patch)
            except PatchTestError as e:
                if self.config.on_test_failure == OnTestFailure.SKIP:
                    logger.warning(
                        "Skipping failed test at %s (line %d)", e.path, self._line_count
                    )
                    continue
                self._buffer = "\n".join([*lines[i + 1 :], self._buffer])
                self._publish(working, new_patches)
                raise e.with_context(LineContext(self._line_count, trimmed)) from e
            except PointerError as e:
                logger.warning("Skipping unapplicable patch on line %d: %s", self._line_count, e)
                continue

            logger.debug("Applied %s %s", patch.op, patch.path)
            self._applied.append(patch)
            new_patches.append(patch)

        self._publish(working, new_patches)
        return new_patches

    def _publish(self, working: dict[str, Any], new_patches: list[Patch]) -> None:
        if not new_patches:
            return
        if working is self._result:
            working = dict(working)
        self._result = working
