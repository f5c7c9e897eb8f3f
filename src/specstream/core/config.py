"""
Stream processing configuration.

Settings can live in ``[tool.specstream]`` of a ``pyproject.toml`` or at the
top level of a ``specstream.toml``:

    [tool.specstream]
    on_test_failure = "skip"
    fence_open = "```spec"
    fence_close = "```"
    heuristic = true
    dedupe_lines = true

The SPECSTREAM_ON_TEST_FAILURE environment variable overrides the
``on_test_failure`` setting.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ON_TEST_FAILURE_ENV_VAR = "SPECSTREAM_ON_TEST_FAILURE"

SPEC_FENCE_OPEN = "```spec"
SPEC_FENCE_CLOSE = "```"


class OnTestFailure(StrEnum):
    """What a streaming session does when a ``test`` patch fails."""

    RAISE = "raise"  # Propagate PatchTestError to the caller of push()
    SKIP = "skip"  # Log and continue with the next line


@dataclass(frozen=True)
class StreamConfig:
    """Configuration shared by the streaming compiler and the mixed parsers."""

    on_test_failure: OnTestFailure = OnTestFailure.RAISE
    fence_open: str = SPEC_FENCE_OPEN
    fence_close: str = SPEC_FENCE_CLOSE
    heuristic: bool = True  # Outside a fence, patch-shaped lines are still patches
    dedupe_lines: bool = True


DEFAULT_CONFIG = StreamConfig()


def _parse_policy(value: Any, source: str) -> OnTestFailure:
    raw = str(value).lower().strip()
    try:
        return OnTestFailure(raw)
    except ValueError:
        logger.warning(
            "Unknown on_test_failure value '%s' from %s. "
            "Valid values: raise, skip. Defaulting to raise.",
            raw,
            source,
        )
        return OnTestFailure.RAISE


def config_from_dict(data: dict[str, Any]) -> StreamConfig:
    """Build a StreamConfig from a parsed TOML table."""
    return StreamConfig(
        on_test_failure=_parse_policy(
            data.get("on_test_failure", DEFAULT_CONFIG.on_test_failure), "config file"
        ),
        fence_open=data.get("fence_open", DEFAULT_CONFIG.fence_open),
        fence_close=data.get("fence_close", DEFAULT_CONFIG.fence_close),
        heuristic=bool(data.get("heuristic", DEFAULT_CONFIG.heuristic)),
        dedupe_lines=bool(data.get("dedupe_lines", DEFAULT_CONFIG.dedupe_lines)),
    )


def load_config(path: Path | None = None) -> StreamConfig:
    """
    Load stream configuration.

    Args:
        path: A ``pyproject.toml`` (reads ``[tool.specstream]``) or a
            ``specstream.toml`` (reads the top level). None means defaults.

    Returns:
        StreamConfig with the environment override applied.
    """
    data: dict[str, Any] = {}
    if path is not None:
        parsed = tomllib.loads(path.read_text(encoding="utf-8"))
        if path.name == "pyproject.toml":
            data = parsed.get("tool", {}).get("specstream", {})
        else:
            data = parsed

    config = config_from_dict(data)

    env_value = os.environ.get(ON_TEST_FAILURE_ENV_VAR, "").strip()
    if env_value:
        config = replace(config, on_test_failure=_parse_policy(env_value, ON_TEST_FAILURE_ENV_VAR))
    return config
