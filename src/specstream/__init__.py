"""
specstream - streaming JSON Patch compiler for generative UI specs.

Turns line-delimited RFC 6902 patches (optionally interleaved with prose)
into a progressively built UI Spec, validates and repairs the result, and
resolves the expressions and actions the Spec declares.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .actions import ActionBinding, ActionRunner, StateStore, execute_action, resolve_action
from .core.compiler import SpecStreamCompiler
from .core.errors import ActionCancelledError, PatchTestError, PointerError, SpecStreamError
from .core.mixed import MixedStreamParser
from .core.stream import compile_spec_stream, parse_spec_stream_line
from .core.validator import auto_fix_spec, validate_spec
from .expressions import ResolutionContext, evaluate_visibility, resolve_prop_value


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("specstream")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ActionBinding",
    "ActionCancelledError",
    "ActionRunner",
    "MixedStreamParser",
    "PatchTestError",
    "PointerError",
    "ResolutionContext",
    "SpecStreamCompiler",
    "SpecStreamError",
    "StateStore",
    "auto_fix_spec",
    "compile_spec_stream",
    "evaluate_visibility",
    "execute_action",
    "parse_spec_stream_line",
    "resolve_action",
    "resolve_prop_value",
    "validate_spec",
]
