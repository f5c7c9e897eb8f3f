"""Core streaming machinery: pointers, patches, line classification, compilers, validation."""

from .compiler import CompileResult, SpecStreamCompiler
from .config import DEFAULT_CONFIG, OnTestFailure, StreamConfig, load_config
from .errors import (
    ActionCancelledError,
    ActionError,
    LineContext,
    PatchError,
    PatchTestError,
    PointerError,
    SpecStreamError,
)
from .mixed import MixedStreamParser
from .patch import Patch, PatchOp, apply_patch, apply_patches
from .pointer import add_by_path, get_by_path, remove_by_path, set_by_path
from .spec import empty_spec, is_non_empty_spec, nested_to_flat
from .stream import compile_spec_stream, parse_spec_stream_line
from .transform import JsonRenderTransform, pipe_json_render
from .validator import auto_fix_spec, format_spec_issues, validate_spec

__all__ = [
    "ActionCancelledError",
    "ActionError",
    "CompileResult",
    "DEFAULT_CONFIG",
    "JsonRenderTransform",
    "LineContext",
    "MixedStreamParser",
    "OnTestFailure",
    "Patch",
    "PatchError",
    "PatchOp",
    "PatchTestError",
    "PointerError",
    "SpecStreamCompiler",
    "SpecStreamError",
    "StreamConfig",
    "add_by_path",
    "apply_patch",
    "apply_patches",
    "auto_fix_spec",
    "compile_spec_stream",
    "empty_spec",
    "format_spec_issues",
    "get_by_path",
    "is_non_empty_spec",
    "load_config",
    "nested_to_flat",
    "parse_spec_stream_line",
    "pipe_json_render",
    "remove_by_path",
    "set_by_path",
    "validate_spec",
]
