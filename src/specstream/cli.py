"""
specstream command line interface.

Commands:
- compile: Stream a JSONL patch file through the compiler
- validate: Check (and optionally repair) a Spec JSON file
- split: Separate prose from patch lines in mixed model output
"""

from __future__ import annotations

import json
import logging
import os
import platform
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from specstream.core.compiler import SpecStreamCompiler
from specstream.core.config import OnTestFailure, StreamConfig, load_config
from specstream.core.errors import SpecStreamError
from specstream.core.mixed import MixedStreamParser
from specstream.core.patch import Patch
from specstream.core.validator import SpecIssue, auto_fix_spec, validate_spec

LOG_LEVEL_ENV_VAR = "SPECSTREAM_LOG_LEVEL"

console = Console()
logger = logging.getLogger(__name__)


def get_version() -> str:
    from specstream import __version__

    return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"specstream {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


app = typer.Typer(
    help="specstream - streaming JSON Patch compiler for generative UI specs",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Configure logging for all commands."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


# =============================================================================
# Helpers
# =============================================================================


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        typer.echo(f"File not found: {path}", err=True)
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8")


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"File not found: {path}", err=True)
        raise typer.Exit(code=1)
    except json.JSONDecodeError as e:
        typer.echo(f"Invalid JSON in {path}: {e}", err=True)
        raise typer.Exit(code=1)


def _write_output(content: str, output: Path | None) -> None:
    if output:
        output.write_text(content + "\n", encoding="utf-8")
        typer.echo(f"Written to {output}", err=True)
    else:
        typer.echo(content)


def _load_stream_config(config_path: Path | None, on_test_failure: OnTestFailure | None) -> StreamConfig:
    config = load_config(config_path)
    if on_test_failure is not None:
        config = replace(config, on_test_failure=on_test_failure)
    return config


def _print_issues(issues: list[SpecIssue]) -> None:
    table = Table(title="Spec Issues")
    table.add_column("Severity")
    table.add_column("Code")
    table.add_column("Element")
    table.add_column("Message")
    for issue in issues:
        style = "red" if issue.severity == "error" else "yellow"
        table.add_row(
            f"[{style}]{issue.severity}[/{style}]",
            issue.code,
            issue.element_key or "",
            issue.message,
        )
    console.print(table, soft_wrap=True)


# =============================================================================
# Commands
# =============================================================================


@app.command(name="compile")
def compile_command(
    input: str = typer.Argument(..., help="JSONL patch file, or - for stdin"),
    initial: Path | None = typer.Option(None, "--initial", "-i", help="Initial Spec JSON file"),
    chunk_size: int = typer.Option(
        0, "--chunk-size", "-c", min=0, help="Feed the stream in chunks of N characters (0: whole input)"
    ),
    on_test_failure: OnTestFailure | None = typer.Option(
        None, "--on-test-failure", help="What a failing test patch does: raise or skip"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="pyproject.toml or specstream.toml to read settings from"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
    validate: bool = typer.Option(False, "--validate", help="Validate the compiled Spec"),
) -> None:
    """
    Compile a patch stream into a Spec.

    Examples:
        specstream compile patches.jsonl
        specstream compile patches.jsonl -c 16 --validate
        cat patches.jsonl | specstream compile -
    """
    text = _read_input(input)
    config = _load_stream_config(config_path, on_test_failure)
    initial_spec = _read_json(initial) if initial else None

    compiler = SpecStreamCompiler(initial_spec, config=config)
    step = chunk_size or max(len(text), 1)
    try:
        for start in range(0, len(text), step):
            compiler.push(text[start : start + step])
        result = compiler.get_result()
    except SpecStreamError as e:
        typer.echo(f"Compile error: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info("Applied %d patches", len(compiler.get_patches()))
    _write_output(json.dumps(result, indent=2, ensure_ascii=False), output)

    if validate:
        report = validate_spec(result)
        if report.issues:
            _print_issues(report.issues)
        if not report.valid:
            raise typer.Exit(code=1)


@app.command(name="validate")
def validate_command(
    spec_file: Path = typer.Argument(..., help="Spec JSON file"),
    orphans: bool = typer.Option(False, "--orphans", help="Warn about unreachable elements"),
    fix: bool = typer.Option(False, "--fix", help="Auto-fix misplaced fields before validating"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the fixed Spec here"),
) -> None:
    """
    Validate a Spec.

    Exits 1 when the Spec has errors.
    """
    spec = _read_json(spec_file)
    if not isinstance(spec, dict):
        typer.echo("Spec must be a JSON object", err=True)
        raise typer.Exit(code=1)

    if fix:
        fixed = auto_fix_spec(spec)
        spec = fixed.spec
        for message in fixed.fixes:
            console.print(f"[cyan]fixed:[/cyan] {message}")
        if output:
            output.write_text(json.dumps(spec, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            console.print(f"Fixed spec written to {output}")

    report = validate_spec(spec, check_orphans=orphans)
    if report.issues:
        _print_issues(report.issues)

    if report.valid:
        console.print(f"[green]✓ Spec is valid[/green] ({len(report.warnings)} warnings)")
    else:
        console.print(f"[red]✗ {len(report.errors)} errors[/red]")
        raise typer.Exit(code=1)


@app.command(name="split")
def split_command(
    input: str = typer.Argument(..., help="Mixed text file, or - for stdin"),
    heuristic: bool = typer.Option(
        True, "--heuristic/--fence-only", help="Treat patch-shaped lines outside fences as patches"
    ),
    config_path: Path | None = typer.Option(None, "--config", help="Settings file"),
) -> None:
    """Separate prose from patch lines."""
    text = _read_input(input)
    config = replace(load_config(config_path), heuristic=heuristic)

    prose: list[str] = []
    patches: list[Patch] = []
    parser = MixedStreamParser(on_patch=patches.append, on_text=prose.append, config=config)
    parser.push(text)
    parser.flush()

    console.rule("Text")
    for line in prose:
        console.print(line, markup=False, highlight=False)
    console.rule(f"Patches ({len(patches)})")
    for patch in patches:
        console.print(json.dumps(patch.to_dict(), ensure_ascii=False), markup=False, highlight=False)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
