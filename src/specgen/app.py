"""Typer application and CLI entry point for specgen.

The CLI is a thin inspection surface over the IR pipeline. Each command
loads a document, resolves the generator configuration and prints what the
pipeline produced, without rendering any source:

* ``plan`` -- one row per output file unit.
* ``operations`` -- one row per Operation IR record.
* ``schemas`` -- one row per deduplicated Schema IR record.
* ``init`` -- write a default ``specgen.json``.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~specgen.exceptions.SpecgenError` exits with
the error's ``exit_code``; anything else is written to a crash log under
the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from specgen import __version__
from specgen.exceptions import SpecgenError
from specgen.exit_codes import EXIT_GENERIC_FAILURE
from specgen.output import error, info, print_table, success

app = typer.Typer(
    name="specgen",
    help="Plan API client modules from OpenAPI 3.0/3.1 documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specgen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~specgen.output.OutputManager` and routes
    library log records to stderr.
    """
    from specgen.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)


# ------------------------------------------------------------------ #
# Shared options and pipeline loading
# ------------------------------------------------------------------ #

_SPEC_ARGUMENT = typer.Argument(
    ..., help="OpenAPI document: file path, URL, or '-' for stdin."
)
_CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="Project config file (default: ./specgen.json)."
)
_BASE_MODULE_OPTION = typer.Option(
    None, "--base-module", "-m", help="Module prefix applied to every file unit."
)
_NO_TAGS_OPTION = typer.Option(
    False, "--no-tags", help="Name operations from their operationId instead of tags."
)


def _load_state(
    spec_source: str,
    config_path: Optional[Path],
    base_module: Optional[str],
    no_tags: bool,
):  # noqa: ANN202
    """Load the document and run the pipeline.

    Returns:
        The final :class:`~specgen.processor.state.PipelineState`.

    Raises:
        typer.Exit: With the error's exit code when loading, configuration
            or the pipeline fails.
    """
    from specgen.config import load_processor, resolve_config
    from specgen.generator import new_state, run_state
    from specgen.parser import load_spec, read_spec, validate_openapi_version

    overrides: dict[str, Any] = {"base_module": base_module}
    if no_tags:
        overrides["operation_use_tags"] = False

    try:
        config = resolve_config(config_path, overrides)
        processor = load_processor(config.processor) if config.processor else None
        raw = load_spec(spec_source)
        spec = read_spec(raw, validate_openapi_version(raw))
        return run_state(new_state(spec, config, processor))
    except SpecgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("plan")
def plan_command(
    spec: str = _SPEC_ARGUMENT,
    config: Optional[Path] = _CONFIG_OPTION,
    base_module: Optional[str] = _BASE_MODULE_OPTION,
    no_tags: bool = _NO_TAGS_OPTION,
) -> None:
    """Show the file units the pipeline would generate.

    Example::

        specgen plan openapi.yaml --base-module GitHub
        specgen --json plan openapi.yaml | jq '.[].file'
    """
    from specgen.generator import plan_rows

    state = _load_state(spec, config, base_module, no_tags)
    rows = plan_rows(state.files, state.config)
    print_table(
        ["Module", "File", "Operations", "Schemas", "Using", "Behaviour"],
        rows,
        title=f"{state.spec.info.title} -- Files ({len(rows)})",
    )


@app.command("operations")
def operations_command(
    spec: str = _SPEC_ARGUMENT,
    config: Optional[Path] = _CONFIG_OPTION,
    base_module: Optional[str] = _BASE_MODULE_OPTION,
    no_tags: bool = _NO_TAGS_OPTION,
) -> None:
    """List every Operation record, one row per homing module."""
    state = _load_state(spec, config, base_module, no_tags)
    base = state.config.base_module

    rows: list[list[str]] = []
    for op in state.operations:
        rows.append([
            op.module.qualify(base).dotted,
            op.function_name,
            op.method.value.upper(),
            op.path,
            ", ".join(p.name for p in op.path_params) or "-",
            ", ".join(p.name for p in op.query_params) or "-",
        ])

    if not rows:
        info("No operations found.")
        return
    print_table(
        ["Module", "Function", "Method", "Path", "Path Params", "Query Params"],
        rows,
        title=f"Operations ({len(rows)})",
    )


@app.command("schemas")
def schemas_command(
    spec: str = _SPEC_ARGUMENT,
    config: Optional[Path] = _CONFIG_OPTION,
    base_module: Optional[str] = _BASE_MODULE_OPTION,
    no_tags: bool = _NO_TAGS_OPTION,
) -> None:
    """List every deduplicated schema with its identities and fields."""
    state = _load_state(spec, config, base_module, no_tags)

    rows: list[list[str]] = []
    for schema in state.schemas.values():
        rows.append([
            schema.final_name,
            ", ".join(schema.identities),
            ", ".join(f"{f.name}: {f.type}" for f in schema.fields) or "-",
        ])

    if not rows:
        info("No schemas referenced by any operation.")
        return
    print_table(
        ["Schema", "Identities", "Fields"], rows, title=f"Schemas ({len(rows)})"
    )


@app.command("init")
def init_command(
    path: Optional[Path] = typer.Option(
        None, "--path", "-p", help="Where to write the config (default: ./specgen.json)."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Write a default ``specgen.json``.

    Example::

        specgen init
        specgen init --path config/specgen.json --force
    """
    from specgen.config import project_config_path, save_project_config
    from specgen.models import GeneratorConfig

    target = project_config_path(path)
    if target.exists() and not force:
        error(f"{target} already exists (use --force to overwrite)")
        raise typer.Exit(code=2)

    written = save_project_config(GeneratorConfig(), target)
    success(f"Wrote {written}")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from specgen.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specgen`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except SpecgenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
