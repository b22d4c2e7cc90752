"""Typer application and CLI entry point for specir.

The CLI is a thin driver around :func:`~specir.parser.parse_document`: it
loads a document (path, URL or ``-`` for stdin), lowers it, and prints the
result. Three commands are registered:

* ``specir types SOURCE`` -- named declarations in emission order.
* ``specir operations SOURCE`` -- operations in document order.
* ``specir dump SOURCE`` -- the whole model as JSON.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~specir.exceptions.SpecirError` failures exit
with the error's code; anything else writes a crash log.
"""

from __future__ import annotations

import logging
import signal
import sys
import tempfile
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from specir import __version__
from specir.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="specir",
    help="Lower OpenAPI/Swagger schemas into an intermediate type model.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specir {__version__}")
        raise typer.Exit()


def _configure_logging(level: str, verbose: bool, quiet: bool) -> None:
    """Send library log records to stderr at the effective level."""
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only log errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (overrides SPECIR_LOG_LEVEL)."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~specir.output.OutputManager`, resolves the
    :class:`~specir.config.ParserConfig`, configures logging, and stores
    the config in ``ctx.obj`` for the sub-commands.
    """
    from specir.config import resolve_config
    from specir.exceptions import InvalidUsageError, SpecirError
    from specir.output import OutputFormat, OutputManager, error, set_output

    if json_output and plain_output:
        exc = InvalidUsageError("--json and --plain are mutually exclusive")
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            verbose=verbose,
            output_file=output_file,
        )
    )

    try:
        config = resolve_config(cli_log_level=log_level)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    _configure_logging(config.log_level, verbose, quiet)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _parse(ctx: typer.Context, source: str):  # noqa: ANN202
    """Load and lower *source*, turning specir errors into a clean exit."""
    from specir.exceptions import SpecirError
    from specir.output import debug, error
    from specir.parser import load_spec, parse_document

    try:
        raw = load_spec(source)
        data = parse_document(raw, ctx.obj["config"])
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    debug(
        f"Swagger/OpenAPI {data.spec_version.value}: "
        f"{len(data.reference_types)} declarations, {len(data.operations)} operations"
    )
    return data


@app.command("types")
def types_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, URL, or '-' for stdin."),
) -> None:
    """List named declarations in emission order.

    Example::

        specir types openapi.yaml
    """
    from specir.output import print_table
    from specir.parser.toposort import dependency_graph

    data = _parse(ctx, source)
    graph = dependency_graph(list(data.reference_types))
    rows = [
        [decl.name, decl.type.kind, ", ".join(graph[decl.name])]
        for decl in data.reference_types
    ]
    print_table(["Name", "Kind", "Depends on"], rows, title="Declarations")


@app.command("operations")
def operations_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, URL, or '-' for stdin."),
) -> None:
    """List operations in path-then-method order.

    Example::

        specir operations openapi.yaml
    """
    from specir.output import print_table

    data = _parse(ctx, source)
    rows = [
        [
            op.method.value.upper(),
            op.path,
            op.operation_id,
            ", ".join(p.name for p in op.params),
            "yes" if op.deprecated else "",
        ]
        for op in data.operations
    ]
    print_table(
        ["Method", "Path", "Operation", "Params", "Deprecated"],
        rows,
        title="Operations",
    )


@app.command("dump")
def dump_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Spec file path, URL, or '-' for stdin."),
) -> None:
    """Print the full lowered model as JSON.

    Example::

        specir dump openapi.yaml -o model.json
    """
    from specir.output import print_json

    data = _parse(ctx, source)
    print_json(data.model_dump(mode="json"))


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to a crash log and return its path."""
    logs_dir = Path(tempfile.gettempdir()) / "specir"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specir`` console script.

    Unhandled :class:`~specir.exceptions.SpecirError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

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
    except Exception as exc:
        from specir.exceptions import SpecirError
        from specir.output import error

        if isinstance(exc, SpecirError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
