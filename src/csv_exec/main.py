"""CLI entrypoint for :mod:`csv_exec`.

    csv-exec [OPTIONS] COMMAND

Reads CSV from ``--input`` (or stdin), runs COMMAND once per record with
``$N`` placeholders replaced by field N, and writes each record plus the
command's trimmed output to ``--output`` (or stdout).
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from typer import BadParameter

from csv_exec import __version__
from csv_exec.engine import run
from csv_exec.logging import run_logger
from csv_exec.models.errors import ConfigurationError, CsvExecError
from csv_exec.models.run import RunOptions
from csv_exec.settings import Settings

app = typer.Typer(
    help="Execute a command on each record of a CSV.",
    add_completion=False,
)

EXIT_RUNTIME_ERROR = 1
EXIT_CONFIG_ERROR = 2


class LogFormat(str, Enum):
    """Supported log output formats."""

    text = "text"
    ndjson = "ndjson"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def resolve_log_level(log_level: Optional[str], default_level: int) -> int:
    """Resolve a string log level to a logging level constant."""
    if not log_level:
        return default_level

    mapping = logging.getLevelNamesMapping()
    resolved = mapping.get(str(log_level).upper())
    if isinstance(resolved, int):
        return resolved

    raise BadParameter(f"Invalid log level: {log_level}", param_hint="--log-level")


def resolve_logging(
    *,
    log_format: Optional[LogFormat],
    log_level: Optional[str],
    debug: bool,
    quiet: bool,
    settings: Settings,
) -> tuple[str, int]:
    """Compute effective log format/level.

    Precedence: --quiet > --debug > --log-level > settings.
    """
    effective_format = log_format.value if log_format else settings.log_format
    base_level = resolve_log_level(log_level, settings.log_level)

    if quiet:
        effective_level = logging.WARNING
    elif debug:
        effective_level = logging.DEBUG
    else:
        effective_level = base_level

    return effective_format, effective_level


def resolve_command(command: Optional[str], exec_option: Optional[str]) -> str:
    if command is not None and exec_option is not None:
        raise BadParameter("Pass the command either as an argument or with --exec, not both.", param_hint="--exec")
    resolved = command if command is not None else exec_option
    if resolved is None:
        raise BadParameter("Missing command to execute.", param_hint="COMMAND")
    return resolved


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"csv-exec {__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@app.command(no_args_is_help=True)
def run_command(
    command: Optional[str] = typer.Argument(
        None,
        metavar="COMMAND",
        show_default=False,
        help="The command to execute; `$N` is replaced by field N of the record (0-based).",
    ),
    exec_option: Optional[str] = typer.Option(
        None,
        "--exec",
        "-e",
        metavar="COMMAND",
        help="Alternative to the COMMAND argument.",
    ),
    input_path: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        metavar="FILE",
        dir_okay=False,
        help="Input CSV file (stdin by default).",
    ),
    output_path: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        metavar="FILE",
        dir_okay=False,
        help="Output CSV file (stdout by default).",
    ),
    no_header: bool = typer.Option(
        False,
        "--no-header",
        "--no-headers",
        "-n",
        help="Do not read the first line as a header line.",
    ),
    delimiter: Optional[str] = typer.Option(
        None,
        "--delimiter",
        "-d",
        metavar="CHAR",
        help="CSV delimiter (`\\t` for tabs) (default: ,).",
    ),
    quote: Optional[str] = typer.Option(None, "--quote", metavar="CHAR", help='CSV quote (default: ").'),
    output_delimiter: Optional[str] = typer.Option(
        None,
        "--output-delimiter",
        metavar="CHAR",
        help="Delimiter for the output CSV (default: same as --delimiter).",
    ),
    output_quote: Optional[str] = typer.Option(
        None,
        "--output-quote",
        metavar="CHAR",
        help="Quote for the output CSV (default: same as --quote).",
    ),
    arg_regex: Optional[str] = typer.Option(
        None,
        "--arg-regex",
        metavar="REGEX",
        help="Regex used to parse the column position in the command args; group 1 is the position (default: `\\$([0-9]+)`).",
    ),
    new_column_name: Optional[str] = typer.Option(
        None,
        "--new-column-name",
        metavar="STRING",
        help="Name of the new column which contains the results (default: Result).",
    ),
    strict_placeholders: bool = typer.Option(
        False,
        "--strict-placeholders",
        help="Fail instead of substituting an empty string for unresolvable placeholders.",
    ),
    fail_on_exit_status: bool = typer.Option(
        False,
        "--fail-on-exit-status",
        help="Abort the run when a command exits with a non-zero status.",
    ),
    log_format: Optional[LogFormat] = typer.Option(
        None,
        "--log-format",
        case_sensitive=False,
        help="Log output format (logs go to stderr).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        case_sensitive=False,
        help="Log level (debug, info, warning, error, critical).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    quiet: bool = typer.Option(False, "--quiet", help="Reduce output to warnings and errors."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Execute a command on each record of a CSV."""

    settings = Settings()
    effective_format, effective_level = resolve_logging(
        log_format=log_format,
        log_level=log_level,
        debug=debug,
        quiet=quiet,
        settings=settings,
    )

    options = RunOptions(
        command=resolve_command(command, exec_option),
        input_path=input_path,
        output_path=output_path,
        has_header=settings.has_header and not no_header,
        delimiter=delimiter if delimiter is not None else settings.delimiter,
        quote=quote if quote is not None else settings.quote,
        output_delimiter=output_delimiter,
        output_quote=output_quote,
        arg_regex=arg_regex if arg_regex is not None else settings.arg_regex,
        new_column_name=new_column_name if new_column_name is not None else settings.new_column_name,
        strict_placeholders=strict_placeholders or settings.strict_placeholders,
        fail_on_exit_status=fail_on_exit_status or settings.fail_on_exit_status,
    )

    with run_logger(log_format=effective_format, log_level=effective_level) as logger:
        logger.event(
            "settings.effective",
            level=logging.DEBUG,
            data=settings.model_dump(mode="json"),
        )
        try:
            run(options, logger=logger)
        except ConfigurationError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc
        except CsvExecError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=EXIT_RUNTIME_ERROR) from exc


# ---------------------------------------------------------------------------
# Module entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    """Entrypoint used by console scripts and `python -m csv_exec`."""
    app()


__all__ = ["app", "main"]
