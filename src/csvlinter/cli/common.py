"""Shared helpers/options for the csvlinter CLI.

Keep this module dependency-light; it should be safe to import from any CLI command module.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError
from typer import BadParameter

from csvlinter.infrastructure.settings import Settings
from csvlinter.models.run import STDIN_NAME, ValidationRequest

STDIN_ARG = "-"


class LogFormat(str, Enum):
    """Supported log output formats."""

    text = "text"
    ndjson = "ndjson"


class OutputFormat(str, Enum):
    """Supported report formats."""

    pretty = "pretty"
    json = "json"
    csv = "csv"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def resolve_logging(
    *,
    log_format: Optional[LogFormat],
    log_level: Optional[str],
    debug: bool,
    quiet: bool,
    settings: Settings,
) -> tuple[str, int]:
    """Effective log format and level.

    Precedence: --quiet (ERROR) > --debug (DEBUG) > --log-level > settings.
    """
    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    elif log_level:
        level = logging.getLevelNamesMapping().get(log_level.upper())
        if not isinstance(level, int):
            raise BadParameter(f"Invalid log level: {log_level}", param_hint="--log-level")
    else:
        level = settings.log_level

    return (log_format.value if log_format else settings.log_format), level


# ---------------------------------------------------------------------------
# Requests and errors
# ---------------------------------------------------------------------------


def build_request(target: str, *, schema: Optional[Path], stdin_filename: Optional[Path]) -> ValidationRequest:
    """``-`` reads piped bytes from STDIN; anything else is a file path."""
    if target == STDIN_ARG:
        return ValidationRequest(
            input=typer.get_binary_stream("stdin"),
            name=STDIN_NAME,
            schema_path=schema,
            logical_path=stdin_filename,
        )
    return ValidationRequest(input=Path(target), name=target, schema_path=schema)


def describe_settings_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err.get("loc", ()))
        problems.append(f"{where}: {err.get('msg')}" if where else str(err.get("msg")))
    return "invalid settings: " + "; ".join(problems)


def fail(message: str, code: int = 1) -> NoReturn:
    """Print ``Error: <message>`` to stderr and exit."""
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=code)


# ---------------------------------------------------------------------------
# Common reusable Typer options
# ---------------------------------------------------------------------------

LOG_FORMAT_OPTION = typer.Option(None, "--log-format", case_sensitive=False, help="Log output format (stderr).")

LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    case_sensitive=False,
    help="Log level (debug, info, warning, error, critical).",
)

DEBUG_OPTION = typer.Option(False, "--debug", help="Log every validation event, including per-row findings.")

QUIET_OPTION = typer.Option(False, "--quiet", help="Only log errors.")


__all__ = [
    "STDIN_ARG",
    "LogFormat",
    "OutputFormat",
    "build_request",
    "describe_settings_error",
    "fail",
    "resolve_logging",
    "LOG_FORMAT_OPTION",
    "LOG_LEVEL_OPTION",
    "DEBUG_OPTION",
    "QUIET_OPTION",
]
