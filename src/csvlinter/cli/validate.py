"""`csvlinter validate` command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from csvlinter.application.engine import Engine
from csvlinter.infrastructure.observability.context import create_run_logger_context
from csvlinter.infrastructure.settings import Settings
from csvlinter.models.errors import CsvLinterError
from csvlinter.reporting.render import Reporter

from .common import (
    DEBUG_OPTION,
    LOG_FORMAT_OPTION,
    LOG_LEVEL_OPTION,
    QUIET_OPTION,
    LogFormat,
    OutputFormat,
    build_request,
    describe_settings_error,
    fail,
    resolve_logging,
)


def validate_command(
    target: str = typer.Argument(
        ...,
        metavar="<csv-file | ->",
        help="CSV file to validate, or - to read from STDIN.",
    ),
    schema: Optional[Path] = typer.Option(
        None,
        "--schema",
        "-s",
        dir_okay=False,
        help=(
            "JSON Schema file. If omitted, looks for <name>.schema.json or csvlinter.schema.json "
            "next to the CSV, then csvlinter.schema.json in parent directories up to the project root."
        ),
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the report to this file instead of stdout.",
    ),
    output_format: Optional[OutputFormat] = typer.Option(
        None,
        "--format",
        "-f",
        case_sensitive=False,
        help="Report format.",
    ),
    delimiter: Optional[str] = typer.Option(
        None,
        "--delimiter",
        "-d",
        help="Field delimiter (single character; \\t or 'tab' for TAB). Defaults to comma.",
    ),
    fail_fast: Optional[bool] = typer.Option(
        None,
        "--fail-fast/--no-fail-fast",
        "--ff",
        help="Stop after the first invalid row. Defaults to fail_fast from settings.",
        show_default=False,
    ),
    max_size: Optional[int] = typer.Option(
        None,
        "--max-size",
        min=1,
        hidden=True,
        help="Maximum input size in bytes when reading from STDIN.",
    ),
    stdin_filename: Optional[Path] = typer.Option(
        None,
        "--stdin-filename",
        help="Path used for schema discovery when reading from STDIN.",
    ),
    no_schema_discovery: bool = typer.Option(
        False,
        "--no-schema-discovery",
        help="Only use a schema given with --schema.",
    ),
    log_format: Optional[LogFormat] = LOG_FORMAT_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION,
    debug: bool = DEBUG_OPTION,
    quiet: bool = QUIET_OPTION,
) -> None:
    """Validate a CSV file or STDIN against its structure and an optional JSON Schema."""

    try:
        settings = Settings.load(
            delimiter=delimiter,
            fail_fast=fail_fast,
            max_stdin_bytes=max_size,
            output_format=output_format.value if output_format else None,
            schema_discovery=False if no_schema_discovery else None,
        )
    except ValidationError as e:
        fail(describe_settings_error(e))

    effective_format, effective_level = resolve_logging(
        log_format=log_format,
        log_level=log_level,
        debug=debug,
        quiet=quiet,
        settings=settings,
    )

    request = build_request(target, schema=schema, stdin_filename=stdin_filename)

    try:
        reporter = Reporter(settings.output_format, output)
        with create_run_logger_context(log_format=effective_format, log_level=effective_level) as log_ctx:
            results = Engine(settings=settings).run(request, logger=log_ctx.logger)
        reporter.report(results)
    except CsvLinterError as e:
        fail(str(e))


__all__ = ["validate_command"]
