"""Report renderers.

``pretty`` is the human-readable report, ``json`` is the machine-readable
form of :class:`Results`, and ``csv`` lists the findings one per line for
spreadsheets and CI annotations.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import polars as pl
import typer

from csvlinter.models.errors import ConfigError, CsvLinterError
from csvlinter.models.results import Finding, Results
from csvlinter.schema.validator import ROW_FIELD

FINDING_COLUMNS: dict[str, type[pl.DataType]] = {
    "severity": pl.Utf8,
    "line_number": pl.Int64,
    "field": pl.Utf8,
    "message": pl.Utf8,
    "value": pl.Utf8,
    "type": pl.Utf8,
}


def _plain(text: str, **_style: object) -> str:
    return text


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _finding_line(index: int, finding: Finding, *, show_row_field: bool) -> str:
    line = f"  {index}. Line {finding.line_number}"
    if finding.field and (show_row_field or finding.field != ROW_FIELD):
        line += f" ({finding.field})"
    line += f": {finding.message}"
    if finding.value:
        line += f" (value: {_quote(finding.value)})"
    return line + f" [{finding.type.value}]"


def render_pretty(results: Results, *, styled: bool = True) -> str:
    """Human-readable report; ANSI styling is applied only when ``styled``."""

    style: Callable[..., str] = typer.style if styled else _plain
    parts: list[str] = [
        style("CSV Validation Results\n=====================", bold=True),
        f"File: {results.file}",
        f"Total Rows: {results.total_rows}",
        f"Duration: {results.duration}",
        f"Schema Used: {'true' if results.schema_used else 'false'}",
        "",
    ]

    if results.valid:
        parts.append("Status: " + style("✓ VALID", fg=typer.colors.GREEN))
    else:
        parts.append("Status: " + style("✗ INVALID", fg=typer.colors.RED))

    if results.errors:
        parts.append(f"\nErrors ({len(results.errors)}):")
        for i, finding in enumerate(results.errors, start=1):
            parts.append(style(_finding_line(i, finding, show_row_field=True), fg=typer.colors.RED))

    if results.warnings:
        parts.append(f"\nWarnings ({len(results.warnings)}):")
        for i, finding in enumerate(results.warnings, start=1):
            parts.append(style(_finding_line(i, finding, show_row_field=False), fg=typer.colors.YELLOW))

    parts.append("")
    if results.valid:
        parts.append(style("✓ All validations passed!", fg=typer.colors.GREEN))
    else:
        parts.append(style(f"✗ Found {len(results.errors)} error(s)", fg=typer.colors.RED))

    return "\n".join(parts) + "\n"


def render_json(results: Results) -> str:
    return results.model_dump_json(indent=2) + "\n"


def load_results_json(text: str | bytes) -> Results:
    """Decode a ``--format json`` report back into :class:`Results`."""
    return Results.model_validate_json(text)


def findings_frame(results: Results) -> pl.DataFrame:
    """Errors then warnings as a table, one finding per row."""

    records = [
        {"severity": severity, **finding.model_dump(mode="json")}
        for severity, findings in (("error", results.errors), ("warning", results.warnings))
        for finding in findings
    ]
    return pl.DataFrame(records, schema=FINDING_COLUMNS)


def render_csv(results: Results) -> str:
    return findings_frame(results).write_csv()


OUTPUT_FORMATS = ("pretty", "json", "csv")


def render(results: Results, output_format: str, *, styled: bool = False) -> str:
    if output_format == "pretty":
        return render_pretty(results, styled=styled)
    if output_format == "json":
        return render_json(results)
    if output_format == "csv":
        return render_csv(results)
    raise ConfigError(f"unsupported format: {output_format}")


class Reporter:
    """Writes a rendered report to ``output_path`` or to stdout."""

    def __init__(self, output_format: str = "pretty", output_path: Path | None = None) -> None:
        if output_format not in OUTPUT_FORMATS:
            raise ConfigError(f"unsupported format: {output_format}")
        self.output_format = output_format
        self.output_path = output_path

    def report(self, results: Results) -> None:
        if self.output_path is not None:
            text = render(results, self.output_format, styled=False)
            try:
                self.output_path.write_text(text, encoding="utf-8")
            except OSError as e:
                raise CsvLinterError(f"failed to write output file: {e}") from e
            return

        # click drops ANSI codes when stdout is not a terminal.
        typer.echo(render(results, self.output_format, styled=True), nl=False)


__all__ = [
    "FINDING_COLUMNS",
    "OUTPUT_FORMATS",
    "Reporter",
    "findings_frame",
    "load_results_json",
    "render",
    "render_csv",
    "render_json",
    "render_pretty",
]
