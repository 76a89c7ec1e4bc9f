"""CLI entrypoint for :mod:`csvlinter`.

- `validate` - check a CSV file (or STDIN) for structure, encoding and schema conformance.
- `version`  - print the csvlinter version.
"""

from __future__ import annotations

import typer

from csvlinter import __version__
from csvlinter.cli.validate import validate_command

app = typer.Typer(
    help=(
        "csvlinter: a streaming-first CSV validator with JSON Schema support.\n\n"
        "Validates structure, content and encoding of CSV files; built for CI, CLI and editor integration.\n\n"
        "```bash\n"
        "csvlinter validate data.csv\n"
        "csvlinter validate data.csv --schema data.schema.json --format json\n"
        "cat data.csv | csvlinter validate - --stdin-filename data.csv\n"
        "```\n"
    ),
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the csvlinter version and exit.",
    ),
) -> None:
    pass


app.command("validate")(validate_command)


@app.command("version")
def version_command() -> None:
    """Print the csvlinter version."""
    typer.echo(__version__)


def main() -> None:
    """Entrypoint used by console scripts and `python -m csvlinter`."""
    app()


__all__ = ["app", "main"]
