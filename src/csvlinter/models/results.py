"""Pydantic models for the validation outcome.

``Results`` is the only value that crosses from the core to the CLI and the
reporters. Its JSON form (``Results.model_dump_json(indent=2)``) is the
``--format json`` report and decodes back with ``Results.model_validate_json``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Iterable

from pydantic import BaseModel, ConfigDict, Field

NonNegativeInt = Annotated[int, Field(ge=0)]


class FindingType(str, Enum):
    """Category of a validation finding."""

    STRUCTURE = "structure"
    SCHEMA = "schema"
    ENCODING = "encoding"


class Finding(BaseModel):
    """One error or warning, stamped with the line it was found on.

    ``line_number`` is 1-based with the header on line 1; encoding findings
    are not tied to a line and carry ``0``.
    """

    line_number: NonNegativeInt = 0
    field: str = ""
    message: str
    value: str = ""
    type: FindingType

    model_config = ConfigDict(extra="forbid", frozen=True)


class Results(BaseModel):
    """Aggregate snapshot of one validation run."""

    file: str
    total_rows: NonNegativeInt = 0
    errors: tuple[Finding, ...] = ()
    warnings: tuple[Finding, ...] = ()
    duration: str = "0s"
    valid: bool
    schema_used: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def build(
        cls,
        *,
        file: str,
        total_rows: int,
        errors: Iterable[Finding],
        warnings: Iterable[Finding] = (),
        elapsed_seconds: float,
        schema_used: bool,
    ) -> "Results":
        errors = tuple(errors)
        return cls(
            file=file,
            total_rows=total_rows,
            errors=errors,
            warnings=tuple(warnings),
            duration=format_duration(elapsed_seconds),
            valid=not errors,
            schema_used=schema_used,
        )


def _trim(value: float, digits: int) -> str:
    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_duration(seconds: float) -> str:
    """Render elapsed seconds the way Go's ``time.Duration`` prints them.

    ``850ns``, ``12.5µs``, ``3.2ms``, ``1.5s``, ``2m3.4s``, ``1h0m0s``.
    """

    ns = round(seconds * 1_000_000_000)
    if ns == 0:
        return "0s"

    sign = "-" if ns < 0 else ""
    ns = abs(ns)

    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_trim(ns / 1_000, 3)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_trim(ns / 1_000_000, 6)}ms"

    hours, rest = divmod(ns, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    secs = _trim(rest / 1_000_000_000, 9)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


__all__ = ["Finding", "FindingType", "Results", "format_duration"]
