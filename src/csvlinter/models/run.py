"""Run-level types.

- ``ValidationRequest`` is caller-provided input/options for one run.
- ``RunState`` names the states a :class:`~csvlinter.application.validation.ValidationRun`
  moves through.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO

STDIN_NAME = "STDIN"


class RunState(str, Enum):
    """Lifecycle of a single validation run."""

    CREATED = "created"
    HEADERS_PENDING = "headers_pending"
    STREAMING_ROWS = "streaming_rows"
    COMPLETED = "completed"
    FAILED_FAST = "failed_fast"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in {RunState.COMPLETED, RunState.FAILED_FAST, RunState.ABORTED}


@dataclass
class ValidationRequest:
    """Inputs and options for a single validation run."""

    # Either a filesystem path or an already-open binary stream (piped input).
    input: Path | BinaryIO

    # Identifier used in Results.file. Defaults to the path, or STDIN for streams.
    name: str | None = None

    # Explicit schema file. When omitted the schema resolver runs against
    # ``input`` (paths) or ``logical_path`` (streams).
    schema_path: Path | None = None
    logical_path: Path | None = None

    # None falls back to Settings.
    delimiter: str | None = None
    fail_fast: bool | None = None
    max_bytes: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.input, str):
            self.input = Path(self.input)
        if isinstance(self.schema_path, str):
            self.schema_path = Path(self.schema_path)
        if isinstance(self.logical_path, str):
            self.logical_path = Path(self.logical_path)

    @property
    def is_stream(self) -> bool:
        return not isinstance(self.input, Path)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if isinstance(self.input, Path):
            return str(self.input)
        return STDIN_NAME


__all__ = ["RunState", "STDIN_NAME", "ValidationRequest"]
