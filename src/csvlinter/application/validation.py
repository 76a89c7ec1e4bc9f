"""Row-by-row validation of one CSV input.

``ValidationRun`` is the state machine that drives a :class:`StreamReader`
and an optional :class:`SchemaValidator`::

    created -> headers_pending -> streaming_rows -> completed | failed_fast
                                                 \\-> aborted (error raised)

Invalid UTF-8 is a validation outcome: the run completes with a single
``encoding`` finding. Problems reading the input (unreadable, empty, size
limit, malformed record) abort the run and propagate.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import BinaryIO

from csvlinter.infrastructure.io.stream import Row, StreamReader
from csvlinter.infrastructure.observability.logger import NullLogger, RunLogger
from csvlinter.models.errors import CsvLinterError, EncodingError, PipelineError
from csvlinter.models.results import Finding, FindingType, Results
from csvlinter.models.run import RunState
from csvlinter.schema.validator import ROW_FIELD, SchemaValidator


class ValidationRun:
    """Single-use validation of one input; call :meth:`validate` once."""

    def __init__(
        self,
        source: Path | str | BinaryIO,
        *,
        name: str,
        delimiter: str = ",",
        schema_validator: SchemaValidator | None = None,
        fail_fast: bool = False,
        max_bytes: int | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        self._started = time.perf_counter()
        self._finished: float | None = None
        self.source = source
        self.name = name
        self.delimiter = delimiter
        self.schema_validator = schema_validator
        self.fail_fast = fail_fast
        self.max_bytes = max_bytes
        self.logger = logger or NullLogger()
        self.state = RunState.CREATED

    @property
    def schema_used(self) -> bool:
        return self.schema_validator is not None

    @property
    def elapsed_seconds(self) -> float:
        end = self._finished if self._finished is not None else time.perf_counter()
        return end - self._started

    def validate(self) -> Results:
        if self.state is not RunState.CREATED:
            raise PipelineError(f"validation run already {self.state.value}")

        try:
            return self._run()
        except CsvLinterError:
            self.state = RunState.ABORTED
            raise

    # ------------------------------------------------------------------
    def _run(self) -> Results:
        reader = StreamReader.open(self.source, self.delimiter, max_bytes=self.max_bytes)
        with reader:
            self.state = RunState.HEADERS_PENDING
            try:
                reader.validate_encoding()
            except EncodingError as e:
                self.logger.event(
                    "encoding.invalid",
                    message="Input is not valid UTF-8",
                    level=logging.INFO,
                    data={"input": self.name, "message": str(e)},
                )
                self.state = RunState.COMPLETED
                return self._results(total_rows=0, errors=[Finding(message=str(e), type=FindingType.ENCODING)])

            headers = reader.read_headers()
            self.logger.event(
                "headers.read",
                message="Header row read",
                level=logging.DEBUG,
                column_count=len(headers),
                size_bytes=reader.size_bytes,
            )

            self.state = RunState.STREAMING_ROWS
            errors: list[Finding] = []
            total_rows = 0
            for row in reader.rows():
                total_rows += 1
                row_errors = self.check_row(row, headers)
                if row_errors:
                    errors.extend(row_errors)
                    self.logger.event(
                        "row.invalid",
                        level=logging.DEBUG,
                        line_number=row.line_number,
                        error_count=len(row_errors),
                    )

                if self.fail_fast and errors:
                    self.state = RunState.FAILED_FAST
                    self.logger.event(
                        "run.failed_fast",
                        message="Stopping at first invalid row",
                        line_number=row.line_number,
                        error_count=len(errors),
                        rows_read=total_rows,
                    )
                    break
            else:
                self.state = RunState.COMPLETED

        return self._results(total_rows=total_rows, errors=errors)

    def check_row(self, row: Row, headers: tuple[str, ...]) -> list[Finding]:
        """Structure and schema findings for one row, in that order."""

        findings: list[Finding] = []
        if len(row.fields) != len(headers):
            findings.append(
                Finding(
                    line_number=row.line_number,
                    field=ROW_FIELD,
                    message=f"column count mismatch: expected {len(headers)}, got {len(row.fields)}",
                    type=FindingType.STRUCTURE,
                )
            )

        if self.schema_validator is not None:
            try:
                issues = self.schema_validator.validate_row(headers, row.fields)
            except PipelineError as e:
                raise PipelineError(
                    f"schema validation error on line {row.line_number}: {e}",
                    line_number=row.line_number,
                ) from e
            findings.extend(
                Finding(
                    line_number=row.line_number,
                    field=issue.field,
                    message=issue.message,
                    value=issue.value,
                    type=FindingType.SCHEMA,
                )
                for issue in issues
            )

        return findings

    def _results(self, *, total_rows: int, errors: list[Finding]) -> Results:
        self._finished = time.perf_counter()
        return Results.build(
            file=self.name,
            total_rows=total_rows,
            errors=errors,
            warnings=(),
            elapsed_seconds=self.elapsed_seconds,
            schema_used=self.schema_used,
        )


__all__ = ["ValidationRun"]
