from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from csvlinter.application.validation import ValidationRun
from csvlinter.infrastructure.observability.context import create_run_logger_context
from csvlinter.infrastructure.observability.logger import RunLogger
from csvlinter.infrastructure.settings import Settings
from csvlinter.models.errors import CsvLinterError
from csvlinter.models.results import Results
from csvlinter.models.run import ValidationRequest
from csvlinter.schema.resolve import resolve_schema
from csvlinter.schema.validator import SchemaValidator, load_schema


class Engine:
    """High-level orchestrator for a single validation run."""

    def __init__(self, *, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    def _settings_snapshot(self) -> dict[str, Any]:
        return self.settings.model_dump(mode="json")

    # ------------------------------------------------------------------
    def resolve_schema_path(self, request: ValidationRequest, *, logger: RunLogger) -> Path | None:
        """Explicit schema wins; otherwise search next to the input's path."""

        if request.schema_path is not None:
            return Path(request.schema_path)
        if not self.settings.schema_discovery:
            return None

        target = request.logical_path if request.is_stream else request.input
        if target is None:
            return None

        found = resolve_schema(target, self.settings.project_root_markers)
        logger.event(
            "schema.resolved",
            message="Schema discovered" if found else "No schema found",
            level=logging.DEBUG,
            target=str(target),
            schema_path=str(found) if found is not None else None,
        )
        return found

    def load_schema_validator(self, schema_path: Path, *, logger: RunLogger) -> SchemaValidator:
        compiled = load_schema(schema_path, assert_formats=self.settings.assert_formats)
        logger.event(
            "schema.loaded",
            message="Schema compiled",
            level=logging.DEBUG,
            schema_path=str(schema_path),
            dialect=compiled.dialect,
            typed_properties=len(compiled.property_types),
        )
        return SchemaValidator(compiled, report_original_values=self.settings.report_original_values)

    # ------------------------------------------------------------------
    def run(self, request: ValidationRequest, *, logger: RunLogger | None = None) -> Results:
        """Validate one input. Operational errors propagate as ``CsvLinterError``."""

        if logger is not None:
            return self._execute(request, logger)

        with create_run_logger_context(
            log_format=self.settings.log_format,
            log_level=self.settings.log_level,
        ) as log_ctx:
            return self._execute(request, log_ctx.logger)

    def _execute(self, request: ValidationRequest, run_logger: RunLogger) -> Results:
        run_logger.event(
            "settings.effective",
            message="Effective settings",
            level=logging.DEBUG,
            data={"settings": self._settings_snapshot()},
        )

        delimiter = request.delimiter or self.settings.delimiter
        fail_fast = self.settings.fail_fast if request.fail_fast is None else request.fail_fast
        # Regular files stream from disk; the ceiling only binds input that gets buffered.
        max_bytes = request.max_bytes if request.max_bytes is not None else self.settings.max_stdin_bytes

        schema_path = self.resolve_schema_path(request, logger=run_logger)
        schema_validator = (
            self.load_schema_validator(schema_path, logger=run_logger) if schema_path is not None else None
        )

        run_logger.event(
            "run.started",
            message="Validation started",
            input=request.display_name,
            delimiter=delimiter,
            fail_fast=fail_fast,
            schema_path=str(schema_path) if schema_path is not None else None,
        )

        run = ValidationRun(
            request.input,
            name=request.display_name,
            delimiter=delimiter,
            schema_validator=schema_validator,
            fail_fast=fail_fast,
            max_bytes=max_bytes,
            logger=run_logger,
        )
        try:
            results = run.validate()
        except CsvLinterError as e:
            run_logger.debug("Validation aborted: %s", e, exc_info=True)
            raise

        run_logger.event(
            "run.completed",
            message="Validation completed",
            input=results.file,
            state=run.state.value,
            total_rows=results.total_rows,
            error_count=len(results.errors),
            warning_count=len(results.warnings),
            valid=results.valid,
            schema_used=results.schema_used,
            duration_seconds=run.elapsed_seconds,
        )
        return results


__all__ = ["Engine"]
