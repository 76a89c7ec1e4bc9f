"""Per-run logger setup.

Each run gets its own ``logging.Logger`` (named after the run id, never
propagating to the root logger) so concurrent runs in one process do not
share handlers. Console output goes to stderr; stdout is reserved for the
report.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from csvlinter.infrastructure.observability.formatters import NdjsonFormatter, TextFormatter
from csvlinter.infrastructure.observability.logger import RunLogger
from csvlinter.models.events import LINTER_NAMESPACE, VALID_LOG_FORMATS


@dataclass
class RunLogContext:
    """Owns the handlers of one run logger; closing detaches and closes them."""

    logger: RunLogger
    handlers: list[logging.Handler] = field(default_factory=list)

    def close(self) -> None:
        base = self.logger.logger
        while self.handlers:
            handler = self.handlers.pop()
            base.removeHandler(handler)
            with suppress(OSError):
                handler.close()

    def __enter__(self) -> "RunLogContext":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()


def _formatter(log_format: str) -> logging.Formatter:
    fmt = (log_format or "text").strip().lower()
    if fmt not in VALID_LOG_FORMATS:
        raise ValueError(f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {log_format!r}")
    return TextFormatter() if fmt == "text" else NdjsonFormatter()


def create_run_logger_context(
    *,
    log_format: str = "text",
    log_level: int = logging.WARNING,
    console: bool = True,
    stream: TextIO | None = None,
    log_file: Path | None = None,
) -> RunLogContext:
    """Build a :class:`RunLogger` writing to ``stream`` (stderr) and/or ``log_file``."""

    formatter = _formatter(log_format)
    handlers: list[logging.Handler] = []

    if console:
        handlers.append(logging.StreamHandler(stream if stream is not None else sys.stderr))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    run_id = uuid.uuid4().hex
    base = logging.getLogger(f"{LINTER_NAMESPACE}.run.{run_id}")
    base.setLevel(log_level)
    base.propagate = False
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        base.addHandler(handler)

    return RunLogContext(logger=RunLogger(base, run_id=run_id), handlers=handlers)


__all__ = [
    "RunLogContext",
    "create_run_logger_context",
]
