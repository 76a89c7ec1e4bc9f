"""Structured logging for csvlinter runs."""

from csvlinter.infrastructure.observability.context import RunLogContext, create_run_logger_context
from csvlinter.infrastructure.observability.logger import NullLogger, RunLogger

__all__ = ["NullLogger", "RunLogContext", "RunLogger", "create_run_logger_context"]
