"""Shared types for csvlinter: errors, results, run options, event payloads."""

from csvlinter.models.errors import (
    ConfigError,
    CsvLinterError,
    EncodingError,
    InputError,
    PipelineError,
    SchemaCompileError,
    SizeLimitError,
)
from csvlinter.models.results import Finding, FindingType, Results, format_duration
from csvlinter.models.run import STDIN_NAME, RunState, ValidationRequest

__all__ = [
    "ConfigError",
    "CsvLinterError",
    "EncodingError",
    "Finding",
    "FindingType",
    "InputError",
    "PipelineError",
    "Results",
    "RunState",
    "STDIN_NAME",
    "SchemaCompileError",
    "SizeLimitError",
    "ValidationRequest",
    "format_duration",
]
