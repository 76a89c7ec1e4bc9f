"""csvlinter error hierarchy.

Everything here is an *operational* error: it aborts a run and no
:class:`~csvlinter.models.results.Results` is produced. The one exception is
:class:`EncodingError`, which the validation run turns into an ``encoding``
finding instead of letting it escape.
"""

from __future__ import annotations


class CsvLinterError(Exception):
    """Base class for csvlinter-specific exceptions."""


class ConfigError(CsvLinterError):
    """Raised when the schema file or run options are unusable."""


class SchemaCompileError(ConfigError):
    """Raised when a schema document is rejected by the schema compiler."""


class InputError(CsvLinterError):
    """Raised when the CSV input cannot be read or has no header record."""


class SizeLimitError(InputError):
    """Raised when buffered input grows past the configured byte ceiling."""

    def __init__(self, message: str, *, limit: int) -> None:
        super().__init__(message)
        self.limit = limit


class EncodingError(InputError):
    """Raised when the input is not valid UTF-8."""


class PipelineError(CsvLinterError):
    """Raised for unexpected failures while validating a row."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


__all__ = [
    "CsvLinterError",
    "ConfigError",
    "SchemaCompileError",
    "InputError",
    "SizeLimitError",
    "EncodingError",
    "PipelineError",
]
