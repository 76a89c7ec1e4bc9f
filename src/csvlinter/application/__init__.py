"""Validation orchestration."""

from csvlinter.application.engine import Engine
from csvlinter.application.validation import ValidationRun

__all__ = ["Engine", "ValidationRun"]
