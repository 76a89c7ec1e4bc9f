"""Command-line interface for :mod:`csvlinter`."""

from csvlinter.cli.app import app, main

__all__ = ["app", "main"]
