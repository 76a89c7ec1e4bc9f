"""Rendering of :class:`~csvlinter.models.results.Results` for humans and tools."""

from csvlinter.reporting.render import (
    OUTPUT_FORMATS,
    Reporter,
    findings_frame,
    load_results_json,
    render,
    render_csv,
    render_json,
    render_pretty,
)

__all__ = [
    "OUTPUT_FORMATS",
    "Reporter",
    "findings_frame",
    "load_results_json",
    "render",
    "render_csv",
    "render_json",
    "render_pretty",
]
