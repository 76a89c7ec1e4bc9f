"""Log formatters for csvlinter events.

Both formatters read the ``event``/``run_id``/``data`` attributes that
:class:`~csvlinter.infrastructure.observability.logger.RunLogger` puts on each
record. ``ndjson`` keeps every field for machines; ``text`` is a single
compact line per event for people watching stderr.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from csvlinter.models.events import DEFAULT_EVENT, LINTER_NAMESPACE

_TEXT_MAX_VALUE = 80
_TEXT_MAX_FIELDS = 8
_TEXT_HIDDEN_FIELDS = frozenset({"schema_version", "settings"})


def _rfc3339_utc(created: float) -> str:
    return (
        datetime.fromtimestamp(created, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _short_event(event: str) -> str:
    prefix = f"{LINTER_NAMESPACE}."
    return event[len(prefix):] if event.startswith(prefix) else event


def _clip(value: Any) -> str:
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    return text if len(text) <= _TEXT_MAX_VALUE else text[: _TEXT_MAX_VALUE - 1] + "…"


def event_record(record: logging.LogRecord, formatter: logging.Formatter) -> dict[str, Any]:
    """Flatten a log record into the csvlinter event shape."""

    out: dict[str, Any] = {
        "timestamp": _rfc3339_utc(record.created),
        "level": record.levelname.lower(),
        "event": str(getattr(record, "event", None) or DEFAULT_EVENT),
        "message": record.getMessage(),
        "run_id": str(getattr(record, "run_id", "") or ""),
        "event_id": str(getattr(record, "event_id", "") or ""),
    }

    data = getattr(record, "data", None)
    if isinstance(data, Mapping) and data:
        out["data"] = dict(data)

    if record.exc_info:
        exc_type, exc, _tb = record.exc_info
        out["error"] = {
            "type": getattr(exc_type, "__name__", str(exc_type)),
            "message": "" if exc is None else str(exc),
            "stack_trace": formatter.formatException(record.exc_info),
        }

    return out


class NdjsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        return json.dumps(event_record(record, self), ensure_ascii=False, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """``[ts] LEVEL event: message (key=value, ...)``; ``None`` fields are omitted."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = event_record(record, self)
        event = _short_event(payload["event"])

        line = f"[{payload['timestamp']}] {payload['level'].upper()} {event}"
        message = payload["message"]
        if message and message not in (event, payload["event"]):
            line += f": {message}"

        fields = [
            (key, value)
            for key, value in payload.get("data", {}).items()
            if value is not None and key not in _TEXT_HIDDEN_FIELDS
        ]
        if fields:
            shown = [f"{key}={_clip(value)}" for key, value in fields[:_TEXT_MAX_FIELDS]]
            if len(fields) > _TEXT_MAX_FIELDS:
                shown.append("…")
            line += " (" + ", ".join(shown) + ")"

        error = payload.get("error")
        if error and error.get("stack_trace"):
            line += "\n" + error["stack_trace"].rstrip("\n")

        return line


__all__ = [
    "NdjsonFormatter",
    "TextFormatter",
    "event_record",
]
