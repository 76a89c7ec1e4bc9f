"""``RunLogger``: a LoggerAdapter that emits typed csvlinter events.

Plain ``logger.info(...)`` calls still work and are tagged ``csvlinter.log``.
Domain events go through :meth:`RunLogger.event`, whose payload is checked
against the model registered for the event in
:data:`~csvlinter.models.events.LINTER_EVENT_SCHEMAS`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any, TypeAlias

from pydantic import ValidationError

from csvlinter.models.events import DEFAULT_EVENT, LINTER_EVENT_SCHEMAS, LINTER_NAMESPACE

EventData: TypeAlias = Mapping[str, Any]


def qualify_event_name(event_name: str, namespace: str = LINTER_NAMESPACE) -> str:
    """``row.invalid`` -> ``csvlinter.row.invalid``; already-qualified names pass through."""

    name = (event_name or "").strip().strip(".")
    ns = (namespace or "").strip().strip(".")
    if not name:
        return f"{ns}.invalid_event" if ns else "invalid_event"
    if not ns or name == ns or name.startswith(f"{ns}."):
        return name
    return f"{ns}.{name}"


def validate_event_payload(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Check ``payload`` against the registered model for ``event``.

    Every ``csvlinter.*`` event must be registered; a ``None`` entry means the
    payload is free-form. Returns the normalized payload.
    """

    if event not in LINTER_EVENT_SCHEMAS:
        raise ValueError(f"Unknown csvlinter event '{event}' (add to LINTER_EVENT_SCHEMAS)")

    model = LINTER_EVENT_SCHEMAS[event]
    if model is None:
        return payload

    try:
        validated = model.model_validate(payload, strict=True)
    except ValidationError as e:
        raise ValueError(f"Invalid payload for event '{event}': {e}") from e
    return validated.model_dump(mode="python")


class RunLogger(logging.LoggerAdapter):
    """Stamps ``run_id``/``event_id``/``event`` on every record of one run."""

    def __init__(self, logger: logging.Logger, *, run_id: str | None = None) -> None:
        self._run_id = run_id or uuid.uuid4().hex
        super().__init__(logger, {"run_id": self._run_id})

    @property
    def run_id(self) -> str:
        return self._run_id

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        extra = dict(kwargs.pop("extra", None) or {})
        extra["run_id"] = self._run_id
        extra.setdefault("event", f"{LINTER_NAMESPACE}.{DEFAULT_EVENT}")
        extra["event_id"] = uuid.uuid4().hex
        kwargs["extra"] = extra
        return msg, kwargs

    def event(
        self,
        name: str,
        *,
        message: str | None = None,
        level: int = logging.INFO,
        data: EventData | None = None,
        exc: BaseException | None = None,
        **fields: Any,
    ) -> None:
        """Emit domain event ``name`` (qualified under ``csvlinter.``).

        Payload validation only runs when ``level`` is enabled.
        """

        if not self.isEnabledFor(level):
            return

        event = qualify_event_name(name)
        payload = validate_event_payload(event, {**(data or {}), **fields})

        extra: dict[str, Any] = {"event": event}
        if payload:
            extra["data"] = payload

        exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
        self.log(level, message or event, extra=extra, exc_info=exc_info)


class NullLogger(RunLogger):
    """Discards everything; the default when the core runs without a logger."""

    def __init__(self) -> None:
        base = logging.Logger(f"{LINTER_NAMESPACE}.null")
        base.addHandler(logging.NullHandler())
        base.propagate = False
        base.disabled = True
        super().__init__(base, run_id="null")

    def __bool__(self) -> bool:
        return False


__all__ = [
    "NullLogger",
    "RunLogger",
    "qualify_event_name",
    "validate_event_payload",
]
