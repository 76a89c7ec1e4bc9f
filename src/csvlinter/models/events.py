"""Event payload schemas and schema registry for csvlinter logging.

Payload models are strict:
- ``extra="forbid"`` to prevent accidental schema drift
- runtime validation uses ``model_validate(..., strict=True)``
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

LINTER_NAMESPACE = "csvlinter"

VALID_LOG_FORMATS = {"text", "ndjson", "json"}  # "json" is an alias for ndjson
DEFAULT_EVENT = "log"  # fallback event for plain log lines

PayloadModel: TypeAlias = type[BaseModel] | None

NonNegativeInt = Annotated[int, Field(ge=0)]
PositiveInt = Annotated[int, Field(ge=1)]
NonNegativeFloat = Annotated[float, Field(ge=0)]


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StrictPayloadV1(StrictModel):
    schema_version: Literal[1] = 1


class RunStartedPayloadV1(StrictPayloadV1):
    input: str
    delimiter: str
    fail_fast: bool
    schema_path: str | None = None


class SchemaResolvedPayloadV1(StrictPayloadV1):
    target: str
    schema_path: str | None


class SchemaLoadedPayloadV1(StrictPayloadV1):
    schema_path: str
    dialect: str
    typed_properties: NonNegativeInt


class EncodingInvalidPayloadV1(StrictPayloadV1):
    input: str
    message: str


class HeadersReadPayloadV1(StrictPayloadV1):
    column_count: NonNegativeInt
    size_bytes: NonNegativeInt | None = None


class RowInvalidPayloadV1(StrictPayloadV1):
    line_number: PositiveInt
    error_count: PositiveInt


class RunFailedFastPayloadV1(StrictPayloadV1):
    line_number: PositiveInt
    error_count: PositiveInt
    rows_read: NonNegativeInt


class RunCompletedPayloadV1(StrictPayloadV1):
    input: str
    state: Literal["completed", "failed_fast"]
    total_rows: NonNegativeInt
    error_count: NonNegativeInt
    warning_count: NonNegativeInt
    valid: bool
    schema_used: bool
    duration_seconds: NonNegativeFloat


# Registry:
# - Missing key: unregistered (strict csvlinter.* will error)
# - Value None: known-but-freeform payload (no validation)
# - Value BaseModel: validate + normalize payload through model
LINTER_EVENT_SCHEMAS: dict[str, PayloadModel] = {
    f"{LINTER_NAMESPACE}.{DEFAULT_EVENT}": None,
    f"{LINTER_NAMESPACE}.settings.effective": None,
    f"{LINTER_NAMESPACE}.run.started": RunStartedPayloadV1,
    f"{LINTER_NAMESPACE}.schema.resolved": SchemaResolvedPayloadV1,
    f"{LINTER_NAMESPACE}.schema.loaded": SchemaLoadedPayloadV1,
    f"{LINTER_NAMESPACE}.encoding.invalid": EncodingInvalidPayloadV1,
    f"{LINTER_NAMESPACE}.headers.read": HeadersReadPayloadV1,
    f"{LINTER_NAMESPACE}.row.invalid": RowInvalidPayloadV1,
    f"{LINTER_NAMESPACE}.run.failed_fast": RunFailedFastPayloadV1,
    f"{LINTER_NAMESPACE}.run.completed": RunCompletedPayloadV1,
}


__all__ = [
    "LINTER_NAMESPACE",
    "DEFAULT_EVENT",
    "VALID_LOG_FORMATS",
    "LINTER_EVENT_SCHEMAS",
    "PayloadModel",
]
