"""Schema discovery, compilation and row validation."""

from csvlinter.schema.coercion import coerce_value, stringify
from csvlinter.schema.resolve import PROJECT_SCHEMA_NAME, resolve_schema
from csvlinter.schema.validator import (
    CompiledSchema,
    SchemaValidator,
    ValidationIssue,
    compile_schema,
    load_schema,
)

__all__ = [
    "CompiledSchema",
    "PROJECT_SCHEMA_NAME",
    "SchemaValidator",
    "ValidationIssue",
    "coerce_value",
    "compile_schema",
    "load_schema",
    "resolve_schema",
    "stringify",
]
