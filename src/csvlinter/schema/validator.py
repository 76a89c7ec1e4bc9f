"""JSON Schema validation of CSV rows.

A schema is compiled once per run into a :class:`CompiledSchema`. Each row is
then turned into a ``{header: value}`` mapping (with declared-type coercion,
see :mod:`csvlinter.schema.coercion`), validated, and the validator's error
tree is flattened into a list of :class:`ValidationIssue`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError
from jsonschema.validators import validator_for

from csvlinter.models.errors import ConfigError, PipelineError, SchemaCompileError
from csvlinter.schema.coercion import coerce_value, declared_types, stringify

ROW_FIELD = "row"


@dataclass(frozen=True)
class CompiledSchema:
    """Immutable, compiled schema document."""

    document: Any
    validator: Any
    property_types: Mapping[str, frozenset[str]]
    dialect: str
    source: Path | None = None


@dataclass(frozen=True)
class ValidationIssue:
    """One leaf-level schema violation."""

    field: str
    message: str
    value: str = ""


@dataclass(frozen=True)
class IssueNode:
    """A node of the validator's error tree; ``location`` is the instance path."""

    location: tuple[str | int, ...]
    message: str
    children: tuple["IssueNode", ...] = field(default=())

    @property
    def field_name(self) -> str:
        return "/".join(str(part) for part in self.location)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def _property_types(document: Any) -> Mapping[str, frozenset[str]]:
    properties = document.get("properties") if isinstance(document, dict) else None
    if not isinstance(properties, dict):
        return MappingProxyType({})

    types: dict[str, frozenset[str]] = {}
    for name, prop in properties.items():
        declared = declared_types(prop)
        if declared:
            types[name] = declared
    return MappingProxyType(types)


def compile_schema(document: Any, *, assert_formats: bool = True, source: Path | None = None) -> CompiledSchema:
    """Compile a schema document.

    The dialect follows ``$schema`` and defaults to draft-07. Raises
    :class:`SchemaCompileError` when the document is not a valid schema.
    """

    where = f" '{source}'" if source is not None else ""
    if not isinstance(document, (dict, bool)):
        raise SchemaCompileError(f"failed to compile schema{where}: schema must be a JSON object or boolean")

    cls = validator_for(document, default=Draft7Validator)
    try:
        cls.check_schema(document)
    except SchemaError as e:
        raise SchemaCompileError(f"failed to compile schema{where}: {e.message}") from e

    format_checker = cls.FORMAT_CHECKER if assert_formats else None
    return CompiledSchema(
        document=document,
        validator=cls(document, format_checker=format_checker),
        property_types=_property_types(document),
        dialect=cls.__name__,
        source=source,
    )


def load_schema(path: Path | str, *, assert_formats: bool = True) -> CompiledSchema:
    """Read, parse and compile a schema file."""

    schema_path = Path(path)
    if not schema_path.is_file():
        raise ConfigError(f"Schema file '{schema_path}' does not exist")

    try:
        text = schema_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to read schema file '{schema_path}': {e}") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaCompileError(f"schema file '{schema_path}' is not valid JSON: {e}") from e

    return compile_schema(document, assert_formats=assert_formats, source=schema_path)


# ---------------------------------------------------------------------------
# Error tree
# ---------------------------------------------------------------------------


def _missing_required(error: JsonSchemaValidationError) -> str | None:
    if not isinstance(error.instance, dict) or not isinstance(error.validator_value, list):
        return None
    missing = [name for name in error.validator_value if name not in error.instance]
    for name in missing:
        if repr(name) in error.message:
            return name
    return missing[0] if missing else None


def _unexpected_properties(error: JsonSchemaValidationError) -> list[str]:
    if not isinstance(error.instance, dict) or not isinstance(error.schema, dict):
        return []
    properties = error.schema.get("properties") or {}
    patterns = error.schema.get("patternProperties") or {}
    return [
        name
        for name in error.instance
        if name not in properties and not any(re.search(pattern, name) for pattern in patterns)
    ]


def to_issue_nodes(error: JsonSchemaValidationError) -> list[IssueNode]:
    """Convert one validator error (and its sub-causes) into tree nodes.

    Root-located ``required`` and ``additionalProperties`` failures are
    re-anchored on the property they name; other root failures keep an
    empty location.
    """

    children = tuple(node for cause in error.context or () for node in to_issue_nodes(cause))
    location = tuple(error.absolute_path)

    if not location and error.validator == "required":
        missing = _missing_required(error)
        if missing is not None:
            location = (missing,)
    elif not location and error.validator == "additionalProperties" and error.validator_value is False:
        extras = _unexpected_properties(error)
        if extras:
            return [IssueNode(location=(name,), message=error.message) for name in extras]

    return [IssueNode(location=location, message=error.message, children=children)]


def flatten_issue_tree(nodes: Iterable[IssueNode]) -> list[IssueNode]:
    """Depth-first, node before its children; root-located nodes are dropped."""

    flat: list[IssueNode] = []
    stack = list(reversed(list(nodes)))
    while stack:
        node = stack.pop()
        if node.location:
            flat.append(node)
        stack.extend(reversed(node.children))
    return flat


# ---------------------------------------------------------------------------
# Row validation
# ---------------------------------------------------------------------------


class SchemaValidator:
    """Validates rows against a :class:`CompiledSchema`."""

    def __init__(self, compiled: CompiledSchema, *, report_original_values: bool = False) -> None:
        self.compiled = compiled
        self.report_original_values = report_original_values

    def coerce_row(self, headers: Sequence[str], fields: Sequence[str]) -> dict[str, Any]:
        property_types = self.compiled.property_types
        row: dict[str, Any] = {}
        for header, raw in zip(headers, fields):
            declared = property_types.get(header)
            row[header] = coerce_value(declared, raw) if declared else raw
        return row

    def validate_row(self, headers: Sequence[str], fields: Sequence[str]) -> list[ValidationIssue]:
        if len(headers) != len(fields):
            return [
                ValidationIssue(
                    field=ROW_FIELD,
                    message=f"mismatched columns: headers={len(headers)}, data={len(fields)}",
                )
            ]

        instance = self.coerce_row(headers, fields)
        try:
            errors = list(self.compiled.validator.iter_errors(instance))
        except Exception as e:
            raise PipelineError(f"schema validation error: {e}") from e

        if not errors:
            return []

        raw_values = dict(zip(headers, fields)) if self.report_original_values else None
        nodes = [node for error in errors for node in to_issue_nodes(error)]

        issues: list[ValidationIssue] = []
        for node in flatten_issue_tree(nodes):
            name = node.field_name
            if raw_values is not None:
                value = raw_values.get(name, "")
            else:
                value = stringify(instance[name]) if name in instance else ""
            issues.append(ValidationIssue(field=name, message=node.message, value=value))
        return issues


__all__ = [
    "CompiledSchema",
    "IssueNode",
    "ROW_FIELD",
    "SchemaValidator",
    "ValidationIssue",
    "compile_schema",
    "flatten_issue_tree",
    "load_schema",
    "to_issue_nodes",
]
