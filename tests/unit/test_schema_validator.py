from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType

import pytest

from csvlinter.models.errors import ConfigError, PipelineError, SchemaCompileError
from csvlinter.schema.validator import (
    ROW_FIELD,
    CompiledSchema,
    IssueNode,
    SchemaValidator,
    compile_schema,
    flatten_issue_tree,
    load_schema,
)

PEOPLE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "age": {"type": "integer", "minimum": 0},
        "email": {"type": "string", "format": "email"},
    },
    "required": ["name", "age"],
}


def _validator(schema: dict, **kwargs) -> SchemaValidator:
    return SchemaValidator(compile_schema(schema), **kwargs)


def test_valid_row_has_no_issues() -> None:
    validator = _validator(PEOPLE_SCHEMA)

    assert validator.validate_row(("name", "age", "email"), ("John", "30", "john@example.com")) == []


def test_declared_types_are_coerced_before_validation() -> None:
    validator = _validator(PEOPLE_SCHEMA)

    assert validator.coerce_row(("name", "age"), ("John", "30")) == {"name": "John", "age": 30}


def test_type_mismatch_reports_field_and_value() -> None:
    issues = _validator(PEOPLE_SCHEMA).validate_row(("name", "age"), ("John", "abc"))

    assert len(issues) == 1
    assert issues[0].field == "age"
    assert issues[0].value == "abc"
    assert "is not of type 'integer'" in issues[0].message


def test_coerced_value_is_compared_numerically() -> None:
    issues = _validator(PEOPLE_SCHEMA).validate_row(("name", "age"), ("John", "-1"))

    assert [(i.field, i.value) for i in issues] == [("age", "-1")]
    assert "minimum" in issues[0].message


def test_empty_field_is_validated_as_text_for_nullable_string() -> None:
    schema = {"type": "object", "properties": {"note": {"type": ["string", "null"], "minLength": 1}}}

    issues = _validator(schema).validate_row(("note",), ("",))

    assert [(i.field, i.value) for i in issues] == [("note", "")]


def test_boolean_looking_field_keeps_its_text() -> None:
    schema = {"type": "object", "properties": {"flag": {"type": ["boolean", "string"], "enum": ["TRUE", "FALSE"]}}}
    validator = _validator(schema)

    assert validator.coerce_row(("flag",), ("TRUE",)) == {"flag": "TRUE"}
    assert validator.validate_row(("flag",), ("TRUE",)) == []


def test_missing_required_property_is_named() -> None:
    schema = {"type": "object", "properties": {"a": {}, "b": {}}, "required": ["a", "b"]}
    issues = _validator(schema).validate_row(("a",), ("1",))

    assert [i.field for i in issues] == ["b"]
    assert "'b' is a required property" in issues[0].message
    assert issues[0].value == ""


def test_unexpected_columns_are_named() -> None:
    schema = {"type": "object", "properties": {"a": {}}, "additionalProperties": False}
    issues = _validator(schema).validate_row(("a", "x", "y"), ("1", "2", "3"))

    assert [i.field for i in issues] == ["x", "y"]
    assert [i.value for i in issues] == ["2", "3"]


def test_format_is_asserted_by_default() -> None:
    issues = _validator(PEOPLE_SCHEMA).validate_row(("name", "age", "email"), ("John", "30", "nope"))
    assert [i.field for i in issues] == ["email"]

    lenient = SchemaValidator(compile_schema(PEOPLE_SCHEMA, assert_formats=False))
    assert lenient.validate_row(("name", "age", "email"), ("John", "30", "nope")) == []


def test_nested_causes_are_flattened_parent_first() -> None:
    schema = {
        "properties": {
            "code": {
                "anyOf": [
                    {"type": "string", "pattern": "^[A-Z]+$"},
                    {"type": "string", "maxLength": 2},
                ]
            }
        }
    }
    issues = _validator(schema).validate_row(("code",), ("abc",))

    assert [i.field for i in issues] == ["code", "code", "code"]
    assert "is not valid under any of the given schemas" in issues[0].message
    assert "does not match" in issues[1].message
    assert "is too long" in issues[2].message


def test_value_echo_uses_coerced_value_by_default() -> None:
    schema = {"properties": {"score": {"type": "number", "maximum": 10}}}

    coerced = _validator(schema).validate_row(("score",), ("12.50",))
    original = _validator(schema, report_original_values=True).validate_row(("score",), ("12.50",))

    assert coerced[0].value == "12.5"
    assert original[0].value == "12.50"


def test_mismatched_row_is_reported_without_validation() -> None:
    issues = _validator(PEOPLE_SCHEMA).validate_row(("name", "age"), ("John",))

    assert len(issues) == 1
    assert issues[0].field == ROW_FIELD
    assert issues[0].message == "mismatched columns: headers=2, data=1"


def test_validator_failure_becomes_pipeline_error() -> None:
    class Exploding:
        def iter_errors(self, _instance):
            raise RuntimeError("boom")

    compiled = CompiledSchema(
        document={},
        validator=Exploding(),
        property_types=MappingProxyType({}),
        dialect="test",
    )

    with pytest.raises(PipelineError, match="boom"):
        SchemaValidator(compiled).validate_row(("a",), ("1",))


def test_flatten_issue_tree_is_preorder_and_drops_root_nodes() -> None:
    tree = [
        IssueNode(
            ("a",),
            "parent",
            children=(
                IssueNode(("a",), "child"),
                IssueNode((), "root-level", children=(IssueNode(("b",), "grandchild"),)),
            ),
        ),
        IssueNode(("z",), "sibling"),
    ]

    assert [node.message for node in flatten_issue_tree(tree)] == ["parent", "child", "grandchild", "sibling"]


def test_issue_node_field_name_joins_path() -> None:
    assert IssueNode(("items", 0), "x").field_name == "items/0"


def test_compile_rejects_invalid_schema() -> None:
    with pytest.raises(SchemaCompileError, match="failed to compile schema"):
        compile_schema({"type": 5})


@pytest.mark.parametrize("document", [5, "x", None, [{"type": "object"}]])
def test_compile_rejects_non_object_schema(document: object) -> None:
    with pytest.raises(SchemaCompileError, match="must be a JSON object or boolean"):
        compile_schema(document)


def test_load_schema_rejects_scalar_document(tmp_path: Path) -> None:
    path = tmp_path / "scalar.schema.json"
    path.write_text("5", encoding="utf-8")

    with pytest.raises(SchemaCompileError, match="scalar.schema.json"):
        load_schema(path)


def test_dialect_follows_schema_keyword() -> None:
    assert compile_schema({}).dialect == "Draft7Validator"
    modern = compile_schema({"$schema": "https://json-schema.org/draft/2020-12/schema"})
    assert modern.dialect == "Draft202012Validator"


def test_compiled_property_types_are_read_only() -> None:
    compiled = compile_schema(PEOPLE_SCHEMA)

    assert compiled.property_types["age"] == frozenset({"integer"})
    with pytest.raises(TypeError):
        compiled.property_types["age"] = frozenset()  # type: ignore[index]


def test_load_schema_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_schema(tmp_path / "nope.schema.json")


def test_load_schema_malformed_json(tmp_path: Path) -> None:
    path = tmp_path / "bad.schema.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SchemaCompileError, match="not valid JSON"):
        load_schema(path)


def test_load_schema_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "people.schema.json"
    path.write_text(json.dumps(PEOPLE_SCHEMA), encoding="utf-8")

    compiled = load_schema(path)

    assert compiled.source == path
    assert set(compiled.property_types) == {"name", "age", "email"}
