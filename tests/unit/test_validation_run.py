from __future__ import annotations

import io
from pathlib import Path

import pytest

from csvlinter.application.validation import ValidationRun
from csvlinter.models.errors import InputError, PipelineError
from csvlinter.models.results import FindingType
from csvlinter.models.run import RunState
from csvlinter.schema.validator import SchemaValidator, compile_schema

INT_PAIR_SCHEMA = {
    "type": "object",
    "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
}


def _run(data: bytes, **kwargs) -> ValidationRun:
    return ValidationRun(io.BytesIO(data), name="test.csv", **kwargs)


def _schema(schema: dict) -> SchemaValidator:
    return SchemaValidator(compile_schema(schema))


def test_valid_input() -> None:
    run = _run(b"name,age\nJohn,30\nJane,25\n")
    results = run.validate()

    assert results.valid
    assert results.total_rows == 2
    assert results.errors == ()
    assert results.file == "test.csv"
    assert not results.schema_used
    assert run.state is RunState.COMPLETED


def test_short_row_is_a_structure_error() -> None:
    results = _run(b"name,age\nJohn,30\nJane").validate()

    assert not results.valid
    assert results.total_rows == 2
    assert len(results.errors) == 1
    error = results.errors[0]
    assert error.line_number == 3
    assert error.field == "row"
    assert error.message == "column count mismatch: expected 2, got 1"
    assert error.type is FindingType.STRUCTURE


def test_blank_lines_are_not_rows() -> None:
    results = _run(b"a,b\n\n1,2\n\n").validate()

    assert results.valid
    assert results.total_rows == 1


def test_blank_line_does_not_shift_error_line_numbers() -> None:
    results = _run(b"a,b\n\n1\n").validate()

    assert [(e.line_number, e.message) for e in results.errors] == [
        (2, "column count mismatch: expected 2, got 1"),
    ]


def test_header_only_input_is_valid_with_zero_rows() -> None:
    results = _run(b"a,b\n").validate()

    assert results.valid
    assert results.total_rows == 0


def test_invalid_utf8_completes_with_encoding_finding() -> None:
    run = _run(b"name\n\xff\n")
    results = run.validate()

    assert not results.valid
    assert results.total_rows == 0
    assert len(results.errors) == 1
    assert results.errors[0].type is FindingType.ENCODING
    assert results.errors[0].message == "invalid UTF-8 encoding"
    assert results.errors[0].line_number == 0
    assert run.state is RunState.COMPLETED


def test_empty_input_aborts() -> None:
    run = _run(b"")

    with pytest.raises(InputError, match="empty input: no headers found"):
        run.validate()
    assert run.state is RunState.ABORTED


def test_schema_errors_carry_row_line_numbers() -> None:
    results = _run(b"a,b\n1,2\nx,2\n3,y\n", schema_validator=_schema(INT_PAIR_SCHEMA)).validate()

    assert results.schema_used
    assert [(e.line_number, e.field, e.value) for e in results.errors] == [(3, "a", "x"), (4, "b", "y")]
    assert all(e.type is FindingType.SCHEMA for e in results.errors)


def test_ragged_row_with_schema_reports_structure_then_schema() -> None:
    results = _run(b"a,b\n1\n", schema_validator=_schema(INT_PAIR_SCHEMA)).validate()

    assert [e.type for e in results.errors] == [FindingType.STRUCTURE, FindingType.SCHEMA]
    assert results.errors[1].field == "row"
    assert results.errors[1].message == "mismatched columns: headers=2, data=1"


def test_fail_fast_stops_after_first_invalid_row() -> None:
    run = _run(b"a,b\n1,2\n3\n4\n5,6\n7\n", fail_fast=True)
    results = run.validate()

    assert run.state is RunState.FAILED_FAST
    assert results.total_rows == 2
    assert [e.line_number for e in results.errors] == [3]


def test_fail_fast_keeps_every_error_of_the_triggering_row() -> None:
    run = _run(b"a,b\nx,y\nz,w\n", fail_fast=True, schema_validator=_schema(INT_PAIR_SCHEMA))
    results = run.validate()

    assert results.total_rows == 1
    assert [e.field for e in results.errors] == ["a", "b"]


def test_fail_fast_on_valid_input_reads_everything() -> None:
    run = _run(b"a\n1\n2\n3\n", fail_fast=True)
    results = run.validate()

    assert run.state is RunState.COMPLETED
    assert results.total_rows == 3


def test_run_is_single_use() -> None:
    run = _run(b"a\n1\n")
    run.validate()

    with pytest.raises(PipelineError, match="already completed"):
        run.validate()


def test_reads_from_path(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("a;b\n1;2\n", encoding="utf-8")

    results = ValidationRun(path, name=str(path), delimiter=";").validate()

    assert results.valid
    assert results.file == str(path)


def test_duration_is_recorded() -> None:
    run = _run(b"a\n1\n")
    results = run.validate()

    assert results.duration
    assert run.elapsed_seconds >= 0


def test_missing_required_column_is_named() -> None:
    schema = {"required": ["a", "b"], "type": "object", "additionalProperties": False}
    results = _run(b"a\n1\n", schema_validator=_schema(schema)).validate()

    assert any(e.type is FindingType.SCHEMA and e.field == "b" for e in results.errors)


def test_fail_fast_reads_fewer_rows_than_full_run() -> None:
    data = b"a,b\n1,2\nbad\n3,4\nworse\n5,6\n"

    full = _run(data).validate()
    fast = _run(data, fail_fast=True).validate()

    assert len(full.errors) == 2
    assert [e.line_number for e in fast.errors] == [3]
    assert fast.total_rows == 2 < full.total_rows == 5
