from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from csvlinter.application.engine import Engine
from csvlinter.infrastructure.observability.logger import RunLogger
from csvlinter.infrastructure.settings import Settings
from csvlinter.models.errors import ConfigError, SizeLimitError
from csvlinter.models.run import STDIN_NAME, ValidationRequest

AGE_SCHEMA = {"type": "object", "properties": {"age": {"type": "integer"}}, "required": ["name", "age"]}


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    (root / ".git").mkdir(parents=True)
    (root / "people.csv").write_text("name,age\nJohn,30\nJane,old\n", encoding="utf-8")
    (root / "people.schema.json").write_text(json.dumps(AGE_SCHEMA), encoding="utf-8")
    return root


@pytest.fixture()
def engine(tmp_path: Path) -> Engine:
    return Engine(settings=Settings.load(cwd=tmp_path))


def _capturing_logger() -> tuple[RunLogger, _ListHandler]:
    handler = _ListHandler()
    base = logging.getLogger(f"csvlinter.test.{id(handler)}")
    base.handlers.clear()
    base.addHandler(handler)
    base.setLevel(logging.DEBUG)
    base.propagate = False
    return RunLogger(base, run_id="test"), handler


def test_discovers_schema_next_to_file(engine: Engine, project: Path) -> None:
    results = engine.run(ValidationRequest(input=project / "people.csv"))

    assert results.schema_used
    assert results.file == str(project / "people.csv")
    assert [(e.line_number, e.field, e.value) for e in results.errors] == [(3, "age", "old")]


def test_discovery_can_be_disabled(tmp_path: Path, project: Path) -> None:
    engine = Engine(settings=Settings.load(cwd=tmp_path, schema_discovery=False))
    results = engine.run(ValidationRequest(input=project / "people.csv"))

    assert not results.schema_used
    assert results.valid


def test_explicit_schema_wins(engine: Engine, project: Path, tmp_path: Path) -> None:
    other = tmp_path / "lenient.schema.json"
    other.write_text("{}", encoding="utf-8")

    results = engine.run(ValidationRequest(input=project / "people.csv", schema_path=other))

    assert results.schema_used
    assert results.valid


def test_missing_explicit_schema_is_a_config_error(engine: Engine, project: Path, tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        engine.run(ValidationRequest(input=project / "people.csv", schema_path=tmp_path / "nope.json"))


def test_stream_without_logical_path_skips_discovery(engine: Engine, project: Path) -> None:
    stream = io.BytesIO((project / "people.csv").read_bytes())
    results = engine.run(ValidationRequest(input=stream))

    assert results.file == STDIN_NAME
    assert not results.schema_used


def test_stream_resolves_schema_from_logical_path(engine: Engine, project: Path) -> None:
    stream = io.BytesIO((project / "people.csv").read_bytes())
    results = engine.run(ValidationRequest(input=stream, logical_path=project / "people.csv"))

    assert results.file == STDIN_NAME
    assert results.schema_used
    assert len(results.errors) == 1


def test_stream_size_limit(tmp_path: Path) -> None:
    engine = Engine(settings=Settings.load(cwd=tmp_path, max_stdin_bytes=4))

    with pytest.raises(SizeLimitError):
        engine.run(ValidationRequest(input=io.BytesIO(b"a,b\n1,2\n")))


def test_request_overrides_settings(tmp_path: Path) -> None:
    engine = Engine(settings=Settings.load(cwd=tmp_path, fail_fast=False))
    data = b"a;b\n1\n2\n"

    results = engine.run(ValidationRequest(input=io.BytesIO(data), delimiter=";", fail_fast=True))

    assert results.total_rows == 1


def test_string_paths_are_accepted(engine: Engine, project: Path) -> None:
    results = engine.run(ValidationRequest(input=str(project / "people.csv")))  # type: ignore[arg-type]

    assert results.schema_used


def test_emits_lifecycle_events(engine: Engine, project: Path) -> None:
    logger, handler = _capturing_logger()

    engine.run(ValidationRequest(input=project / "people.csv"), logger=logger)

    events = [getattr(r, "event", None) for r in handler.records]
    assert events == [
        "csvlinter.settings.effective",
        "csvlinter.schema.resolved",
        "csvlinter.schema.loaded",
        "csvlinter.run.started",
        "csvlinter.headers.read",
        "csvlinter.row.invalid",
        "csvlinter.run.completed",
    ]
    completed = handler.records[-1].data  # type: ignore[attr-defined]
    assert completed["state"] == "completed"
    assert completed["error_count"] == 1
    assert completed["valid"] is False
