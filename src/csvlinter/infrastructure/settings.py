"""Settings for :mod:`csvlinter` (infrastructure).

Settings are defined in one place (this file) and loaded using `pydantic-settings`.

Supported sources (lowest → highest precedence):
1) `settings.toml` (current working directory)
2) `.env` (current working directory)
3) environment variables (prefix: `CSVLINTER_`)
4) explicit overrides (`Settings(...)` / CLI)

`settings.toml` is intentionally flat: keys map 1:1 to `Settings` fields.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

ENV_PREFIX = "CSVLINTER_"

DEFAULT_MAX_STDIN_BYTES = 10 * 1024 * 1024

DEFAULT_PROJECT_ROOT_MARKERS: tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    "package.json",
    "pyproject.toml",
    "go.mod",
)

_DELIMITER_ESCAPES = {"\\t": "\t", "tab": "\t"}
_FORBIDDEN_DELIMITERS = {"\n", "\r", '"'}


def normalize_delimiter(value: Any) -> str:
    """Return a single-character delimiter, accepting ``\\t``/``tab`` for TAB."""

    text = str(value)
    text = _DELIMITER_ESCAPES.get(text.lower(), text)
    if len(text) != 1:
        raise ValueError(f"delimiter must be a single character, got {value!r}")
    if text in _FORBIDDEN_DELIMITERS:
        raise ValueError(f"delimiter cannot be {text!r}")
    return text


def _coerce_log_level(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("log_level must be an int or a log level name")

    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return logging.WARNING

    if text.isdigit():
        return int(text)

    mapped = logging.getLevelNamesMapping().get(text.upper())
    if isinstance(mapped, int):
        return mapped

    raise ValueError(f"Invalid log_level: {value!r}")


def _coerce_markers(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()

    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())

    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())

    raise TypeError("project_root_markers must be a list/tuple of strings or a comma-separated string")


class Settings(BaseSettings):
    """Runtime settings for the linter."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix=ENV_PREFIX,
        env_file=".env",
    )

    # Parsing
    delimiter: str = Field(default=",")
    max_stdin_bytes: int = Field(default=DEFAULT_MAX_STDIN_BYTES, ge=1)

    # Validation behavior
    fail_fast: bool = Field(default=False)
    assert_formats: bool = Field(default=True)
    report_original_values: bool = Field(default=False)

    # Schema discovery
    schema_discovery: bool = Field(default=True)
    # NoDecode: env values arrive as comma-separated text, not JSON.
    project_root_markers: Annotated[tuple[str, ...], NoDecode] = Field(default=DEFAULT_PROJECT_ROOT_MARKERS)

    # Reporting
    output_format: Literal["pretty", "json", "csv"] = Field(default="pretty")

    # Logging
    log_format: Literal["text", "ndjson"] = Field(default="text")
    log_level: int = Field(default=logging.WARNING)

    @field_validator("delimiter", mode="before")
    @classmethod
    def _validate_delimiter(cls, value: Any) -> str:
        return normalize_delimiter(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> int:
        return _coerce_log_level(value)

    @field_validator("project_root_markers", mode="before")
    @classmethod
    def _validate_project_root_markers(cls, value: Any) -> tuple[str, ...]:
        return _coerce_markers(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_files = None
        if hasattr(init_settings, "init_kwargs"):
            toml_files = init_settings.init_kwargs.get("_csvlinter_toml_files")  # type: ignore[attr-defined]

        if toml_files is None:
            toml_files = [Path.cwd() / "settings.toml"]

        toml_settings = TomlConfigSettingsSource(settings_cls, toml_file=toml_files)

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            toml_settings,
            file_secret_settings,
        )

    @classmethod
    def load(cls, *, cwd: Path | None = None, **overrides: Any) -> "Settings":
        """Load settings relative to ``cwd``; ``None`` overrides are ignored."""

        cwd_path = (cwd or Path.cwd()).expanduser().resolve()
        explicit = {key: value for key, value in overrides.items() if value is not None}
        return cls(
            _csvlinter_toml_files=[cwd_path / "settings.toml"],
            _env_file=cwd_path / ".env",
            **explicit,
        )


__all__ = [
    "DEFAULT_MAX_STDIN_BYTES",
    "DEFAULT_PROJECT_ROOT_MARKERS",
    "ENV_PREFIX",
    "Settings",
    "normalize_delimiter",
]
