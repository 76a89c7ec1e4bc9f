"""Public API for :mod:`csvlinter`."""

from importlib import metadata
from pathlib import Path
from typing import TYPE_CHECKING
import tomllib

if TYPE_CHECKING:
    from csvlinter.application.engine import Engine
    from csvlinter.infrastructure.settings import Settings
    from csvlinter.models.results import Finding, FindingType, Results
    from csvlinter.models.run import ValidationRequest


def _pyproject_version() -> str | None:
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        parsed = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        project = parsed.get("project", {})
        if project.get("name") != "csvlinter":
            return None
        version = project.get("version")
        if isinstance(version, str) and version:
            return version
    except (FileNotFoundError, OSError, tomllib.TOMLDecodeError):
        return None
    return None


def _resolve_version() -> str:
    # Prefer the local pyproject when running from a source checkout/editable install.
    version = _pyproject_version()
    if version is not None:
        return version

    try:
        return metadata.version("csvlinter")
    except metadata.PackageNotFoundError:  # pragma: no cover
        return "unknown"


__version__ = _resolve_version()

_EXPORTS = {
    "Engine": ("csvlinter.application.engine", "Engine"),
    "Settings": ("csvlinter.infrastructure.settings", "Settings"),
    "Finding": ("csvlinter.models.results", "Finding"),
    "FindingType": ("csvlinter.models.results", "FindingType"),
    "Results": ("csvlinter.models.results", "Results"),
    "ValidationRequest": ("csvlinter.models.run", "ValidationRequest"),
}


def __getattr__(name: str):
    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = __import__(module_name, fromlist=[attr_name])
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))


__all__ = [
    "Engine",
    "Finding",
    "FindingType",
    "Results",
    "Settings",
    "ValidationRequest",
    "__version__",
]
