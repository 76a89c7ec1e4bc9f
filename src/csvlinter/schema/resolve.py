"""Schema file discovery for a CSV path.

Resolution order (first hit wins):

1. ``<dir>/<stem>.schema.json`` next to the CSV file.
2. ``<dir>/csvlinter.schema.json`` next to the CSV file.
3. ``csvlinter.schema.json`` in each ancestor of ``<dir>``, stopping at the
   first project root (a directory holding one of the root markers) or at the
   filesystem root. The stopping directory itself is still checked.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from csvlinter.infrastructure.settings import DEFAULT_PROJECT_ROOT_MARKERS

PROJECT_SCHEMA_NAME = "csvlinter.schema.json"
SCHEMA_SUFFIX = ".schema.json"


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def is_project_root(directory: Path, markers: Iterable[str] = DEFAULT_PROJECT_ROOT_MARKERS) -> bool:
    """True when ``directory`` holds any root marker (file or directory)."""
    for marker in markers:
        try:
            if (directory / marker).exists():
                return True
        except OSError:
            continue
    return False


def is_filesystem_root(directory: Path) -> bool:
    return directory.parent == directory


def iter_search_dirs(start: Path, markers: Iterable[str] = DEFAULT_PROJECT_ROOT_MARKERS) -> Iterator[Path]:
    """Yield ``start`` and its ancestors up to and including the stop directory.

    Bounded by the number of path components, so it terminates on any
    filesystem.
    """
    markers = tuple(markers)
    for directory in (start, *start.parents):
        yield directory
        if is_project_root(directory, markers) or is_filesystem_root(directory):
            return


def schema_candidates(target: str | os.PathLike[str], markers: Sequence[str] = DEFAULT_PROJECT_ROOT_MARKERS) -> Iterator[Path]:
    """Yield candidate schema paths for ``target`` in resolution order."""

    target_path = Path(os.path.abspath(target))
    directory = target_path.parent
    yield directory / f"{target_path.stem}{SCHEMA_SUFFIX}"
    yield directory / PROJECT_SCHEMA_NAME
    for ancestor in iter_search_dirs(directory, markers):
        if ancestor == directory:
            continue
        yield ancestor / PROJECT_SCHEMA_NAME


def resolve_schema(target: str | os.PathLike[str], markers: Sequence[str] = DEFAULT_PROJECT_ROOT_MARKERS) -> Path | None:
    """Return the first existing schema file for ``target``, or ``None``."""

    for candidate in schema_candidates(target, markers):
        if _is_file(candidate):
            return candidate
    return None


__all__ = [
    "PROJECT_SCHEMA_NAME",
    "SCHEMA_SUFFIX",
    "is_filesystem_root",
    "is_project_root",
    "iter_search_dirs",
    "resolve_schema",
    "schema_candidates",
]
