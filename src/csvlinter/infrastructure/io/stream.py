"""Streaming CSV reader for :class:`~csvlinter.application.validation.ValidationRun`.

The reader works on bytes. Regular files are read straight from disk. Piped
input and FIFOs named on the command line are buffered into memory once
(bounded by ``max_bytes``) because the UTF-8 check needs a full pass before
any record is parsed and parsing then starts over from the beginning.
"""

from __future__ import annotations

import codecs
import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator

from csvlinter.infrastructure.settings import normalize_delimiter
from csvlinter.models.errors import ConfigError, EncodingError, InputError, SizeLimitError

CHUNK_SIZE = 64 * 1024
ENCODING_ERROR_MESSAGE = "invalid UTF-8 encoding"
EMPTY_INPUT_MESSAGE = "empty input: no headers found"


@dataclass(frozen=True)
class Row:
    """One data record with its 1-based line number (header is line 1)."""

    line_number: int
    fields: tuple[str, ...]
    headers: tuple[str, ...]

    def is_empty(self) -> bool:
        """True for a record with no fields or a single empty field."""
        return len(self.fields) == 0 or (len(self.fields) == 1 and self.fields[0] == "")


def _is_seekable(stream: BinaryIO) -> bool:
    try:
        return bool(stream.seekable())
    except (AttributeError, OSError, ValueError):
        return False


def _buffer_stream(stream: BinaryIO, max_bytes: int | None) -> bytes:
    """Read ``stream`` to EOF, failing once more than ``max_bytes`` arrive."""

    chunks: list[bytes] = []
    total = 0
    while True:
        want = CHUNK_SIZE if max_bytes is None else min(CHUNK_SIZE, max_bytes + 1 - total)
        try:
            chunk = stream.read(want)
        except OSError as e:
            raise InputError(f"failed to read input: {e}") from e
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
        if max_bytes is not None and total > max_bytes:
            raise SizeLimitError(
                f"input exceeds maximum size of {max_bytes} bytes",
                limit=max_bytes,
            )
    return b"".join(chunks)


class StreamReader:
    """Row-at-a-time CSV reader with an explicit record counter.

    Ragged records are allowed; comparing field counts is left to the caller.
    Blank lines carry no record and are skipped without advancing the counter.
    """

    def __init__(
        self,
        handle: BinaryIO,
        *,
        delimiter: str = ",",
        owns_handle: bool = False,
        size_bytes: int | None = None,
    ) -> None:
        self.delimiter = delimiter
        self.size_bytes = size_bytes
        self._handle = handle
        self._owns_handle = owns_handle
        try:
            self._start = handle.tell()
        except OSError as e:
            raise InputError(f"input is not seekable: {e}") from e
        self._text: io.TextIOWrapper | None = None
        self._reader: Iterator[list[str]] | None = None
        self._line_number = 0
        self._headers: tuple[str, ...] | None = None
        self._closed = False

    # ------------------------------------------------------------------
    @classmethod
    def open(
        cls,
        source: Path | str | BinaryIO,
        delimiter: str = ",",
        *,
        max_bytes: int | None = None,
    ) -> "StreamReader":
        """Open a path or binary stream for reading.

        Streams that cannot seek, or that come with a ``max_bytes`` ceiling,
        are buffered into memory first. So are paths naming a FIFO or other
        non-seekable file, again bounded by ``max_bytes``. Exceeding the
        ceiling raises :class:`SizeLimitError` rather than truncating.
        """

        try:
            delimiter = normalize_delimiter(delimiter)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                handle = path.open("rb")
                size = path.stat().st_size
            except OSError as e:
                raise InputError(f"cannot open file '{path}': {e.strerror or e}") from e
            if _is_seekable(handle):
                try:
                    return cls(handle, delimiter=delimiter, owns_handle=True, size_bytes=size)
                except InputError:
                    handle.close()
                    raise
            # FIFOs and character devices are read once, like piped stdin.
            try:
                data = _buffer_stream(handle, max_bytes)
            finally:
                handle.close()
            return cls(io.BytesIO(data), delimiter=delimiter, owns_handle=True, size_bytes=len(data))

        if max_bytes is not None or not _is_seekable(source):
            data = _buffer_stream(source, max_bytes)
            return cls(io.BytesIO(data), delimiter=delimiter, owns_handle=True, size_bytes=len(data))

        return cls(source, delimiter=delimiter, owns_handle=False)

    # ------------------------------------------------------------------
    @property
    def line_number(self) -> int:
        """Number of records consumed so far (header included)."""
        return self._line_number

    @property
    def physical_line(self) -> int:
        """Last physical line of the most recent record (quoted newlines count)."""
        return self._reader.line_num if self._reader is not None else 0  # type: ignore[attr-defined]

    @property
    def headers(self) -> tuple[str, ...] | None:
        return self._headers

    def _rewind(self) -> None:
        try:
            self._handle.seek(self._start)
        except OSError as e:
            raise InputError(f"failed to rewind input: {e}") from e

    def validate_encoding(self) -> None:
        """Check the whole input is UTF-8 before any record is parsed.

        Raises :class:`EncodingError`. The stream is rewound either way.
        """

        if self._reader is not None:
            raise InputError("encoding must be validated before records are read")

        decoder = codecs.getincrementaldecoder("utf-8")()
        self._rewind()
        try:
            while True:
                chunk = self._handle.read(CHUNK_SIZE)
                if not chunk:
                    break
                decoder.decode(chunk)
            decoder.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise EncodingError(ENCODING_ERROR_MESSAGE) from e
        except OSError as e:
            raise InputError(f"failed to read input for UTF-8 validation: {e}") from e
        finally:
            self._rewind()

    def _records(self) -> Iterator[list[str]]:
        if self._reader is None:
            # utf-8-sig drops a leading BOM so it never lands in the first header.
            self._text = io.TextIOWrapper(self._handle, encoding="utf-8-sig", newline="")
            self._reader = csv.reader(self._text, delimiter=self.delimiter)
        return self._reader

    def _next_record(self) -> list[str] | None:
        if self._closed:
            raise InputError("reader is closed")
        while True:
            try:
                record = next(self._records())
            except StopIteration:
                return None
            except csv.Error as e:
                raise InputError(f"failed to read row {self._line_number + 1}: {e}") from e
            except UnicodeDecodeError as e:
                raise EncodingError(ENCODING_ERROR_MESSAGE) from e
            except OSError as e:
                raise InputError(f"failed to read row {self._line_number + 1}: {e}") from e
            if record:
                break

        self._line_number += 1
        return record

    def read_headers(self) -> tuple[str, ...]:
        """Consume the first record as the header row."""

        if self._headers is not None:
            return self._headers

        record = self._next_record()
        if not record:
            raise InputError(EMPTY_INPUT_MESSAGE)

        self._headers = tuple(record)
        return self._headers

    def read_row(self) -> Row | None:
        """Return the next data record, or ``None`` at end of input.

        Headers are consumed first if they have not been read yet.
        """

        headers = self.read_headers()
        record = self._next_record()
        if record is None:
            return None
        return Row(line_number=self._line_number, fields=tuple(record), headers=headers)

    def rows(self) -> Iterator[Row]:
        while True:
            row = self.read_row()
            if row is None:
                return
            yield row

    __iter__ = rows

    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._text is not None:
            # Detach so the wrapper does not close a handle we were lent.
            self._text.detach()
            self._text = None
        if self._owns_handle:
            self._handle.close()

    def __enter__(self) -> "StreamReader":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()


__all__ = [
    "CHUNK_SIZE",
    "EMPTY_INPUT_MESSAGE",
    "ENCODING_ERROR_MESSAGE",
    "Row",
    "StreamReader",
]
