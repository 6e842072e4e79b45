"""File path helpers that treat "-" as stdin/stdout and know the null device."""

from __future__ import annotations

import io
import sys
from typing import IO, Any

from bufcore.errs import UserError


class _NopCloser:
    """Wraps a stream so that closing the wrapper leaves the stream open."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream
        self._closed = False

    def __getattr__(self, name: str) -> Any:
        return getattr(self._stream, name)

    def __iter__(self):
        return iter(self._stream)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Flush the wrapped stream and mark the wrapper closed."""
        if self._closed:
            return
        flush = getattr(self._stream, "flush", None)
        if callable(flush) and not getattr(self._stream, "closed", False):
            flush()
        self._closed = True

    def __enter__(self) -> "_NopCloser":
        return self

    def __exit__(self, *exc_info: object) -> bool:
        self.close()
        return False


class _DiscardWriter:
    """A writer that accepts text or bytes and drops them."""

    def __init__(self) -> None:
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file")

    def write(self, data: Any) -> int:
        self._check_open()
        return len(data)

    def writable(self) -> bool:
        return True

    def flush(self) -> None:
        self._check_open()

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "_DiscardWriter":
        return self

    def __exit__(self, *exc_info: object) -> bool:
        self.close()
        return False


def file_path_is_dev_null(file_path: str) -> bool:
    """Return True if the file path is the null device for this platform."""
    if sys.platform.startswith("linux") or sys.platform == "darwin":
        return file_path == "/dev/null"
    if sys.platform == "win32":
        return file_path == "nul"
    return False


def dev_null() -> str:
    """Return the null device path for darwin, linux and windows."""
    if sys.platform.startswith("linux") or sys.platform == "darwin":
        return "/dev/null"
    if sys.platform == "win32":
        return "nul"
    raise OSError(f'unknown operating system: "{sys.platform}"')


def file_path_is_stdout(file_path: str) -> bool:
    """Return True if file_path is "-"."""
    return file_path == "-"


def file_path_is_stdin(file_path: str) -> bool:
    """Return True if file_path is "-"."""
    return file_path == "-"


def open_for_write(stdout: IO | None, file_path: str) -> IO:
    """Return a closable writer for file_path.

    "-" means stdout, which is not closed when the writer is; the null device
    discards everything; other paths are created in binary mode.
    """
    if not file_path:
        raise ValueError("no filePath")
    if file_path_is_stdout(file_path):
        if stdout is None:
            raise UserError("file path was - but cannot write to stdout")
        return _NopCloser(stdout)
    if file_path_is_dev_null(file_path):
        return _DiscardWriter()
    try:
        return open(file_path, "wb")
    except OSError as err:
        raise UserError(f"error creating {file_path}: {err}") from err


def open_for_read(stdin: IO | None, file_path: str) -> IO:
    """Return a closable reader for file_path.

    "-" means stdin, which is not closed when the reader is; the null device
    reads as empty; other paths are opened in binary mode.
    """
    if not file_path:
        raise ValueError("no filePath")
    if file_path_is_stdin(file_path):
        if stdin is None:
            raise UserError("file path was - but cannot read from stdin")
        return _NopCloser(stdin)
    if file_path_is_dev_null(file_path):
        return io.BytesIO(b"")
    try:
        return open(file_path, "rb")
    except OSError as err:
        raise UserError(f"error opening {file_path}: {err}") from err