"""Process-wide structured logger and a plain file destination for it."""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from .errors import CuError, WriteStream
from .logentry import CuLogEntry, format_logline, format_value


class _DummyWriteStream(WriteStream):
    """Destination left in place once the runtime is closed."""

    def log(self, obj: Any) -> None:
        print(f"Pending logs got cut: {obj}", file=sys.stderr)


class _MonotonicClock:
    def now(self) -> int:
        return time.monotonic_ns()


@dataclass
class _LoggerState:
    lock: threading.Lock = field(default_factory=threading.Lock)
    writer: WriteStream | None = None
    clock: Any = None
    extra_text_logger: logging.Logger | None = None


_state = _LoggerState()


class LoggerRuntime:
    """Installs a destination for structured logs for as long as it is open."""

    def __init__(
        self,
        clock: Any,
        destination: WriteStream,
        extra_text_logger: logging.Logger | None = None,
    ) -> None:
        with _state.lock:
            _state.writer = destination
            _state.clock = clock if clock is not None else _MonotonicClock()
            _state.extra_text_logger = extra_text_logger
        self._closed = False

    def flush(self) -> None:
        """Flush the current destination, reporting failures on stderr."""
        with _state.lock:
            writer = _state.writer
            if writer is None:
                print("copperlog: Logger not initialized.", file=sys.stderr)
                return
            try:
                writer.flush()
            except CuError as err:
                print(f"copperlog: Failed to flush writer: {err}", file=sys.stderr)

    def close(self) -> None:
        """Flush and detach the destination."""
        if self._closed:
            return
        self._closed = True
        self.flush()
        with _state.lock:
            if _state.writer is not None:
                _state.writer = _DummyWriteStream()

    def __enter__(self) -> "LoggerRuntime":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def log(entry: CuLogEntry) -> None:
    """Stamp the entry with the current time and write it to the destination."""
    with _state.lock:
        if _state.writer is None:
            raise CuError("Logger not initialized.")
        entry.time = _state.clock.now()
        try:
            _state.writer.log(entry)
        except CuError as err:
            print(f"Failed to log data: {err}", file=sys.stderr)


def log_debug_mode(entry: CuLogEntry, format_str: str, param_names: Sequence[str]) -> None:
    """Log the entry and also send its text rendering to the extra text logger."""
    log(entry)
    logger = _state.extra_text_logger
    if logger is None:
        return
    params = [format_value(value) for value in entry.params]
    named_params = dict(zip(param_names, params))
    logline = format_logline(entry.time, format_str, params, named_params)
    logger.info("%s", logline)


class SimpleFileWriter(WriteStream):
    """Writes encoded log entries straight into a file."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        try:
            self._file = open(self.path, "wb")
        except OSError as exc:
            raise CuError(f"Failed to open file: {exc!r}") from exc
        self._bytes_written = 0

    def log(self, obj: CuLogEntry) -> None:
        data = obj.to_bytes()
        try:
            self._file.write(data)
        except (OSError, ValueError) as exc:
            raise CuError(f"Failed to write to file: {exc!r}") from exc
        self._bytes_written += len(data)

    def flush(self) -> None:
        try:
            self._file.flush()
        except (OSError, ValueError) as exc:
            raise CuError(f"Failed to flush file: {exc!r}") from exc

    def close(self) -> None:
        """Flush and close the file."""
        if not self._file.closed:
            self.flush()
            self._file.close()

    def bytes_written(self) -> int:
        """Number of bytes handed to the file so far."""
        return self._bytes_written

    def __enter__(self) -> "SimpleFileWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SimpleFileWriter for path {str(self.path)!r}"