"""Common error type, log stream kinds and the write-stream interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any


class CuError(Exception):
    """Error carrying a message and an optional textual cause."""

    def __init__(self, message: str, cause: Any = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.cause: str | None = None if cause is None else str(cause)

    def add_cause(self, context: Any) -> "CuError":
        """Set the context of this error and return it."""
        self.cause = str(context)
        return self

    def __str__(self) -> str:
        context = "None" if self.cause is None else self.cause
        return f"{self.message}\n   context:{context}"


class UnifiedLogType(IntEnum):
    """Kinds of sections that can be stored in a unified log."""

    EMPTY = 0
    STRUCTURED_LOG_LINE = 1
    COPPER_LIST = 2
    LAST_ENTRY = 3


class WriteStream(ABC):
    """Append-only stream that serializable objects are logged into."""

    @abstractmethod
    def log(self, obj: Any) -> None:
        """Append one object to the stream."""

    def flush(self) -> None:
        """Push buffered data to its destination."""