"""Structured logging front end: interns messages and logs parameter values."""

from __future__ import annotations

import dataclasses
import os
import sys
from enum import Enum
from typing import Any, Mapping, Protocol

from .errors import CuError
from .logentry import ANONYMOUS, CuLogEntry
from .runtime import log_debug_mode


class _Interner(Protocol):
    def intern(self, s: str) -> int: ...


def _hashable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, _hashable(v)) for k, v in value.items())
    return value


def to_value(obj: Any) -> Any:
    """Convert an object into a value that a log entry can carry."""
    if obj is None or isinstance(obj, (bool, int, float, str, bytes)):
        return obj
    if isinstance(obj, bytearray):
        return bytes(obj)
    if isinstance(obj, Enum):
        return to_value(obj.value)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_value(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Mapping):
        return {_hashable(to_value(k)): to_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_value(item) for item in obj]
    if isinstance(obj, os.PathLike):
        return to_value(os.fspath(obj))
    raise CuError(
        "Failed to convert a parameter to a Value",
        f"unsupported type {type(obj).__name__}",
    )


class StructLogger:
    """Logs messages as interned indexes plus structured parameters."""

    def __init__(self, string_index: _Interner) -> None:
        self.string_index = string_index

    def debug(self, message: str, *args: Any, **kwargs: Any) -> CuLogEntry:
        """Log a message; positional args are anonymous, keyword args are named."""
        entry = CuLogEntry(self.string_index.intern(message))
        for value in args:
            entry.add_param(ANONYMOUS, to_value(value))
        for name, value in kwargs.items():
            entry.add_param(self.string_index.intern(name), to_value(value))
        try:
            log_debug_mode(entry, message, list(kwargs))
        except CuError as err:
            print(f"Warning: Failed to log: {err}", file=sys.stderr)
        return entry