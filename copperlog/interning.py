"""Persistent index of interned log strings kept in an LMDB environment."""

from __future__ import annotations

import os
import threading
from pathlib import Path

import lmdb

from .errors import CuError
from .logentry import default_log_index_dir

_MAP_SIZE = 10 * 1024 * 1024
_MAX_DBS = 4
_COUNTER_KEY = b"__counter__"
_U32_MAX = 2**32 - 1


class StringIndex:
    """Assigns stable integer indexes to strings, starting from 1."""

    def __init__(self, path: str | os.PathLike | None = None) -> None:
        self.path = Path(path) if path is not None else default_log_index_dir()
        self.path.mkdir(parents=True, exist_ok=True)
        try:
            self._env = lmdb.open(str(self.path), max_dbs=_MAX_DBS, map_size=_MAP_SIZE)
            self._counter = self._env.open_db(b"counter")
            self._index_to_string = self._env.open_db(b"index_to_string")
            self._string_to_index = self._env.open_db(b"string_to_index")
            self._index_to_callsites = self._env.open_db(b"index_to_callsites", dupsort=True)
        except lmdb.Error as exc:
            raise CuError(f"Could not open the string index at {self.path}", exc) from exc
        self._lock = threading.Lock()
        self._closed = False

    def intern(self, s: str) -> int:
        """Return the index of the string, allocating a new one if it is unknown."""
        if self._closed:
            raise CuError("The string index is closed")
        key = s.encode("utf-8")
        with self._lock:
            try:
                with self._env.begin(write=True) as txn:
                    existing = txn.get(key, db=self._string_to_index)
                    if existing is not None:
                        return int.from_bytes(existing, "little")
                    raw = txn.get(_COUNTER_KEY, db=self._counter)
                    current = 0 if raw is None else int.from_bytes(raw, "little")
                    next_index = current + 1
                    if next_index > _U32_MAX:
                        raise CuError("The string index is full")
                    txn.put(_COUNTER_KEY, next_index.to_bytes(8, "little"), db=self._counter)
                    txn.put(next_index.to_bytes(4, "little"), key, db=self._index_to_string)
                    txn.put(key, next_index.to_bytes(8, "little"), db=self._string_to_index)
                    return next_index
            except lmdb.Error as exc:
                raise CuError(f"Failed to insert log string {s!r}", exc) from exc

    def record_callsite(self, filename: str, line_number: int) -> int:
        """Intern a "file:line" call site."""
        return self.intern(f"{filename}:{line_number}")

    def close(self) -> None:
        """Release the underlying environment."""
        if not self._closed:
            self._closed = True
            self._env.close()

    def __enter__(self) -> "StringIndex":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_interned_strings(index: str | os.PathLike) -> list[str]:
    """Load every interned string into a list addressed by its index."""
    path = Path(index)
    try:
        env = lmdb.open(
            str(path), readonly=True, lock=False, create=False, max_dbs=_MAX_DBS
        )
    except lmdb.Error as exc:
        raise CuError("Could not open the string index. Check the path.").add_cause(
            str(exc)
        ) from exc
    try:
        try:
            db = env.open_db(b"index_to_string", create=False)
        except lmdb.Error as exc:
            raise CuError("Could not open the index_to_string store", exc) from exc
        strings: list[str] = []
        with env.begin(db=db) as txn:
            for key, value in txn.cursor():
                if len(key) < 4:
                    continue
                try:
                    text = bytes(value).decode("utf-8")
                except UnicodeDecodeError:
                    continue
                position = int.from_bytes(key[:4], "little")
                if len(strings) <= position:
                    strings.extend([""] * (position + 1 - len(strings)))
                strings[position] = text
        return strings
    finally:
        env.close()