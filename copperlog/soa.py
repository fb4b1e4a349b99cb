"""Fixed-capacity structure of arrays built from a dataclass prototype."""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, Callable, Iterator


class Soa:
    """Stores dataclass instances column by column, up to a fixed capacity."""

    def __init__(self, default: Any, capacity: int) -> None:
        if not dataclasses.is_dataclass(default) or isinstance(default, type):
            raise TypeError("Soa needs a dataclass instance as its default")
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._type = type(default)
        self._names = [f.name for f in dataclasses.fields(default)]
        self._columns: dict[str, list[Any]] = {
            name: [copy.deepcopy(getattr(default, name)) for _ in range(capacity)]
            for name in self._names
        }
        self.capacity = capacity
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._len:
            raise IndexError("Index out of bounds")

    def _store(self, index: int, value: Any) -> None:
        for name in self._names:
            self._columns[name][index] = copy.deepcopy(getattr(value, name))

    def push(self, value: Any) -> None:
        """Append an element; OverflowError when the capacity is reached."""
        if self._len >= self.capacity:
            raise OverflowError("Capacity exceeded")
        self._store(self._len, value)
        self._len += 1

    def pop(self) -> Any:
        """Remove and return the last element, or None when empty."""
        if self._len == 0:
            return None
        self._len -= 1
        return self._build(self._len)

    def set(self, index: int, value: Any) -> None:
        """Replace the element at index."""
        self._check_index(index)
        self._store(index, value)

    def get(self, index: int) -> Any:
        """Return a copy of the element at index."""
        self._check_index(index)
        return self._build(index)

    def _build(self, index: int) -> Any:
        return self._type(
            **{name: copy.deepcopy(self._columns[name][index]) for name in self._names}
        )

    def apply(self, func: Callable[..., Any]) -> None:
        """Replace each stored element's fields by func(*fields)."""
        for index in range(self._len):
            result = func(*(self._columns[name][index] for name in self._names))
            if len(self._names) == 1:
                result = (result,)
            values = tuple(result)
            if len(values) != len(self._names):
                raise ValueError(
                    f"apply expected {len(self._names)} values, got {len(values)}"
                )
            for name, value in zip(self._names, values):
                self._columns[name][index] = value

    def __iter__(self) -> Iterator[Any]:
        return (self._build(index) for index in range(self._len))

    def _column(self, name: str) -> list[Any]:
        try:
            return self._columns[name]
        except KeyError:
            raise KeyError(f"No such field: {name}") from None

    def column(self, name: str) -> list[Any]:
        """The live column of a field, over the whole capacity."""
        return self._column(name)

    def column_range(self, name: str, start: int, stop: int) -> list[Any]:
        """A copy of part of a field's column."""
        column = self._column(name)
        if not 0 <= start <= stop <= len(column):
            raise IndexError(f"Range {start}..{stop} out of bounds")
        return column[start:stop]

    def __repr__(self) -> str:
        return (
            f"Soa[{self._type.__name__}](len={self._len}, capacity={self.capacity}, "
            f"columns={self._columns!r})"
        )