"""Rows of cell values."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from csvdb.errors import InvalidDataError
from csvdb.values import Value


class Row:
    """Fixed-arity, ordered sequence of values.

    The owning table keeps the arity equal to its column count. Values are
    immutable, so a shallow copy of the cell list is a fully detached row.
    """

    def __init__(self, values: Iterable[Value] = ()) -> None:
        self._values: list[Value] = list(values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Row):
            return self._values == other._values
        if isinstance(other, list):
            return self._values == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Row({self._values!r})"

    @property
    def values(self) -> list[Value]:
        """Return a copy of the cells."""
        return list(self._values)

    def copy(self) -> Row:
        return Row(self._values)

    def add(self, value: Value) -> None:
        self._values.append(value)

    def select_at(self, idx: int) -> Value:
        if not 0 <= idx < len(self._values):
            raise InvalidDataError(
                f"Row.select_at({idx}): index out of range ({len(self._values)} cells)"
            )
        return self._values[idx]

    def set_at(self, idx: int, value: Value) -> None:
        if not 0 <= idx < len(self._values):
            raise InvalidDataError(
                f"Row.set_at({idx}): index out of range ({len(self._values)} cells)"
            )
        self._values[idx] = value

    def insert_at(self, idx: int, value: Value) -> None:
        """Insert a cell, shifting later cells right."""
        self._values.insert(idx, value)

    def delete(self, idx: int) -> None:
        """Remove a cell, shifting later cells left."""
        del self._values[idx]

    def insert_columns_at(self, idx: int, other: Row) -> None:
        """Splice all cells of ``other`` in as one block starting at ``idx``."""
        self._values[idx:idx] = other._values
