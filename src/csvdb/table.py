"""Table storage for typed rows."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from csvdb.codec import decode_line, encode_line, parse, quote, split_line
from csvdb.condition import Condition
from csvdb.errors import AlreadyExistsError, ColumnNotFoundError, InvalidDataError
from csvdb.row import Row
from csvdb.values import Empty, Value


class Table:
    """Named, ordered columns and rows of values.

    Every row always has exactly one cell per column. Any mutation marks the
    table as changed until it is saved.
    """

    def __init__(self, name: str, column_names: Sequence[str] = (), rows: Sequence[Row] = ()) -> None:
        self.name = name
        self._column_names: list[str] = list(column_names)
        self._rows: list[Row] = list(rows)
        self.changed = False

    @classmethod
    def load(cls, file_path: Path) -> Table:
        """Read a table file.

        The first line holds the column names. Rows with fewer fields than
        columns are padded with Empty; rows with more fields are an error.
        """
        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as error:
            raise InvalidDataError(f"Table.load({file_path}): not valid UTF-8: {error}") from error
        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()

        column_names: list[str] = []
        rows: list[Row] = []
        for idx, line in enumerate(lines):
            if idx == 0:
                column_names = split_line(line)
                continue
            data = decode_line(line)
            if len(data) > len(column_names):
                raise InvalidDataError(
                    f"Table.load({file_path}): table has {len(column_names)} columns, "
                    f"but row nr. {idx} has {len(data)} fields"
                )
            data.extend(Empty() for _ in range(len(column_names) - len(data)))
            rows.append(Row(data))

        name = file_path.name
        if name.endswith(".csv"):
            name = name[: -len(".csv")]
        return cls(name, column_names, rows)

    def save(self, file_path: Path) -> None:
        """Write the header and all rows, then clear the changed flag."""
        lines = [",".join(quote(name) for name in self._column_names)]
        lines.extend(encode_line(row) for row in self._rows)
        with open(file_path, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
        self.changed = False

    # --- Accessors ---

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def column_count(self) -> int:
        return len(self._column_names)

    @property
    def column_names(self) -> list[str]:
        """Return a copy of the column names."""
        return list(self._column_names)

    def is_changed(self) -> bool:
        return self.changed

    def find_column(self, name: str) -> int | None:
        """Return the index of a column, or None."""
        try:
            return self._column_names.index(name)
        except ValueError:
            return None

    def get_column_idx(self, name: str) -> int:
        """Return the index of a column.

        Raises:
            ColumnNotFoundError: If the table has no such column.
        """
        idx = self.find_column(name)
        if idx is None:
            raise ColumnNotFoundError(f"Table {self.name}: column {name} not found")
        return idx

    def get_column_name_at(self, idx: int) -> str:
        return self._column_names[idx]

    def _check_arity(self, operation: str, count: int) -> None:
        if count != len(self._column_names):
            raise InvalidDataError(
                f"Table.{operation}({self.name}): tried to insert {count} items, "
                f"but have {len(self._column_names)} columns"
            )

    def _check_row_index(self, operation: str, idx: int, allow_end: bool = False) -> None:
        limit = len(self._rows) + 1 if allow_end else len(self._rows)
        if not 0 <= idx < limit:
            raise InvalidDataError(
                f"Table.{operation}({self.name}): row index {idx} out of bounds "
                f"({len(self._rows)} rows)"
            )

    # --- Columns ---

    def create_column(self, name: str) -> None:
        """Append a column; existing rows get an Empty cell."""
        if self.find_column(name) is not None:
            raise AlreadyExistsError(f"Table {self.name}: column {name} already exists")
        self._column_names.append(name)
        for row in self._rows:
            row.add(Empty())
        self.changed = True

    def rename_column(self, old_name: str, new_name: str) -> None:
        if self.find_column(new_name) is not None:
            raise AlreadyExistsError(f"Table {self.name}: column {new_name} already exists")
        idx = self.get_column_idx(old_name)
        self._column_names[idx] = new_name
        self.changed = True

    def insert_column_at(self, name: str, idx: int) -> None:
        """Insert a column at ``idx``; existing rows get an Empty cell there."""
        if self.find_column(name) is not None:
            raise AlreadyExistsError(f"Table {self.name}: column {name} already exists")
        if not 0 <= idx <= len(self._column_names):
            raise InvalidDataError(
                f"Table.insert_column_at({self.name}): column index {idx} out of bounds "
                f"({len(self._column_names)} columns)"
            )
        self._column_names.insert(idx, name)
        for row in self._rows:
            row.insert_at(idx, Empty())
        self.changed = True

    def delete_column(self, name: str) -> None:
        idx = self.get_column_idx(name)
        for row in self._rows:
            row.delete(idx)
        del self._column_names[idx]
        self.changed = True

    def insert_columns_at(self, idx: int, other: Table) -> None:
        """Merge all columns of ``other`` into this table, starting at ``idx``.

        Both tables must have the same number of rows and no column name in
        common. Row ``i`` of ``other`` is spliced into row ``i`` of this table.
        """
        if self.row_count != other.row_count:
            raise InvalidDataError(
                f"Table.insert_columns_at({self.name}, {other.name}): tried to insert "
                f"{other.row_count} rows, but have {self.row_count} rows"
            )
        for name in other._column_names:
            if name in self._column_names:
                raise InvalidDataError(
                    f"Table.insert_columns_at({self.name}, {other.name}): "
                    f"column {name} already exists"
                )
        if not 0 <= idx <= len(self._column_names):
            raise InvalidDataError(
                f"Table.insert_columns_at({self.name}): column index {idx} out of bounds "
                f"({len(self._column_names)} columns)"
            )
        self._column_names[idx:idx] = other._column_names
        for row, other_row in zip(self._rows, other._rows):
            row.insert_columns_at(idx, other_row)
        self.changed = True

    # --- Rows ---

    def insert(self, values: Sequence[str]) -> None:
        """Parse raw strings and append them as a row."""
        self._check_arity("insert", len(values))
        self._rows.append(Row(parse(v) for v in values))
        self.changed = True

    def insert_data(self, data: Sequence[Value]) -> None:
        """Append already typed values as a row."""
        self._check_arity("insert_data", len(data))
        self._rows.append(Row(data))
        self.changed = True

    def insert_at(self, idx: int, values: Sequence[str]) -> None:
        """Parse raw strings and insert them as a row before ``idx``."""
        self._check_arity("insert_at", len(values))
        self._check_row_index("insert_at", idx, allow_end=True)
        self._rows.insert(idx, Row(parse(v) for v in values))
        self.changed = True

    def insert_data_at(self, idx: int, data: Sequence[Value]) -> None:
        self._check_arity("insert_data_at", len(data))
        self._check_row_index("insert_data_at", idx, allow_end=True)
        self._rows.insert(idx, Row(data))
        self.changed = True

    def insert_empty_row_at(self, idx: int) -> None:
        self._check_row_index("insert_empty_row_at", idx, allow_end=True)
        self._rows.insert(idx, Row(Empty() for _ in self._column_names))
        self.changed = True

    def insert_rows_at(self, idx: int, rows: Sequence[Row]) -> None:
        """Splice rows in before ``idx``, keeping their order."""
        self._check_row_index("insert_rows_at", idx, allow_end=True)
        for row in rows:
            self._check_arity("insert_rows_at", len(row))
        self._rows[idx:idx] = [row.copy() for row in rows]
        self.changed = True

    insert_into_at = insert_rows_at

    def append_rows(self, rows: Sequence[Row]) -> None:
        for row in rows:
            self._check_arity("append_rows", len(row))
        self._rows.extend(row.copy() for row in rows)
        self.changed = True

    def delete_row(self, idx: int) -> None:
        self._check_row_index("delete_row", idx)
        del self._rows[idx]
        self.changed = True

    def delete_all(self) -> None:
        """Remove all columns and rows."""
        self._column_names.clear()
        self._rows.clear()
        self.changed = True

    def set_at(self, row_idx: int, col_idx: int, value: Value) -> None:
        """Overwrite a single cell."""
        self._check_row_index("set_at", row_idx)
        if not 0 <= col_idx < len(self._column_names):
            raise InvalidDataError(
                f"Table.set_at({self.name}): column index {col_idx} out of bounds "
                f"({len(self._column_names)} columns)"
            )
        self._rows[row_idx].set_at(col_idx, value)
        self.changed = True

    # --- Queries ---

    def select(self) -> list[Row]:
        """Return copies of all rows."""
        return [row.copy() for row in self._rows]

    def select_columns(self, column_names: Sequence[str]) -> list[Row]:
        """Return copies of all rows, projected onto ``column_names``."""
        column_ids = [self.get_column_idx(name) for name in column_names]
        return [Row(row.select_at(i) for i in column_ids) for row in self._rows]

    def select_at(self, col_idx: int, row_idx: int) -> Value:
        """Return a single cell."""
        if not 0 <= row_idx < len(self._rows):
            raise InvalidDataError(
                f"Table.select_at({col_idx}, {row_idx}): row index out of bounds "
                f"({len(self._rows)} rows)"
            )
        if not 0 <= col_idx < len(self._column_names):
            raise InvalidDataError(
                f"Table.select_at({col_idx}, {row_idx}): column index out of bounds "
                f"({len(self._column_names)} columns)"
            )
        return self._rows[row_idx].select_at(col_idx)

    def _resolve_conditions(self, conditions: Sequence[Condition]) -> list[tuple[int, Condition]]:
        resolved = []
        for condition in conditions:
            condition.check_supported()
            resolved.append((self.get_column_idx(condition.column), condition))
        return resolved

    @staticmethod
    def _matches(row: Row, resolved: list[tuple[int, Condition]]) -> bool:
        return all(condition.matches(row.select_at(idx)) for idx, condition in resolved)

    def select_where(self, conditions: Sequence[Condition]) -> list[Row]:
        """Return copies of the rows matching all conditions, in table order."""
        resolved = self._resolve_conditions(conditions)
        return [row.copy() for row in self._rows if self._matches(row, resolved)]

    def delete_where(self, conditions: Sequence[Condition]) -> int:
        """Remove every row matching all conditions and return how many went."""
        resolved = self._resolve_conditions(conditions)
        kept = [row for row in self._rows if not self._matches(row, resolved)]
        deleted = len(self._rows) - len(kept)
        if deleted:
            self._rows = kept
            self.changed = True
        return deleted

    def insert_update_where(self, values: Sequence[str], conditions: Sequence[Condition]) -> bool:
        """Overwrite the first row matching all conditions, or append a new row.

        Returns:
            True if an existing row was updated, False if a row was appended.
        """
        self._check_arity("insert_update_where", len(values))
        resolved = self._resolve_conditions(conditions)
        data = [parse(v) for v in values]
        for row in self._rows:
            if self._matches(row, resolved):
                for idx, value in enumerate(data):
                    row.set_at(idx, value)
                self.changed = True
                return True
        self._rows.append(Row(data))
        self.changed = True
        return False

    def __repr__(self) -> str:
        return f"Table({self.name!r}, columns={self._column_names!r}, rows={len(self._rows)})"
