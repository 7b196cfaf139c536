"""Database: a directory of table files plus the reserved ``.ids`` table."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path

from csvdb.codec import parse
from csvdb.condition import Condition
from csvdb.display import format_table
from csvdb.errors import AlreadyExistsError, InvalidDataError, NotFoundError
from csvdb.join import Join
from csvdb.logging_config import get_logger
from csvdb.row import Row
from csvdb.table import Table
from csvdb.temporal import backup_timestamp
from csvdb.values import Int, Value

_LOGGER = get_logger(__name__)

IDS_TABLE = ".ids"
IDS_COLUMNS = ("id", "references", "content")
IDS_CONTENT_COLUMN = 2

FILE_SUFFIX = ".csv"
BACKUP_DIR = "backup"


def _create_ids_table() -> Table:
    return Table(IDS_TABLE, IDS_COLUMNS)


class Db:
    """Named collection of tables stored under ``<base_dir>/<name>/``.

    ``.ids`` is always the first table. Changes stay in memory until
    ``save`` is called.
    """

    def __init__(self, name: str, base_dir: Path | str, tables: Sequence[Table] = ()) -> None:
        """Initialize a database.

        Args:
            name: Database name, also the name of its directory.
            base_dir: Directory containing the database directory.
            tables: Tables to manage; ``.ids`` is created if missing.
        """
        self.name = name
        self.base_dir = Path(base_dir)
        self._tables: dict[str, Table] = {}
        ids_table = next((t for t in tables if t.name == IDS_TABLE), None)
        self._tables[IDS_TABLE] = ids_table if ids_table is not None else _create_ids_table()
        for table in tables:
            if table.name != IDS_TABLE:
                self._tables[table.name] = table

    @classmethod
    def create(cls, name: str, base_dir: Path | str) -> Db:
        """Create an empty database in memory. Nothing is written until ``save``."""
        return cls(name, base_dir)

    @classmethod
    def load(cls, name: str, base_dir: Path | str) -> Db:
        """Load every table file of a database directory.

        Raises:
            OSError: If the directory or a file cannot be read.
            InvalidDataError: If a row has more fields than its header.
        """
        db_path = Path(base_dir) / name
        ids_path = db_path / f"{IDS_TABLE}{FILE_SUFFIX}"
        tables = [Table.load(ids_path) if ids_path.exists() else _create_ids_table()]
        for file_path in sorted(db_path.iterdir()):
            if file_path == ids_path or file_path.suffix != FILE_SUFFIX or not file_path.is_file():
                continue
            tables.append(Table.load(file_path))
        _LOGGER.debug("db_loaded", db=name, path=str(db_path), tables=len(tables))
        return cls(name, base_dir, tables)

    # --- Layout ---

    @property
    def path(self) -> Path:
        return self.base_dir / self.name

    @property
    def backup_path(self) -> Path:
        return self.path / BACKUP_DIR

    def table_path(self, table_name: str) -> Path:
        return self.path / f"{table_name}{FILE_SUFFIX}"

    # --- Persistence ---

    def save(self) -> None:
        """Write every changed table, backing up its previous file first.

        Tables are written in order. The first failure aborts the remaining
        tables: those already written are clean, the rest stay changed.
        """
        self.path.mkdir(parents=True, exist_ok=True)
        for table in self._tables.values():
            if not table.changed:
                continue
            file_path = self.table_path(table.name)
            if file_path.exists():
                self.backup_path.mkdir(exist_ok=True)
                backup = self._backup_file(table.name)
                shutil.copyfile(file_path, backup)
                _LOGGER.debug("table_backed_up", table=table.name, backup=str(backup))
            table.save(file_path)
            _LOGGER.info("table_saved", table=table.name, rows=table.row_count, path=str(file_path))

    def _backup_file(self, table_name: str) -> Path:
        """Return an unused backup path; saves within one second get a counter."""
        stamp = backup_timestamp()
        backup = self.backup_path / f"{table_name}-{stamp}{FILE_SUFFIX}"
        n = 1
        while backup.exists():
            backup = self.backup_path / f"{table_name}-{stamp}-{n}{FILE_SUFFIX}"
            n += 1
        return backup

    # --- Tables ---

    def get_table(self, name: str) -> Table:
        """Return a table by name.

        Raises:
            NotFoundError: If there is no such table.
        """
        table = self._tables.get(name)
        if table is None:
            raise NotFoundError(f"Db {self.name}: table {name} not found")
        return table

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def table_names(self) -> list[str]:
        """Return the names of the user tables, in order."""
        return [name for name in self._tables if name != IDS_TABLE]

    def create_table(self, name: str) -> Table:
        if name in self._tables:
            raise AlreadyExistsError(f"Db {self.name}: table {name} already exists")
        table = Table(name)
        table.changed = True
        self._tables[name] = table
        return table

    def create_or_replace_table(self, name: str) -> Table:
        """Create a table, or empty an existing one in place."""
        if name == IDS_TABLE:
            raise InvalidDataError(f"Db {self.name}: table {IDS_TABLE} cannot be replaced")
        table = self._tables.get(name)
        if table is None:
            return self.create_table(name)
        table.delete_all()
        return table

    def drop_table(self, name: str) -> None:
        """Remove a table and delete its file.

        Pending changes of all tables are saved first; a failure to save is
        logged and otherwise ignored. If the file cannot be deleted, the table
        is put back and the error is raised.
        """
        if name == IDS_TABLE:
            raise InvalidDataError(f"Db {self.name}: table {IDS_TABLE} cannot be dropped")
        self.get_table(name)
        try:
            self.save()
        except OSError as error:
            _LOGGER.warning("drop_table_save_failed", table=name, error=str(error))

        previous = list(self._tables.items())
        del self._tables[name]
        try:
            self.table_path(name).unlink(missing_ok=True)
        except OSError:
            self._tables = dict(previous)
            raise
        _LOGGER.info("table_dropped", table=name)

    # --- Columns ---

    def create_column(self, table_name: str, column_name: str) -> None:
        self.get_table(table_name).create_column(column_name)

    def rename_column(self, table_name: str, old_name: str, new_name: str) -> None:
        self.get_table(table_name).rename_column(old_name, new_name)

    def insert_column_at(self, table_name: str, column_name: str, idx: int) -> None:
        self.get_table(table_name).insert_column_at(column_name, idx)

    def delete_column(self, table_name: str, column_name: str) -> None:
        self.get_table(table_name).delete_column(column_name)

    def insert_columns_at(self, table_name: str, idx: int, other_table_name: str) -> None:
        """Merge all columns of another table of this database into ``table_name``."""
        target = self.get_table(table_name)
        source = self.get_table(other_table_name)
        target.insert_columns_at(idx, Table(source.name, source.column_names, source.select()))

    def column_names(self, table_name: str) -> list[str]:
        return self.get_table(table_name).column_names

    def row_count(self, table_name: str) -> int:
        return self.get_table(table_name).row_count

    # --- Rows ---

    def insert(self, table_name: str, values: Sequence[str]) -> None:
        self.get_table(table_name).insert(values)

    def insert_data(self, table_name: str, data: Sequence[Value]) -> None:
        self.get_table(table_name).insert_data(data)

    def insert_at(self, table_name: str, idx: int, values: Sequence[str]) -> None:
        self.get_table(table_name).insert_at(idx, values)

    def insert_data_at(self, table_name: str, idx: int, data: Sequence[Value]) -> None:
        self.get_table(table_name).insert_data_at(idx, data)

    def append_rows(self, table_name: str, rows: Sequence[Row]) -> None:
        self.get_table(table_name).append_rows(rows)

    def insert_update_where(
        self, table_name: str, values: Sequence[str], conditions: Sequence[Condition]
    ) -> bool:
        return self.get_table(table_name).insert_update_where(values, conditions)

    def set_at(self, table_name: str, row_idx: int, col_idx: int, value: Value) -> None:
        self.get_table(table_name).set_at(row_idx, col_idx, value)

    def update(self, table_name: str, row_idx: int, column_name: str, raw_value: str) -> None:
        """Parse ``raw_value`` and store it in one cell."""
        table = self.get_table(table_name)
        table.set_at(row_idx, table.get_column_idx(column_name), parse(raw_value))

    def delete_row(self, table_name: str, row_idx: int) -> None:
        self.get_table(table_name).delete_row(row_idx)

    def delete_where(self, table_name: str, conditions: Sequence[Condition]) -> int:
        return self.get_table(table_name).delete_where(conditions)

    def delete_all(self, table_name: str) -> None:
        self.get_table(table_name).delete_all()

    # --- Queries ---

    def select(self, table_name: str) -> list[Row]:
        return self.get_table(table_name).select()

    def select_columns(self, table_name: str, column_names: Sequence[str]) -> list[Row]:
        return self.get_table(table_name).select_columns(column_names)

    def select_at(self, table_name: str, col_idx: int, row_idx: int) -> Value:
        return self.get_table(table_name).select_at(col_idx, row_idx)

    def select_where(self, table_name: str, conditions: Sequence[Condition]) -> list[Row]:
        return self.get_table(table_name).select_where(conditions)

    # --- Joins ---

    def store_ids(self, values: Sequence[str]) -> Join:
        """Store values in ``.ids`` and return the join referencing them.

        Ids are row positions in ``.ids`` and are never reused.

        Raises:
            InvalidDataError: If ``values`` is empty; a join needs at least one id.
        """
        if not values:
            raise InvalidDataError(f"Db {self.name}: store_ids needs at least one value")
        ids_table = self._tables[IDS_TABLE]
        ids = []
        for raw in values:
            next_id = ids_table.row_count
            ids_table.insert_data([Int(next_id), Int(1), parse(raw)])
            ids.append(next_id)
        return Join(ids)

    def from_ids(self, join: Join) -> list[Value]:
        """Return the values a join refers to, in join order.

        Raises:
            InvalidDataError: If an id is not a row of ``.ids``.
        """
        ids_table = self._tables[IDS_TABLE]
        values = []
        for id_ in join.ids:
            if not 0 <= id_ < ids_table.row_count:
                raise InvalidDataError(
                    f"Db.from_ids({join.encode()}): id {id_} out of range "
                    f"({ids_table.row_count} ids)"
                )
            values.append(ids_table.select_at(IDS_CONTENT_COLUMN, id_))
        return values

    def expand(self, value: Value) -> list[Value]:
        """Return the values behind a join, or ``[value]`` for any other value."""
        if isinstance(value, Join):
            return self.from_ids(value)
        return [value]

    def select_array(self, table_name: str) -> list[list[list[Value]]]:
        """Return all rows with every cell expanded to its list of values."""
        return [[self.expand(v) for v in row] for row in self.select(table_name)]

    def display(self, table_name: str) -> str:
        """Render a table as aligned text, joins expanded."""
        return format_table(self.column_names(table_name), self.select_array(table_name))

    def __repr__(self) -> str:
        return f"Db({self.name!r}, {str(self.base_dir)!r}, tables={self.table_names()!r})"
