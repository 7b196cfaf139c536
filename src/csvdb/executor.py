"""Executes parsed commands against a database."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from csvdb.codec import parse
from csvdb.condition import Condition, ConditionType
from csvdb.db import Db
from csvdb.errors import CsvDbError, InvalidDataError
from csvdb.parsing.command_parser import (
    AddColumnQuery,
    ConditionSpec,
    CreateTableQuery,
    DeleteQuery,
    DeleteRowQuery,
    DescribeQuery,
    DropColumnQuery,
    DropTableQuery,
    InsertQuery,
    JoinLiteral,
    Query,
    RenameColumnQuery,
    SaveQuery,
    SelectQuery,
    ShowTablesQuery,
    UpdateQuery,
    UpsertQuery,
)
from csvdb.values import Int, String, Value

Cell = list[Value]


@dataclass
class QueryResult:
    """Result of a command execution.

    Every cell is a list of values so that expanded joins can be shown.
    """

    columns: list[str]
    rows: list[list[Cell]]
    message: str | None = None


@dataclass
class ErrorResult(QueryResult):
    """A command that failed; ``message`` says why."""


@dataclass
class CreateResult(QueryResult):
    """Result of CREATE TABLE and ALTER TABLE ... ADD COLUMN."""

    table: str = ""


@dataclass
class DropResult(QueryResult):
    """Result of DROP TABLE and ALTER TABLE ... DROP COLUMN."""

    table: str = ""


@dataclass
class InsertResult(QueryResult):
    """Result of INSERT and UPSERT."""

    table: str = ""
    updated: bool = False


@dataclass
class DeleteResult(QueryResult):
    """Result of DELETE."""

    deleted_count: int = 0


@dataclass
class UpdateResult(QueryResult):
    """Result of UPDATE and ALTER TABLE ... RENAME COLUMN."""

    table: str = ""


@dataclass
class SaveResult(QueryResult):
    """Result of SAVE."""


class CommandExecutor:
    """Executes commands against a Db."""

    def __init__(self, db: Db) -> None:
        self.db = db

    def execute(self, query: Query) -> QueryResult:
        """Execute a command and return its result.

        Database errors become an ErrorResult; filesystem errors propagate.
        """
        try:
            return self._dispatch(query)
        except CsvDbError as error:
            return ErrorResult(columns=[], rows=[], message=str(error))

    def _dispatch(self, query: Query) -> QueryResult:
        if isinstance(query, ShowTablesQuery):
            return self._execute_show_tables()
        elif isinstance(query, DescribeQuery):
            return self._execute_describe(query)
        elif isinstance(query, CreateTableQuery):
            return self._execute_create_table(query)
        elif isinstance(query, DropTableQuery):
            self.db.drop_table(query.table)
            return DropResult(columns=[], rows=[], message=f"Dropped table {query.table}", table=query.table)
        elif isinstance(query, AddColumnQuery):
            return self._execute_add_column(query)
        elif isinstance(query, RenameColumnQuery):
            self.db.rename_column(query.table, query.old_name, query.new_name)
            return UpdateResult(
                columns=[], rows=[],
                message=f"Renamed column {query.old_name} to {query.new_name}",
                table=query.table,
            )
        elif isinstance(query, DropColumnQuery):
            self.db.delete_column(query.table, query.column)
            return DropResult(columns=[], rows=[], message=f"Dropped column {query.column}", table=query.table)
        elif isinstance(query, InsertQuery):
            return self._execute_insert(query)
        elif isinstance(query, UpsertQuery):
            return self._execute_upsert(query)
        elif isinstance(query, SelectQuery):
            return self._execute_select(query)
        elif isinstance(query, DeleteQuery):
            return self._execute_delete(query)
        elif isinstance(query, DeleteRowQuery):
            self.db.delete_row(query.table, query.index)
            return DeleteResult(columns=[], rows=[], message="Deleted 1 row", deleted_count=1)
        elif isinstance(query, UpdateQuery):
            self.db.update(query.table, query.index, query.column, query.value)
            return UpdateResult(columns=[], rows=[], message=f"Updated row {query.index}", table=query.table)
        elif isinstance(query, SaveQuery):
            self.db.save()
            return SaveResult(columns=[], rows=[], message=f"Saved to {self.db.path}")
        else:
            raise ValueError(f"Unknown query type: {type(query)}")

    # --- Helpers ---

    def _conditions(self, specs: Sequence[ConditionSpec]) -> list[Condition]:
        return [
            Condition(spec.column, parse(spec.value), ConditionType(spec.operator))
            for spec in specs
        ]

    def _check_value_count(self, table: str, values: Sequence[object]) -> None:
        expected = self.db.get_table(table).column_count
        if len(values) != expected:
            raise InvalidDataError(
                f"Table {table}: tried to insert {len(values)} items, but have {expected} columns"
            )

    def _raw_values(self, values: Sequence[str | JoinLiteral]) -> list[str]:
        """Store join literals in ``.ids`` and return every value as raw text."""
        raw = []
        for value in values:
            if isinstance(value, JoinLiteral):
                raw.append(self.db.store_ids(value.items).encode())
            else:
                raw.append(value)
        return raw

    # --- Commands ---

    def _execute_show_tables(self) -> QueryResult:
        rows = []
        for name in self.db.table_names():
            table = self.db.get_table(name)
            rows.append([[String(name)], [Int(table.column_count)], [Int(table.row_count)]])
        return QueryResult(columns=["table", "columns", "rows"], rows=rows)

    def _execute_describe(self, query: DescribeQuery) -> QueryResult:
        table = self.db.get_table(query.table)
        rows = [[[Int(idx)], [String(name)]] for idx, name in enumerate(table.column_names)]
        return QueryResult(columns=["index", "column"], rows=rows)

    def _execute_create_table(self, query: CreateTableQuery) -> CreateResult:
        if query.replace:
            self.db.create_or_replace_table(query.table)
        else:
            self.db.create_table(query.table)
        for column in query.columns:
            self.db.create_column(query.table, column)
        return CreateResult(columns=[], rows=[], message=f"Created table {query.table}", table=query.table)

    def _execute_add_column(self, query: AddColumnQuery) -> CreateResult:
        if query.position is None:
            self.db.create_column(query.table, query.column)
        else:
            self.db.insert_column_at(query.table, query.column, query.position)
        return CreateResult(columns=[], rows=[], message=f"Added column {query.column}", table=query.table)

    def _execute_insert(self, query: InsertQuery) -> InsertResult:
        self._check_value_count(query.table, query.values)
        if query.position is not None:
            row_count = self.db.row_count(query.table)
            if not 0 <= query.position <= row_count:
                raise InvalidDataError(
                    f"Table {query.table}: row index {query.position} out of bounds ({row_count} rows)"
                )
        raw = self._raw_values(query.values)
        if query.position is None:
            self.db.insert(query.table, raw)
        else:
            self.db.insert_at(query.table, query.position, raw)
        return InsertResult(columns=[], rows=[], message="Inserted 1 row", table=query.table)

    def _execute_upsert(self, query: UpsertQuery) -> InsertResult:
        self._check_value_count(query.table, query.values)
        conditions = self._conditions(query.where)
        table = self.db.get_table(query.table)
        for condition in conditions:
            condition.check_supported()
            table.get_column_idx(condition.column)
        raw = self._raw_values(query.values)
        updated = self.db.insert_update_where(query.table, raw, conditions)
        message = "Updated 1 row" if updated else "Inserted 1 row"
        return InsertResult(columns=[], rows=[], message=message, table=query.table, updated=updated)

    def _execute_select(self, query: SelectQuery) -> QueryResult:
        table = self.db.get_table(query.table)
        columns = query.columns or table.column_names
        column_ids = [table.get_column_idx(name) for name in columns]
        rows = table.select_where(self._conditions(query.where))
        result_rows = [[self.db.expand(row.select_at(i)) for i in column_ids] for row in rows]
        return QueryResult(columns=columns, rows=result_rows)

    def _execute_delete(self, query: DeleteQuery) -> DeleteResult:
        count = self.db.delete_where(query.table, self._conditions(query.where))
        return DeleteResult(
            columns=[], rows=[],
            message=f"Deleted {count} row{'s' if count != 1 else ''}",
            deleted_count=count,
        )
