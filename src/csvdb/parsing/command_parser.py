"""Parser for the csvdb command language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

import ply.yacc as yacc

from csvdb.parsing.command_lexer import CommandLexer


@dataclass
class JoinLiteral:
    """A ``{a, b, ...}`` value: items stored out of line as a join."""

    items: list[str]


@dataclass
class ConditionSpec:
    """A WHERE condition before its literal is typed."""

    column: str
    operator: str  # =, !=, <, <=, >, >=
    value: str


@dataclass
class ShowTablesQuery:
    """A SHOW TABLES query."""

    pass


@dataclass
class DescribeQuery:
    """A DESCRIBE query."""

    table: str


@dataclass
class CreateTableQuery:
    """A CREATE [OR REPLACE] TABLE query."""

    table: str
    columns: list[str] = field(default_factory=list)
    replace: bool = False


@dataclass
class DropTableQuery:
    table: str


@dataclass
class AddColumnQuery:
    """ALTER TABLE ... ADD COLUMN, appended unless a position is given."""

    table: str
    column: str
    position: int | None = None


@dataclass
class RenameColumnQuery:
    table: str
    old_name: str
    new_name: str


@dataclass
class DropColumnQuery:
    table: str
    column: str


@dataclass
class InsertQuery:
    """An INSERT query, appended unless a position is given."""

    table: str
    values: list[str | JoinLiteral]
    position: int | None = None


@dataclass
class UpsertQuery:
    """An UPSERT query: update the first matching row or insert."""

    table: str
    values: list[str | JoinLiteral]
    where: list[ConditionSpec]


@dataclass
class SelectQuery:
    """A SELECT query. An empty column list selects all columns."""

    table: str
    columns: list[str] = field(default_factory=list)
    where: list[ConditionSpec] = field(default_factory=list)


@dataclass
class DeleteQuery:
    """A DELETE FROM query. Without conditions every row is deleted."""

    table: str
    where: list[ConditionSpec] = field(default_factory=list)


@dataclass
class DeleteRowQuery:
    table: str
    index: int


@dataclass
class UpdateQuery:
    """An UPDATE of a single cell."""

    table: str
    column: str
    value: str
    index: int


@dataclass
class SaveQuery:
    pass


Query = Union[
    ShowTablesQuery,
    DescribeQuery,
    CreateTableQuery,
    DropTableQuery,
    AddColumnQuery,
    RenameColumnQuery,
    DropColumnQuery,
    InsertQuery,
    UpsertQuery,
    SelectQuery,
    DeleteQuery,
    DeleteRowQuery,
    UpdateQuery,
    SaveQuery,
]


def _index(p: yacc.YaccProduction, n: int) -> int:
    text = p[n]
    try:
        return int(text)
    except ValueError:
        raise SyntaxError(f"Expected a row or column index, got '{text}'") from None


class CommandParser:
    """Parser for csvdb commands."""

    tokens = CommandLexer.tokens

    def __init__(self) -> None:
        self.lexer = CommandLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : command SEMICOLON
                     | command"""
        p[0] = p[1]

    def p_command_show_tables(self, p: yacc.YaccProduction) -> None:
        """command : SHOW TABLES"""
        p[0] = ShowTablesQuery()

    def p_command_describe(self, p: yacc.YaccProduction) -> None:
        """command : DESCRIBE name"""
        p[0] = DescribeQuery(table=p[2])

    def p_command_create_table(self, p: yacc.YaccProduction) -> None:
        """command : CREATE TABLE name column_spec"""
        p[0] = CreateTableQuery(table=p[3], columns=p[4])

    def p_command_create_or_replace_table(self, p: yacc.YaccProduction) -> None:
        """command : CREATE OR REPLACE TABLE name column_spec"""
        p[0] = CreateTableQuery(table=p[5], columns=p[6], replace=True)

    def p_command_drop_table(self, p: yacc.YaccProduction) -> None:
        """command : DROP TABLE name"""
        p[0] = DropTableQuery(table=p[3])

    def p_command_add_column(self, p: yacc.YaccProduction) -> None:
        """command : ALTER TABLE name ADD COLUMN name
                   | ALTER TABLE name ADD COLUMN name AT NUMBER"""
        position = _index(p, 8) if len(p) == 9 else None
        p[0] = AddColumnQuery(table=p[3], column=p[6], position=position)

    def p_command_rename_column(self, p: yacc.YaccProduction) -> None:
        """command : ALTER TABLE name RENAME COLUMN name TO name"""
        p[0] = RenameColumnQuery(table=p[3], old_name=p[6], new_name=p[8])

    def p_command_drop_column(self, p: yacc.YaccProduction) -> None:
        """command : ALTER TABLE name DROP COLUMN name"""
        p[0] = DropColumnQuery(table=p[3], column=p[6])

    def p_command_insert(self, p: yacc.YaccProduction) -> None:
        """command : INSERT INTO name VALUES value_list"""
        p[0] = InsertQuery(table=p[3], values=p[5])

    def p_command_insert_at(self, p: yacc.YaccProduction) -> None:
        """command : INSERT INTO name AT NUMBER VALUES value_list"""
        p[0] = InsertQuery(table=p[3], values=p[7], position=_index(p, 5))

    def p_command_upsert(self, p: yacc.YaccProduction) -> None:
        """command : UPSERT INTO name VALUES value_list WHERE condition_list"""
        p[0] = UpsertQuery(table=p[3], values=p[5], where=p[7])

    def p_command_select(self, p: yacc.YaccProduction) -> None:
        """command : SELECT select_columns FROM name where_opt"""
        p[0] = SelectQuery(table=p[4], columns=p[2], where=p[5])

    def p_command_delete(self, p: yacc.YaccProduction) -> None:
        """command : DELETE FROM name where_opt"""
        p[0] = DeleteQuery(table=p[3], where=p[4])

    def p_command_delete_row(self, p: yacc.YaccProduction) -> None:
        """command : DELETE ROW NUMBER FROM name"""
        p[0] = DeleteRowQuery(table=p[5], index=_index(p, 3))

    def p_command_update(self, p: yacc.YaccProduction) -> None:
        """command : UPDATE name SET name EQ literal AT NUMBER"""
        p[0] = UpdateQuery(table=p[2], column=p[4], value=p[6], index=_index(p, 8))

    def p_command_save(self, p: yacc.YaccProduction) -> None:
        """command : SAVE"""
        p[0] = SaveQuery()

    def p_column_spec(self, p: yacc.YaccProduction) -> None:
        """column_spec : LPAREN name_list RPAREN
                       | empty"""
        p[0] = p[2] if len(p) == 4 else []

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : name"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA name"""
        p[0] = p[1] + [p[3]]

    def p_name(self, p: yacc.YaccProduction) -> None:
        """name : IDENTIFIER
                | STRING"""
        p[0] = p[1]

    def p_select_columns_star(self, p: yacc.YaccProduction) -> None:
        """select_columns : STAR"""
        p[0] = []

    def p_select_columns_names(self, p: yacc.YaccProduction) -> None:
        """select_columns : name_list"""
        p[0] = p[1]

    def p_where_opt(self, p: yacc.YaccProduction) -> None:
        """where_opt : WHERE condition_list
                     | empty"""
        p[0] = p[2] if len(p) == 3 else []

    def p_condition_list_single(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition"""
        p[0] = [p[1]]

    def p_condition_list_multiple(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition_list AND condition"""
        p[0] = p[1] + [p[3]]

    def p_condition(self, p: yacc.YaccProduction) -> None:
        """condition : name EQ literal
                     | name NEQ literal
                     | name LT literal
                     | name LTE literal
                     | name GT literal
                     | name GTE literal"""
        p[0] = ConditionSpec(column=p[1], operator=p[2], value=p[3])

    def p_value_list_empty(self, p: yacc.YaccProduction) -> None:
        """value_list : LPAREN RPAREN"""
        p[0] = []

    def p_value_list(self, p: yacc.YaccProduction) -> None:
        """value_list : LPAREN values RPAREN"""
        p[0] = p[2]

    def p_values_single(self, p: yacc.YaccProduction) -> None:
        """values : value"""
        p[0] = [p[1]]

    def p_values_multiple(self, p: yacc.YaccProduction) -> None:
        """values : values COMMA value"""
        p[0] = p[1] + [p[3]]

    def p_value_literal(self, p: yacc.YaccProduction) -> None:
        """value : literal"""
        p[0] = p[1]

    def p_value_join(self, p: yacc.YaccProduction) -> None:
        """value : LBRACE literal_list RBRACE"""
        p[0] = JoinLiteral(items=p[2])

    def p_literal_list_single(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal"""
        p[0] = [p[1]]

    def p_literal_list_multiple(self, p: yacc.YaccProduction) -> None:
        """literal_list : literal_list COMMA literal"""
        p[0] = p[1] + [p[3]]

    def p_literal(self, p: yacc.YaccProduction) -> None:
        """literal : STRING
                   | NUMBER
                   | IDENTIFIER"""
        p[0] = p[1]

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        p[0] = None

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Query:
        """Parse a command string."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)
