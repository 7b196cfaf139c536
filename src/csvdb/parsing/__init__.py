"""Parsing module for the csvdb command language."""

from csvdb.parsing.command_lexer import CommandLexer
from csvdb.parsing.command_parser import (
    CommandParser,
    ConditionSpec,
    JoinLiteral,
    Query,
)

__all__ = [
    "CommandLexer",
    "CommandParser",
    "ConditionSpec",
    "JoinLiteral",
    "Query",
]
