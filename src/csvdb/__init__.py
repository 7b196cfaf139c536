"""csvdb - An embedded database of typed rows stored as CSV files."""

from csvdb.codec import decode_line, encode_for_csv, encode_line, parse, split_line
from csvdb.condition import Condition, ConditionType
from csvdb.db import Db
from csvdb.errors import (
    AlreadyExistsError,
    ColumnNotFoundError,
    CsvDbError,
    InvalidDataError,
    NotFoundError,
    UnsupportedOperatorError,
)
from csvdb.join import Join
from csvdb.row import Row
from csvdb.table import Table
from csvdb.temporal import Date, Time
from csvdb.values import Empty, Float, Int, String, Value

__all__ = [
    # Main API
    "Db",
    "Table",
    "Row",
    "Condition",
    "ConditionType",
    # Values
    "Value",
    "Empty",
    "String",
    "Int",
    "Float",
    "Date",
    "Time",
    "Join",
    # Codec
    "parse",
    "encode_for_csv",
    "encode_line",
    "split_line",
    "decode_line",
    # Errors
    "CsvDbError",
    "NotFoundError",
    "ColumnNotFoundError",
    "AlreadyExistsError",
    "InvalidDataError",
    "UnsupportedOperatorError",
]

__version__ = "0.1.0"
