"""Exception hierarchy for csvdb.

Each failure class maps to one kind of caller mistake so that callers can
catch exactly what they are prepared to handle. Filesystem failures are not
wrapped: they surface as the platform's ``OSError`` subclasses.
"""

from __future__ import annotations


class CsvDbError(Exception):
    """Base exception for all csvdb failures."""


class NotFoundError(CsvDbError, LookupError):
    """Raised when a table or column name cannot be resolved."""


class AlreadyExistsError(CsvDbError):
    """Raised when creating a table or column whose name is taken."""


class InvalidDataError(CsvDbError, ValueError):
    """Raised for arity mismatches, bad literals and out-of-range indices."""


class UnsupportedOperatorError(InvalidDataError):
    """Raised when a declared but unimplemented condition operator is used."""


class ConfigError(CsvDbError):
    """Raised for invalid runtime configuration."""


class ColumnNotFoundError(NotFoundError, InvalidDataError):
    """Raised when a column name cannot be resolved.

    Projections and scans report unknown columns as invalid data, so this
    error is both a NotFoundError and an InvalidDataError.
    """
