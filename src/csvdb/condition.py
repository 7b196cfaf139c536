"""Predicates used to filter, upsert and delete rows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from csvdb.errors import UnsupportedOperatorError
from csvdb.values import Int, String, Value


class ConditionType(Enum):
    """Comparison operators. Only EQUAL is implemented."""

    EQUAL = "="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="

    @property
    def is_supported(self) -> bool:
        return self is ConditionType.EQUAL


@dataclass(frozen=True)
class Condition:
    """Compare the cell of ``column`` against ``value``."""

    column: str
    value: Value
    condition: ConditionType = ConditionType.EQUAL

    @classmethod
    def equal(cls, column: str, value: Value) -> Condition:
        return cls(column, value, ConditionType.EQUAL)

    @classmethod
    def equal_string(cls, column: str, text: str) -> Condition:
        return cls(column, String(text), ConditionType.EQUAL)

    @classmethod
    def equal_int(cls, column: str, n: int) -> Condition:
        return cls(column, Int(n), ConditionType.EQUAL)

    def check_supported(self) -> None:
        """Raise UnsupportedOperatorError unless the operator is implemented."""
        if not self.condition.is_supported:
            raise UnsupportedOperatorError(
                f"Condition on column {self.column}: operator "
                f"'{self.condition.value}' is not supported"
            )

    def matches(self, value: Value) -> bool:
        self.check_supported()
        return self.value == value
