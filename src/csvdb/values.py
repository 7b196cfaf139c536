"""Cell values stored in csvdb tables.

A cell holds exactly one ``Value``. The concrete subclass is the variant and
its fields are the payload, so dataclass equality compares both: ``Int(4)``
never equals ``String("4")`` and ``Int(1)`` never equals ``Float(1.0)``.
Date, Time and Join variants live in ``csvdb.temporal`` and ``csvdb.join``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from csvdb.errors import InvalidDataError

# Signed 64-bit range of Int cells
INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.IGNORECASE | re.ASCII,
)


@dataclass(frozen=True)
class Value:
    """Base class for all cell values."""

    def encode(self) -> str:
        """Return the canonical text of this value, before CSV quoting."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class Empty(Value):
    """A cell without content."""

    def encode(self) -> str:
        return ""


@dataclass(frozen=True)
class String(Value):
    """Free text."""

    text: str

    def encode(self) -> str:
        return self.text


@dataclass(frozen=True)
class Int(Value):
    """Signed 64-bit integer."""

    value: int

    def __post_init__(self) -> None:
        if not INT_MIN <= self.value <= INT_MAX:
            raise InvalidDataError(f"Integer {self.value} does not fit in 64 bits")

    @classmethod
    def parse(cls, s: str) -> Int | None:
        """Parse decimal integer text, or return None."""
        if not _INT_PATTERN.fullmatch(s):
            return None
        n = int(s)
        if not INT_MIN <= n <= INT_MAX:
            return None
        return cls(n)

    def encode(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Float(Value):
    """Double precision floating point number."""

    value: float

    @classmethod
    def parse(cls, s: str) -> Float | None:
        """Parse decimal floating point text, or return None."""
        if not _FLOAT_PATTERN.fullmatch(s):
            return None
        return cls(float(s))

    def encode(self) -> str:
        if math.isnan(self.value):
            return "NaN"
        return repr(self.value)
