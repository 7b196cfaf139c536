"""Join values: out-of-line multi-valued cells.

A join cell holds the row positions of its items in the database's reserved
``.ids`` table. It indexes those rows but does not own them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from csvdb.errors import InvalidDataError
from csvdb.values import INT_MAX, INT_MIN, Value

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Join(Value):
    """Ordered list of ``.ids`` row positions."""

    ids: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", tuple(self.ids))
        if not self.ids:
            raise InvalidDataError("Join: at least one id is required")

    @classmethod
    def parse(cls, s: str) -> Join | None:
        """Parse ``[id,id,...]``, or return None.

        At least one id is required and blanks are not allowed.
        """
        if len(s) < 2 or s[0] != "[" or s[-1] != "]":
            return None
        ids = []
        for part in s[1:-1].split(","):
            if not _ID_PATTERN.fullmatch(part):
                return None
            n = int(part)
            if not INT_MIN <= n <= INT_MAX:
                return None
            ids.append(n)
        return cls(ids)

    def encode(self) -> str:
        return "[" + ",".join(str(n) for n in self.ids) + "]"
