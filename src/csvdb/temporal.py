"""Date and time cell values."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass

from csvdb.values import Value

_DIGITS = re.compile(r"[0-9]+")

# Accepted ranges; month and day 0 are allowed for partially known dates
MIN_YEAR = 1970
MAX_YEAR = 2999


def _number(part: str) -> int | None:
    return int(part) if _DIGITS.fullmatch(part) else None


@dataclass(frozen=True)
class Date(Value):
    """Calendar date in one of the ISO, US or EU notations."""

    year: int
    month: int
    day: int

    @classmethod
    def parse(cls, s: str) -> Date | None:
        """Parse ISO ``YYYY-MM-DD``, US ``MM/DD/YYYY`` or EU ``D.M.[YY[YY]]``.

        Returns None if the text is in none of these notations or the date
        is out of range.
        """
        for parser in (cls.parse_iso, cls.parse_us, cls.parse_eu):
            date = parser(s)
            if date is not None:
                return date
        return None

    @classmethod
    def parse_iso(cls, s: str) -> Date | None:
        parts = s.split("-")
        if len(parts) != 3:
            return None
        year, month, day = (_number(p) for p in parts)
        return cls._validated(year, month, day)

    @classmethod
    def parse_us(cls, s: str) -> Date | None:
        parts = s.split("/")
        if len(parts) != 3:
            return None
        month, day, year = (_number(p) for p in parts)
        return cls._validated(year, month, day)

    @classmethod
    def parse_eu(cls, s: str) -> Date | None:
        """Parse ``D.M.YYYY``, ``D.M.YY`` or ``D.M.`` (current year).

        Two digit years below 40 are in the 2000s, the rest in the 1900s.
        """
        parts = s.split(".")
        if len(parts) != 3:
            return None
        day, month = _number(parts[0]), _number(parts[1])
        if parts[2] == "":
            year: int | None = today().year
        else:
            year = _number(parts[2])
        if year is not None:
            if year < 40:
                year += 2000
            elif year < 100:
                year += 1900
        return cls._validated(year, month, day)

    @classmethod
    def _validated(cls, year: int | None, month: int | None, day: int | None) -> Date | None:
        if year is None or month is None or day is None:
            return None
        if MIN_YEAR <= year <= MAX_YEAR and 0 <= month <= 12 and 0 <= day <= 31:
            return cls(year, month, day)
        return None

    def encode(self) -> str:
        return f"{self.year:04}-{self.month:02}-{self.day:02}"


@dataclass(frozen=True)
class Time(Value):
    """Time of day, stored as seconds since midnight."""

    seconds: int

    @classmethod
    def of(cls, hours: int, minutes: int, seconds: int) -> Time:
        """Build a time from its clock fields."""
        return cls(hours * 3600 + minutes * 60 + seconds)

    @classmethod
    def parse(cls, s: str) -> Time | None:
        """Parse ``HH:MM:SS``, or return None."""
        parts = s.split(":")
        if len(parts) != 3:
            return None
        hours, minutes, seconds = (_number(p) for p in parts)
        if hours is None or minutes is None or seconds is None:
            return None
        if hours < 24 and minutes < 60 and seconds < 60:
            return cls.of(hours, minutes, seconds)
        return None

    @classmethod
    def now(cls) -> Time:
        """Return the current local time of day."""
        current = datetime.datetime.now()
        return cls.of(current.hour, current.minute, current.second)

    def encode(self) -> str:
        hours, rest = divmod(self.seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02}:{minutes:02}:{seconds:02}"


def today() -> Date:
    """Return the current local date."""
    current = datetime.date.today()
    return Date(current.year, current.month, current.day)


def backup_timestamp(moment: datetime.datetime | None = None) -> str:
    """Return a local timestamp usable in file names, e.g. ``2024-05-01_13.07.42``."""
    if moment is None:
        moment = datetime.datetime.now()
    return moment.strftime("%Y-%m-%d_%H.%M.%S")
