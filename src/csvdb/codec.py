"""Text codec for cell values.

``parse`` infers a value's type from its text, ``encode_for_csv`` renders a
value for a table file and ``split_line``/``decode_line`` read one line of a
table file back.
"""

from __future__ import annotations

from collections.abc import Iterable

from csvdb.join import Join
from csvdb.temporal import Date, Time
from csvdb.values import Empty, Float, Int, String, Value

# Characters that force a string to be quoted
_QUOTE_TRIGGERS = frozenset(',"\t\r\n')

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"'}


def parse(s: str) -> Value:
    """Infer the value of a raw field.

    The order of the attempts matters: ``"1.1.23"`` is a date, not a float,
    and ``"1"`` is an integer, not a float.
    """
    if s == "":
        return Empty()
    for parser in (Join.parse, Date.parse, Time.parse, Int.parse, Float.parse):
        value = parser(s)
        if value is not None:
            return value
    return String(s)


def quote(text: str) -> str:
    """Quote ``text`` for a table file if it needs quoting."""
    text = text.replace("\\", "\\\\")
    needs_quotes = (
        any(c in _QUOTE_TRIGGERS for c in text)
        or text.startswith(" ")
        or text.endswith(" ")
    )
    if not needs_quotes:
        return text
    text = text.replace('"', '""').replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{text}"'


def encode_for_csv(value: Value) -> str:
    """Render a value as one field of a table file.

    Only strings and joins of several ids can contain characters that need
    quoting; every other variant comes out verbatim.
    """
    return quote(value.encode())


def encode_line(values: Iterable[Value]) -> str:
    """Render values as one comma separated line, without line terminator."""
    return ",".join(encode_for_csv(v) for v in values)


def split_line(line: str) -> list[str]:
    """Split one line of a table file into raw field strings.

    A backslash escapes the next character. Outside quotes a quote starts a
    quoted section and comma, CR and LF end the field. Inside quotes ``""``
    is a literal quote, a single quote ends the section, and comma, CR and
    LF are field content. An empty line has no fields.
    """
    if line == "":
        return []

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    in_escape = False
    i = 0
    while i < len(line):
        ch = line[i]
        if in_escape:
            current.append(_ESCAPES.get(ch, ch))
            in_escape = False
        elif ch == "\\":
            in_escape = True
        elif ch == '"':
            if not in_quotes:
                in_quotes = True
            elif i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = False
        elif in_quotes:
            current.append(ch)
        elif ch in ",\r\n":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return fields


def decode_line(line: str) -> list[Value]:
    """Split one line of a table file and parse every field."""
    return [parse(field) for field in split_line(line)]
