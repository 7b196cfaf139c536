"""Text rendering of query results."""

from __future__ import annotations

from collections.abc import Sequence

from csvdb.values import Value

MAX_COLUMN_WIDTH = 40


def format_value(value: Value, max_width: int = MAX_COLUMN_WIDTH) -> str:
    """Format a value for display, truncating long text."""
    text = value.encode().replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    if len(text) > max_width:
        return text[: max_width - 3] + "..."
    return text


def format_table(column_names: Sequence[str], rows: Sequence[Sequence[Sequence[Value]]]) -> str:
    """Render rows as aligned columns under a header.

    Each cell is a list of values; a cell with several values (an expanded
    join) takes one line per value, so a row is as tall as its tallest cell.
    """
    col_widths = [min(len(name), MAX_COLUMN_WIDTH) for name in column_names]
    rendered: list[list[list[str]]] = []
    for row in rows:
        cells = [[format_value(v) for v in cell] for cell in row]
        for i, lines in enumerate(cells):
            for line in lines:
                col_widths[i] = max(col_widths[i], len(line))
        rendered.append(cells)

    out = [
        " | ".join(name[:w].ljust(w) for name, w in zip(column_names, col_widths)).rstrip(),
        "-+-".join("-" * w for w in col_widths),
    ]
    for cells in rendered:
        height = max((len(lines) for lines in cells), default=1)
        for line_idx in range(max(height, 1)):
            parts = []
            for lines, w in zip(cells, col_widths):
                text = lines[line_idx] if line_idx < len(lines) else ""
                parts.append(text.ljust(w))
            out.append(" | ".join(parts).rstrip())
    return "\n".join(out) + "\n"
