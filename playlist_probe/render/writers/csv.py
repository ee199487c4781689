"""
Hand-written CSV: csv.writer quotes either every field (QUOTE_ALL) or only the
ones that need it (QUOTE_MINIMAL), never a fixed set of columns.
"""
from __future__ import annotations

from ..style import RenderStyle


# Columns that are always quoted: title (index 0) and link (index 4).
_ALWAYS_QUOTED = {0, 4}


def _field(value: object, *, force: bool, delimiter: str) -> str:
    s = "" if value is None else str(value)
    if force or any(ch in s for ch in (delimiter, '"', "\n", "\r")):
        return '"' + s.replace('"', '""') + '"'
    return s


def encode_csv(rows: list[list], style: RenderStyle) -> bytes:
    """Delimited text with the spreadsheet's columns; the floor of the tabular tier."""
    delimiter = style.tabular.csv_delimiter
    lines = [delimiter.join(_field(c, force=False, delimiter=delimiter) for c in style.tabular.columns)]
    for row in rows:
        lines.append(
            delimiter.join(
                _field(value, force=i in _ALWAYS_QUOTED, delimiter=delimiter) for i, value in enumerate(row)
            )
        )
    return ("\n".join(lines) + "\n").encode("utf-8")
