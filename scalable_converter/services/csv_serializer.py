"""Render converted records as import-ready CSV text."""

import csv
from collections.abc import Iterable, Mapping, Sequence
from io import StringIO


def serialize_rows(rows: Iterable[Mapping[str, str]], columns: Sequence[str]) -> str:
    """Write rows with a header line in the fixed column order, without quoting.

    An empty row list produces an empty string (no header), which is what
    both import tools expect for "nothing to import".
    """
    rows = list(rows)
    if not rows:
        return ""

    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONE, escapechar="\\", lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([row.get(column, "") for column in columns])
    return buffer.getvalue().rstrip("\n")


def read_rows(text: str) -> list[dict[str, str]]:
    """Parse serialized output back into column -> value dicts."""
    if not text.strip():
        return []
    reader = csv.DictReader(StringIO(text), escapechar="\\")
    return [dict(row) for row in reader]
