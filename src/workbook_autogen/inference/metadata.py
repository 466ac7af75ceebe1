from __future__ import annotations

from collections.abc import Sequence

from ..models.blueprint import ConstraintKind
from ..models.records import Record

"""Metadata record block parsing.

Some rows of the uploaded sheet describe the other columns instead of holding
data. They are recognized by a sentinel in the marker column ("Field Name"):

    Field Name   | Name | Email | Color
    Is Required? | x    | x     |
    Is Unique?   |      | x     |
    Enumerations |      |       | Red, Green, Blue

An ``x`` marks the constraint for that column; the Enumerations row holds a
comma separated option list.
"""

__all__ = [
    "DEFAULT_MARKER_COLUMN",
    "ENUMERATIONS",
    "IS_REQUIRED",
    "IS_UNIQUE",
    "METADATA_SENTINELS",
    "extract_constraints",
    "extract_enum_options",
    "is_metadata_record",
]

DEFAULT_MARKER_COLUMN = "Field Name"
IS_REQUIRED = "Is Required?"
IS_UNIQUE = "Is Unique?"
ENUMERATIONS = "Enumerations"
METADATA_SENTINELS = frozenset({IS_REQUIRED, IS_UNIQUE, ENUMERATIONS})

CONSTRAINT_MARKER = "x"

_CONSTRAINT_ROWS: dict[str, ConstraintKind] = {
    IS_REQUIRED: ConstraintKind.REQUIRED,
    IS_UNIQUE: ConstraintKind.UNIQUE,
}


def _marker(record: Record, marker_column: str) -> str | None:
    value = record.value(marker_column)
    return value if isinstance(value, str) else None


def is_metadata_record(record: Record, marker_column: str = DEFAULT_MARKER_COLUMN) -> bool:
    return _marker(record, marker_column) in METADATA_SENTINELS


def extract_constraints(
    headers: Sequence[str],
    records: Sequence[Record],
    marker_column: str = DEFAULT_MARKER_COLUMN,
) -> dict[str, list[ConstraintKind]]:
    """Collect required/unique constraints per header from the metadata rows.

    Every header gets an entry (possibly empty). Constraints appear in the order
    their metadata rows appear and a kind is never listed twice for one header.
    """
    constraints: dict[str, list[ConstraintKind]] = {h: [] for h in headers}
    for record in records:
        kind = _CONSTRAINT_ROWS.get(_marker(record, marker_column))
        if kind is None:
            continue
        for header in headers:
            if record.value(header) == CONSTRAINT_MARKER and kind not in constraints[header]:
                constraints[header].append(kind)
    return constraints


def extract_enum_options(
    header: str,
    records: Sequence[Record],
    marker_column: str = DEFAULT_MARKER_COLUMN,
) -> list[str]:
    """Return the trimmed option list declared for ``header`` in the Enumerations row."""
    enum_record = next((r for r in records if _marker(r, marker_column) == ENUMERATIONS), None)
    if enum_record is None:
        return []
    raw = enum_record.value(header)
    if not isinstance(raw, str) or not raw.strip():
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]
