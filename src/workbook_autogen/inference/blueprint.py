from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..models.blueprint import Blueprint, FieldDescriptor, FieldType
from ..models.records import Record
from .field_types import TypeInferrer
from .metadata import (
    DEFAULT_MARKER_COLUMN,
    extract_constraints,
    extract_enum_options,
    is_metadata_record,
)

"""Blueprint synthesis.

Turns the records of an uploaded sheet into the blueprint of the sheet to create:

1. Headers come from the first record (the marker column is not a field)
2. The first non-metadata record is the representative sample for type inference
3. Constraints and enum options come from the metadata record block
4. Each field gets the config its type needs
"""

__all__ = [
    "DEFAULT_BLUEPRINT_NAME",
    "SchemaInferenceError",
    "discover_headers",
    "synthesize",
]

logger = logging.getLogger(__name__)

DEFAULT_BLUEPRINT_NAME = "Dynamically Generated Blueprint"


class SchemaInferenceError(Exception):
    """Raised when records cannot yield a blueprint (no records, no data row, mismatched headers)."""


def discover_headers(
    records: Sequence[Record], marker_column: str = DEFAULT_MARKER_COLUMN
) -> list[str]:
    """Ordered field names of the first record, marker column excluded."""
    if not records:
        raise SchemaInferenceError("cannot infer a schema from an empty record list")
    return [h for h in records[0].headers if h != marker_column]


def _validate_uniform_headers(
    headers: Sequence[str], records: Sequence[Record], marker_column: str
) -> None:
    expected = set(headers)
    for index, record in enumerate(records):
        found = {h for h in record.headers if h != marker_column}
        if found != expected:
            missing = sorted(expected - found)
            extra = sorted(found - expected)
            ref = record.id or f"#{index}"
            raise SchemaInferenceError(
                f"record {ref} does not share the header set (missing={missing} extra={extra})"
            )


def _field_config(field_type: FieldType, options: list[str]) -> dict[str, Any] | None:
    if field_type is FieldType.STRING:
        return {"size": "normal"}
    if field_type is FieldType.NUMBER:
        return {"decimalPlaces": 2}
    if field_type is FieldType.BOOLEAN:
        return {"allowIndeterminate": False}
    # enum: options がない場合 config 自体を付けない
    if options:
        return {"options": [{"value": o, "label": o} for o in options]}
    return None


def synthesize(
    headers: Sequence[str],
    records: Sequence[Record],
    inferrer: TypeInferrer,
    *,
    name: str = DEFAULT_BLUEPRINT_NAME,
    marker_column: str = DEFAULT_MARKER_COLUMN,
    validate_headers: bool = True,
) -> Blueprint:
    """Build a blueprint for ``headers`` from ``records``.

    Args:
        headers: Field names in output order
        records: All records of the source sheet, metadata rows included
        inferrer: Type inferrer (its mode decides tag vs runtime inference)
        name: Blueprint name
        marker_column: Column holding the metadata sentinels
        validate_headers: Reject records whose header set differs from ``headers``

    Returns:
        Blueprint with one field per header, in header order

    Raises:
        SchemaInferenceError: No records, no data record to sample, or
            heterogeneous headers (when validation is on)
    """
    if not records:
        raise SchemaInferenceError("cannot infer a schema from an empty record list")

    sample = next((r for r in records if not is_metadata_record(r, marker_column)), None)
    if sample is None:
        raise SchemaInferenceError(
            f"no data record found among {len(records)} records (only metadata rows)"
        )

    if validate_headers:
        _validate_uniform_headers(headers, records, marker_column)

    constraints = extract_constraints(headers, records, marker_column)

    fields: list[FieldDescriptor] = []
    for header in headers:
        field_type = inferrer.infer(sample.value(header))
        options = (
            extract_enum_options(header, records, marker_column)
            if field_type is FieldType.ENUM
            else []
        )
        fields.append(
            FieldDescriptor(
                key=header,
                name=header,
                type=field_type,
                constraints=tuple(constraints[header]),
                config=_field_config(field_type, options),
            )
        )

    logger.debug(
        "synthesized blueprint name=%s mode=%s fields=%s",
        name,
        inferrer.mode,
        [(f.key, f.type.value) for f in fields],
    )
    return Blueprint(name=name, fields=tuple(fields))
