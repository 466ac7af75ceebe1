from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

"""Record model for sheet rows fetched from the platform.

The records endpoint returns each row as ``{"id": ..., "values": {header: {"value": ...}}}``.
Record keeps the unwrapped cell values in header order and is read-only: the
inference code derives new structures from records, it never edits them.
"""

__all__ = [
    "Record",
]


def _unwrap(cell: Any) -> Any:
    # セルは {"value": ...} 形式。素の値もそのまま受け付ける
    if isinstance(cell, Mapping):
        return cell.get("value")
    return cell


@dataclass(frozen=True)
class Record:
    """A single sheet row: header -> raw cell value (insertion order preserved)."""
    values: Mapping[str, Any]
    id: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @staticmethod
    def from_api(raw: Mapping[str, Any]) -> Record:
        cells = raw.get("values") or {}
        return Record(
            values={str(k): _unwrap(v) for k, v in cells.items()},
            id=raw.get("id"),
            metadata=dict(raw.get("metadata") or {}),
        )

    @property
    def headers(self) -> list[str]:
        return list(self.values.keys())

    def value(self, header: str, default: Any = None) -> Any:
        return self.values.get(header, default)
