from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Blueprint (sheet schema) models.

A Blueprint is the self-contained sheet definition sent to the platform when a
workbook is created: a name plus ordered field descriptors.
"""

__all__ = [
    "Blueprint",
    "ConstraintKind",
    "FieldDescriptor",
    "FieldType",
]


class FieldType(Enum):
    """Canonical field types understood by the platform."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"


class ConstraintKind(Enum):
    REQUIRED = "required"
    UNIQUE = "unique"


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a blueprint.

    ``config`` holds type-specific hints (``size``, ``decimalPlaces``,
    ``allowIndeterminate`` or enum ``options``). ``None`` means the field is sent
    without a config key, which happens for enums with no declared options.
    """
    key: str
    name: str
    type: FieldType
    constraints: tuple[ConstraintKind, ...] = ()
    config: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "key": self.key,
            "name": self.name,
            "type": self.type.value,
            "constraints": [{"type": c.value} for c in self.constraints],
        }
        if self.config is not None:
            payload["config"] = self.config
        return payload


@dataclass(frozen=True)
class Blueprint:
    name: str
    fields: tuple[FieldDescriptor, ...] = field(default_factory=tuple)

    def get_field(self, key: str) -> FieldDescriptor:
        for f in self.fields:
            if f.key == key:
                return f
        raise KeyError(key)

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fields": [f.to_payload() for f in self.fields],
        }
