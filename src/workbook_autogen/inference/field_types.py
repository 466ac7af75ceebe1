from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pandas.api import types as pdtypes

from ..models.blueprint import FieldType

"""Field type inference.

Two strategies, one per inferrer instance:

- ``tag``: the sample is a declared type tag ("String", "Int", "Enumeration", ...)
  looked up in an injectable mapping.
- ``runtime``: the sample is an actual cell value classified by its native kind.

Both are total: anything unrecognized becomes ``string``.
"""

__all__ = [
    "INFERENCE_MODES",
    "TypeInferrer",
]

INFERENCE_MODES = ("runtime", "tag")


class TypeInferrer:
    """Map a representative sample (value or type tag) to a canonical FieldType."""

    def __init__(self, mode: str = "runtime", type_mapping: Mapping[str, str] | None = None) -> None:
        if mode not in INFERENCE_MODES:
            raise ValueError(f"unknown inference mode: {mode!r} (expected one of {INFERENCE_MODES})")
        self.mode = mode
        self._mapping: dict[str, FieldType] = {
            tag: FieldType(canonical) for tag, canonical in (type_mapping or {}).items()
        }

    def infer(self, sample: Any) -> FieldType:
        if self.mode == "tag":
            return self._infer_tag(sample)
        return self._infer_runtime(sample)

    def _infer_tag(self, sample: Any) -> FieldType:
        if not isinstance(sample, str):
            return FieldType.STRING
        return self._mapping.get(sample, FieldType.STRING)

    @staticmethod
    def _infer_runtime(sample: Any) -> FieldType:
        # bool は数値扱いされるので先に判定
        if pdtypes.is_bool(sample):
            return FieldType.BOOLEAN
        if pdtypes.is_number(sample):
            return FieldType.NUMBER
        return FieldType.STRING
