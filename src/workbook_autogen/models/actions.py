from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""FileAction model.

A file action is the descriptor the platform renders as a button on an uploaded
file. Triggering it emits a ``job:ready`` event for ``file:<operation>``.
"""

__all__ = [
    "DEFAULT_ACTIONS",
    "FileAction",
]


@dataclass(frozen=True)
class FileAction:
    """Action descriptor attached to a file, keyed by ``operation``."""
    operation: str
    label: str
    description: str = ""
    mode: str = "foreground"  # foreground | background | toolbarBlocking
    confirm: bool = True

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> FileAction:
        return FileAction(
            operation=raw["operation"],
            label=raw["label"],
            description=raw.get("description", ""),
            mode=raw.get("mode", "foreground"),
            confirm=raw.get("confirm", True),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "label": self.label,
            "description": self.description,
            "mode": self.mode,
            "confirm": self.confirm,
        }


DEFAULT_ACTIONS: tuple[FileAction, ...] = (
    FileAction(
        operation="createWorkbookFromFile",
        label="Create Workbook From File",
        description="This will create a Flatfile workbook based on the contents of the file.",
    ),
)
