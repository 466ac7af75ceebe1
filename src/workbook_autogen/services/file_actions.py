from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from ..api.client import PlatformClient, RemoteCallError
from ..models.actions import FileAction
from .file_wait import FileWaitTimeoutError, wait_for_file_complete

"""``file:created`` handling: attach our actions to the uploaded file.

The action added here is what a person clicks to start the create-workbook
job. Registration is idempotent, keyed by ``operation``.
"""

__all__ = [
    "handle_file_created",
    "merge_actions",
]

logger = logging.getLogger(__name__)


def merge_actions(
    existing: Sequence[dict[str, Any]], wanted: Iterable[FileAction]
) -> tuple[list[dict[str, Any]], list[str]]:
    """Append wanted actions whose operation is not present yet.

    Returns:
        (merged action list, operations that were added)
    """
    merged = [dict(a) for a in existing]
    present = {a.get("operation") for a in merged}
    added: list[str] = []
    for action in wanted:
        if action.operation in present:
            continue
        merged.append(action.to_payload())
        present.add(action.operation)
        added.append(action.operation)
    return merged, added


def handle_file_created(
    client: PlatformClient,
    file_id: str,
    actions: Iterable[FileAction],
    *,
    interval_seconds: float = 2.0,
    max_attempts: int = 30,
) -> list[dict[str, Any]] | None:
    """Wait for the file, then make sure our actions are attached to it.

    Returns:
        The file's action list after the handler ran, or None when the
        platform could not be reached or the file never completed.
    """
    logger.info("file created with ID: %s", file_id)
    try:
        file = wait_for_file_complete(
            client, file_id, interval_seconds=interval_seconds, max_attempts=max_attempts
        )
        existing = file.get("actions") or []
        logger.debug("existing actions: %s", [a.get("operation") for a in existing])

        merged, added = merge_actions(existing, actions)
        if not added:
            logger.info("file %s already has actions %s; nothing to update", file_id, [a.get("operation") for a in existing])
            return merged

        logger.info("updating file %s with new actions: %s", file_id, added)
        client.files.update(file_id, actions=merged)

        updated = client.files.get(file_id) or {}
        current = updated.get("actions") or []
        logger.debug("updated file actions: %s", [a.get("operation") for a in current])
        return list(current)
    except (RemoteCallError, FileWaitTimeoutError) as e:
        logger.error("error processing file:created event for %s: %s", file_id, e)
        return None
