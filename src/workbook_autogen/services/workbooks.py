from __future__ import annotations

import logging

from ..api.client import PlatformClient, RemoteCallError
from ..models.blueprint import Blueprint

"""Workbook lifecycle: create from a blueprint, prune empty workbooks.

Pruning reconciles workbooks left empty by earlier runs in the same space. The
workbook just created always carries one sheet, so it is never a candidate.
"""

__all__ = [
    "DEFAULT_WORKBOOK_NAME",
    "create_workbook",
    "prune_empty_workbooks",
]

logger = logging.getLogger(__name__)

DEFAULT_WORKBOOK_NAME = "Dynamically Generated Workbook"


def create_workbook(
    client: PlatformClient,
    blueprint: Blueprint,
    space_id: str,
    *,
    name: str = DEFAULT_WORKBOOK_NAME,
) -> str:
    """Create a workbook holding exactly one sheet built from ``blueprint``.

    Returns:
        The new workbook id

    Raises:
        RemoteCallError: The create call failed (no retry here)
    """
    config = {
        "name": name,
        "spaceId": space_id,
        "sheets": [blueprint.to_payload()],
    }
    created = client.workbooks.create(config) or {}
    workbook_id = created.get("id")
    if not workbook_id:
        raise RemoteCallError(f"workbook create in space {space_id} returned no id")
    logger.info("workbook created id=%s space=%s fields=%d", workbook_id, space_id, len(blueprint.fields))
    return str(workbook_id)


def prune_empty_workbooks(client: PlatformClient, space_id: str) -> list[str]:
    """Delete every workbook of the space that has no sheets.

    Best effort: a failed delete is logged and the remaining workbooks are still
    processed. A failed listing propagates as RemoteCallError.

    Returns:
        Ids actually deleted, in listing order
    """
    logger.info("attempting to delete empty workbooks for space: %s", space_id)
    workbooks = client.workbooks.list(space_id=space_id)
    logger.info("found %d workbooks in space: %s", len(workbooks), space_id)

    deleted: list[str] = []
    for workbook in workbooks:
        workbook_id = workbook.get("id")
        if workbook.get("sheets"):
            logger.debug("workbook %s has sheets and will not be deleted", workbook_id)
            continue
        try:
            client.workbooks.delete(workbook_id)
        except RemoteCallError as e:
            logger.warning("failed to delete empty workbook %s: %s", workbook_id, e)
            continue
        logger.info("deleted empty workbook with ID: %s", workbook_id)
        deleted.append(workbook_id)
    return deleted
