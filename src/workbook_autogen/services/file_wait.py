from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from ..api.client import PlatformClient

"""Wait for an uploaded file to finish processing.

The platform parses uploads asynchronously; actions and sheets are only usable
once the file status is ``complete``. The poll is bounded by ``max_attempts``.
"""

__all__ = [
    "FILE_COMPLETE",
    "FileWaitTimeoutError",
    "wait_for_file_complete",
]

logger = logging.getLogger(__name__)

FILE_COMPLETE = "complete"


class FileWaitTimeoutError(Exception):
    """The file did not reach ``complete`` within the allowed attempts."""


def wait_for_file_complete(
    client: PlatformClient,
    file_id: str,
    *,
    interval_seconds: float = 2.0,
    max_attempts: int = 30,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any]:
    """Poll ``files.get`` until the file is complete and return it.

    Raises:
        FileWaitTimeoutError: Still not complete after ``max_attempts`` fetches
        RemoteCallError: A fetch failed
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    status: Any = None
    for attempt in range(1, max_attempts + 1):
        file = client.files.get(file_id) or {}
        status = file.get("status")
        if status == FILE_COMPLETE:
            logger.debug("file %s complete after %d attempt(s)", file_id, attempt)
            return file
        if attempt < max_attempts:
            logger.info("waiting for file %s to be complete (status=%s)", file_id, status)
            sleep(interval_seconds)

    raise FileWaitTimeoutError(
        f"file {file_id} not complete after {max_attempts} attempts (last status={status})"
    )
