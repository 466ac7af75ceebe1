from __future__ import annotations

import logging

from ..api.client import PlatformClient, RemoteCallError

"""Job protocol helpers: acknowledge / complete / fail.

Thin pass-through to the jobs endpoints. A failed signal is logged and reported
through the boolean return value; these helpers never raise to the caller.
"""

__all__ = [
    "AcknowledgeError",
    "acknowledge_job",
    "complete_job",
    "fail_job",
]

logger = logging.getLogger(__name__)


class AcknowledgeError(Exception):
    """A job could not be acknowledged. Best effort: never fails the job."""


def acknowledge_job(client: PlatformClient, job_id: str, info: str, progress: int) -> bool:
    """Acknowledge the start of a job with an initial progress value."""
    try:
        client.jobs.ack(job_id, info=info, progress=progress)
    except RemoteCallError as e:
        logger.error("error acknowledging job %s: %s", job_id, e)
        return False
    logger.info("job %s acknowledged with progress: %d%%", job_id, progress)
    return True


def complete_job(client: PlatformClient, job_id: str, message: str, info: str) -> bool:
    """Mark the job complete with a final outcome message."""
    try:
        client.jobs.complete(job_id, message=message, info=info)
    except RemoteCallError as e:
        logger.error("error completing job %s: %s", job_id, e)
        return False
    logger.info("job %s completed with message: %s and info: %s", job_id, message, info)
    return True


def fail_job(client: PlatformClient, job_id: str, message: str, info: str) -> bool:
    """Mark the job failed; ``message`` is what the operator sees in the platform UI."""
    try:
        client.jobs.fail(job_id, message=message, info=info)
    except RemoteCallError as e:
        logger.error("error failing job %s: %s", job_id, e)
        return False
    logger.info("job %s failed with message: %s and info: %s", job_id, message, info)
    return True
