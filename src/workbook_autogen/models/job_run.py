from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .blueprint import Blueprint

"""JobRun model and JobState enum.

JobState tracks one create-workbook job through the pipeline:

    idle → acknowledged → schema_built → container_created → pruned → completed

with ``failed`` reachable from any non-terminal state. The platform remains the
source of truth for the job itself; JobRun is only the in-memory outcome of a
single pipeline instance.
"""

__all__ = [
    "JobRun",
    "JobState",
]


class JobState(Enum):
    IDLE = "idle"
    ACKNOWLEDGED = "acknowledged"
    SCHEMA_BUILT = "schema_built"
    CONTAINER_CREATED = "container_created"
    PRUNED = "pruned"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


@dataclass(frozen=True)
class JobRun:
    """Outcome of one pipeline instance."""
    job_id: str
    file_id: str
    state: JobState
    history: tuple[JobState, ...]  # visited states, IDLE first
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    blueprint: Blueprint | None = None
    workbook_id: str | None = None  # created workbook
    space_id: str | None = None
    pruned_workbook_ids: tuple[str, ...] = ()
    failed_step: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.COMPLETED
