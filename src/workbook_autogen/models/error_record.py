from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

One ErrorRecord is written per pipeline step error (fatal or advisory). The JSON
shape is fixed by logging/error_log_schema.json: no extra keys.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        job_id: Platform job id ("" when the error happened outside a job, e.g. file:created)
        file_id: Platform file id
        step: Pipeline step or handler name
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error message
    """
    timestamp: str  # ISO8601 UTC
    job_id: str
    file_id: str
    step: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(job_id: str, file_id: str, step: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            job_id=job_id,
            file_id=file_id,
            step=step,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
