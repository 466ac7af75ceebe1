"""Domain models for workbook auto-generation.

Records fetched from the platform, the blueprint synthesized from them, the file
action descriptors and the outcome of a job run.
"""

from .actions import DEFAULT_ACTIONS, FileAction
from .blueprint import Blueprint, ConstraintKind, FieldDescriptor, FieldType
from .error_record import ErrorRecord
from .job_run import JobRun, JobState
from .records import Record

__all__ = [
    # Platform inputs
    "Record",
    "FileAction",
    "DEFAULT_ACTIONS",
    # Schema models
    "Blueprint",
    "ConstraintKind",
    "FieldDescriptor",
    "FieldType",
    # Processing models
    "ErrorRecord",
    "JobRun",
    "JobState",
]
