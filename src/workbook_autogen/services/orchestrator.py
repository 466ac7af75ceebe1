from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ..api.client import PlatformClient, RemoteCallError
from ..config.loader import AppConfig
from ..inference.blueprint import SchemaInferenceError, discover_headers, synthesize
from ..inference.field_types import TypeInferrer
from ..logging.error_log import ErrorLogBuffer
from ..models.blueprint import Blueprint
from ..models.error_record import ErrorRecord
from ..models.job_run import JobRun, JobState
from ..models.records import Record
from .job_protocol import AcknowledgeError, acknowledge_job, complete_job, fail_job
from .progress import ProgressTracker
from .workbooks import create_workbook, prune_empty_workbooks

"""Create-workbook job orchestration.

The job runs as a strict linear pipeline of remote calls:

    acknowledge → build_schema → create_workbook → prune_workbooks → complete

Each step declares the state it reaches and whether its failure is fatal. A
fatal failure moves the run to ``failed`` and reports it with ``jobs.fail``; an
advisory failure (acknowledge, pruning, completion report) is logged and the
run keeps going. Nothing is retried here: re-running the job is an operator
decision.
"""

__all__ = [
    "ACK_INFO",
    "COMPLETE_INFO",
    "COMPLETE_MESSAGE",
    "PIPELINE",
    "PipelineStep",
    "load_source_records",
    "run_create_workbook_job",
]

logger = logging.getLogger(__name__)

ACK_INFO = "Starting workbook creation."
COMPLETE_MESSAGE = "Workbook creation is complete."
COMPLETE_INFO = "The workbook has been successfully formatted to match the blueprint structure."


@dataclass
class _RunContext:
    """Mutable state shared by the steps of one pipeline instance."""
    client: PlatformClient
    config: AppConfig
    job_id: str
    file_id: str
    space_id: str | None = None
    records: list[Record] = field(default_factory=list)
    blueprint: Blueprint | None = None
    workbook_id: str | None = None
    pruned: tuple[str, ...] = ()


@dataclass(frozen=True)
class PipelineStep:
    """One pipeline step.

    Attributes:
        name: Step name used in logs and the error log
        reaches: State the run is in once the step is done
        fatal: True if a failure aborts the job and reports it as failed
        run: Step body; raises on failure
    """
    name: str
    reaches: JobState
    fatal: bool
    run: Callable[[_RunContext], None]


def load_source_records(client: PlatformClient, file_id: str) -> tuple[str, list[Record]]:
    """Fetch file → workbook → first sheet → records.

    Returns:
        (space id of the file's workbook, records of its first sheet)

    Raises:
        RemoteCallError: Any fetch failed
        SchemaInferenceError: The file has no workbook or the workbook has no sheet
    """
    file = client.files.get(file_id) or {}
    workbook_id = file.get("workbookId")
    if not workbook_id:
        raise SchemaInferenceError(f"file {file_id} has no workbook to read records from")

    workbook = client.workbooks.get(workbook_id) or {}
    space_id = workbook.get("spaceId")
    sheets = workbook.get("sheets") or []
    if not sheets:
        raise SchemaInferenceError(f"workbook {workbook_id} of file {file_id} has no sheets")
    if not space_id:
        raise SchemaInferenceError(f"workbook {workbook_id} of file {file_id} has no space")

    sheet_id = sheets[0]["id"]
    raw_records = client.records.get(sheet_id)
    logger.debug("file=%s workbook=%s sheet=%s records=%d", file_id, workbook_id, sheet_id, len(raw_records))
    return str(space_id), [Record.from_api(r) for r in raw_records]


def _acknowledge(ctx: _RunContext) -> None:
    if not acknowledge_job(ctx.client, ctx.job_id, ACK_INFO, ctx.config.job.ack_progress):
        raise AcknowledgeError(f"job {ctx.job_id} could not be acknowledged")


def _build_schema(ctx: _RunContext) -> None:
    ctx.space_id, ctx.records = load_source_records(ctx.client, ctx.file_id)
    inference = ctx.config.inference
    inferrer = TypeInferrer(inference.mode, inference.type_mapping)
    headers = discover_headers(ctx.records, inference.marker_column)
    ctx.blueprint = synthesize(
        headers,
        ctx.records,
        inferrer,
        name=inference.blueprint_name,
        marker_column=inference.marker_column,
        validate_headers=inference.validate_headers,
    )
    logger.info(
        "generated blueprint for file %s: %s",
        ctx.file_id,
        ", ".join(f"{f.key}:{f.type.value}" for f in ctx.blueprint.fields),
    )


def _create_workbook(ctx: _RunContext) -> None:
    if ctx.blueprint is None or ctx.space_id is None:
        raise SchemaInferenceError("no blueprint was built for this job")
    ctx.workbook_id = create_workbook(
        ctx.client, ctx.blueprint, ctx.space_id, name=ctx.config.inference.workbook_name
    )


def _prune_workbooks(ctx: _RunContext) -> None:
    if ctx.space_id is None:
        raise SchemaInferenceError("space of the source workbook is unknown")
    ctx.pruned = tuple(prune_empty_workbooks(ctx.client, ctx.space_id))


def _complete(ctx: _RunContext) -> None:
    complete_job(ctx.client, ctx.job_id, COMPLETE_MESSAGE, COMPLETE_INFO)
    try:
        job = ctx.client.jobs.get(ctx.job_id) or {}
        logger.debug("fetched status for job %s: %s", ctx.job_id, job.get("status"))
    except RemoteCallError as e:
        logger.warning("could not fetch status for job %s: %s", ctx.job_id, e)


PIPELINE: tuple[PipelineStep, ...] = (
    PipelineStep("acknowledge", JobState.ACKNOWLEDGED, fatal=False, run=_acknowledge),
    PipelineStep("build_schema", JobState.SCHEMA_BUILT, fatal=True, run=_build_schema),
    PipelineStep("create_workbook", JobState.CONTAINER_CREATED, fatal=True, run=_create_workbook),
    PipelineStep("prune_workbooks", JobState.PRUNED, fatal=False, run=_prune_workbooks),
    PipelineStep("complete", JobState.COMPLETED, fatal=False, run=_complete),
)


def _error_type(exc: BaseException) -> str:
    # RemoteCallError -> REMOTE_CALL_ERROR
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(exc).__name__).upper()


def run_create_workbook_job(
    client: PlatformClient,
    config: AppConfig,
    file_id: str,
    job_id: str,
    *,
    error_log: ErrorLogBuffer | None = None,
    steps: Sequence[PipelineStep] = PIPELINE,
) -> JobRun:
    """Run the create-workbook pipeline for one ``job:ready`` event.

    Never raises for step failures: a fatal failure is reported to the platform
    with ``jobs.fail`` (message and info both carry the error text) and reflected
    in the returned JobRun.

    Args:
        client: Control-plane client
        config: Application config (inference settings, workbook name, ack progress)
        file_id: File the job was triggered on
        job_id: Job to acknowledge / complete / fail
        error_log: Buffer for step errors (default: one under config.error_log_dir)
        steps: Pipeline definition (tests may substitute steps)

    Returns:
        JobRun with final state, visited states and created/pruned workbook ids
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer(Path(config.error_log_dir))

    logger.info("job %s ready for file with ID: %s", job_id, file_id)
    ctx = _RunContext(client=client, config=config, job_id=job_id, file_id=file_id)
    state = JobState.IDLE
    history: list[JobState] = [state]
    failed_step: str | None = None
    error: str | None = None

    with ProgressTracker(len(steps)) as progress:
        for step in steps:
            progress.start_step(step.name)
            try:
                step.run(ctx)
            except Exception as e:
                message = str(e) or type(e).__name__
                error_log.append(
                    ErrorRecord.create(
                        job_id=job_id,
                        file_id=file_id,
                        step=step.name,
                        error_type=_error_type(e),
                        message=message,
                    )
                )
                if step.fatal:
                    progress.finish_step(success=False)
                    logger.error("step=%s failed for job %s: %s", step.name, job_id, message)
                    state = JobState.FAILED
                    history.append(state)
                    failed_step = step.name
                    error = message
                    fail_job(client, job_id, message, message)
                    break
                logger.warning("step=%s failed (advisory) for job %s: %s", step.name, job_id, message)
                progress.finish_step(success=False)
            else:
                progress.finish_step(success=True)
            state = step.reaches
            history.append(state)

    try:
        error_log.flush()
    except OSError as e:
        logger.warning("could not write error log: %s", e)

    end_time = datetime.now(UTC)
    return JobRun(
        job_id=job_id,
        file_id=file_id,
        state=state,
        history=tuple(history),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        blueprint=ctx.blueprint,
        workbook_id=ctx.workbook_id,
        space_id=ctx.space_id,
        pruned_workbook_ids=ctx.pruned,
        failed_step=failed_step,
        error=error,
    )
