from __future__ import annotations

from ..models.job_run import JobRun

"""SUMMARY line rendering for a job run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(run: JobRun) -> str:
    """Render the SUMMARY line for a finished run.

    Format:
    SUMMARY job={job_id} file={file_id} state={state} fields={n} workbook={id|-}
    pruned={n} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> from workbook_autogen.models.job_run import JobRun, JobState
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> run = JobRun(job_id="j1", file_id="f1", state=JobState.FAILED,
        ...              history=(JobState.IDLE, JobState.FAILED),
        ...              start_time=t, end_time=t, elapsed_seconds=0.0)
        >>> render_summary_line(run)
        'SUMMARY job=j1 file=f1 state=failed fields=0 workbook=- pruned=0 elapsed_sec=0'
    """
    fields = len(run.blueprint.fields) if run.blueprint is not None else 0
    return (
        f"SUMMARY job={run.job_id} "
        f"file={run.file_id} "
        f"state={run.state.value} "
        f"fields={fields} "
        f"workbook={run.workbook_id or '-'} "
        f"pruned={len(run.pruned_workbook_ids)} "
        f"elapsed_sec={_format_seconds(run.elapsed_seconds)}"
    )
