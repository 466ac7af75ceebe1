from __future__ import annotations

import re
from datetime import UTC, datetime

from workbook_autogen.models.job_run import JobRun, JobState
from workbook_autogen.services.summary import render_summary_line

"""SUMMARY 行フォーマット契約テスト."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+job=(\S+)\s+file=(\S+)\s+state=(completed|failed)\s+fields=([0-9]+)\s+"
    r"workbook=(\S+)\s+pruned=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = "SUMMARY job=us_jb_1 file=us_fl_1 state=completed fields=3 workbook=us_wb_9 pruned=1 elapsed_sec=0.84"
    assert SUMMARY_PATTERN.match(line), "SUMMARY line should match contract regex"


def test_rendered_lines_match_pattern():
    t = datetime(2025, 1, 1, tzinfo=UTC)
    for state, elapsed in ((JobState.COMPLETED, 12.3456), (JobState.FAILED, 0.0), (JobState.FAILED, 0.0004)):
        run = JobRun(
            job_id="us_jb_1",
            file_id="us_fl_1",
            state=state,
            history=(JobState.IDLE, state),
            start_time=t,
            end_time=t,
            elapsed_seconds=elapsed,
        )
        line = render_summary_line(run)
        assert SUMMARY_PATTERN.match(line), line
