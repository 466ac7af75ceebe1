from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from ..api.client import PlatformClient, RemoteCallError
from ..config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from ..events.router import Event, build_router
from ..inference.blueprint import SchemaInferenceError, discover_headers, synthesize
from ..inference.field_types import TypeInferrer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.job_run import JobRun
from ..services.file_actions import handle_file_created
from ..services.orchestrator import load_source_records, run_create_workbook_job
from ..services.summary import render_summary_line

"""CLI entrypoint.

Runs the same handlers the platform runtime triggers, from a terminal:

- ``--event PATH``            dispatch a JSON event ({"topic": ..., "context": {...}})
- ``--file-created FILE_ID``  attach the workbook action to a file
- ``--run-job JOB_ID --file-id FILE_ID``  run the create-workbook pipeline
- ``--inspect-data FILE_ID``  print headers, first rows and the inferred blueprint (read only)
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_JOB_FAILED = 2


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv (FLATFILE_API_KEY / FLATFILE_API_URL)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="workbook-autogen",
        description="Create platform workbooks from uploaded files",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to the YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    mode = p.add_mutually_exclusive_group(required=True)
    mode.add_argument("--event", type=Path, metavar="PATH", help="Dispatch a JSON event file")
    mode.add_argument("--file-created", metavar="FILE_ID", help="Handle file:created for a file")
    mode.add_argument("--run-job", metavar="JOB_ID", help="Run the create-workbook job")
    mode.add_argument("--inspect-data", metavar="FILE_ID", help="Print the file's records and inferred blueprint")
    p.add_argument("--file-id", help="File id for --run-job")
    return p.parse_args(argv)


def _report_run(run: JobRun) -> int:
    log_summary(render_summary_line(run)[len("SUMMARY "):])
    return EXIT_SUCCESS if run.succeeded else EXIT_JOB_FAILED


def _inspect_data(client: PlatformClient, cfg: AppConfig, file_id: str, logger: logging.Logger) -> int:
    try:
        space_id, records = load_source_records(client, file_id)
    except (RemoteCallError, SchemaInferenceError) as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL

    print(f"FILE: {file_id} space={space_id} records={len(records)}")
    if not records:
        print("  (no records)")
        return EXIT_SUCCESS
    df = pd.DataFrame([dict(r.values) for r in records])
    print(f"  columns={list(df.columns)}")
    print(df.head(5).to_string(index=False))

    inference = cfg.inference
    try:
        blueprint = synthesize(
            discover_headers(records, inference.marker_column),
            records,
            TypeInferrer(inference.mode, inference.type_mapping),
            name=inference.blueprint_name,
            marker_column=inference.marker_column,
            validate_headers=inference.validate_headers,
        )
    except SchemaInferenceError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    print(json.dumps(blueprint.to_payload(), indent=2, ensure_ascii=False))
    return EXIT_SUCCESS


def _run(args: argparse.Namespace, client: PlatformClient, cfg: AppConfig, logger: logging.Logger) -> int:
    if args.inspect_data:
        return _inspect_data(client, cfg, args.inspect_data, logger)

    if args.file_created:
        actions = handle_file_created(
            client,
            args.file_created,
            cfg.actions,
            interval_seconds=cfg.file_wait.interval_seconds,
            max_attempts=cfg.file_wait.max_attempts,
        )
        return EXIT_SUCCESS if actions is not None else EXIT_FATAL

    if args.run_job:
        if not args.file_id:
            logger.error("--run-job requires --file-id")
            return EXIT_FATAL
        return _report_run(run_create_workbook_job(client, cfg, args.file_id, args.run_job))

    try:
        payload = json.loads(args.event.read_text(encoding="utf-8"))
        event = Event.from_payload(payload)
    except (OSError, ValueError) as e:
        logger.error(f"event: {e}")
        return EXIT_FATAL

    code = EXIT_SUCCESS
    try:
        results = build_router(client, cfg).dispatch(event)
    except ValueError as e:
        logger.error(f"event: {e}")
        return EXIT_FATAL
    if not results:
        logger.warning(f"no handler for event topic={event.topic} job={event.context.get('job')}")
    for result in results:
        if isinstance(result, JobRun):
            code = max(code, _report_run(result))
        elif result is None:
            code = max(code, EXIT_FATAL)
    return code


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストから [] を渡せるように)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if not cfg.api.api_key:
        logger.error("FLATFILE_API_KEY is not set (environment or .env)")
        return EXIT_FATAL

    with PlatformClient(cfg.api.base_url, cfg.api.api_key, timeout=cfg.api.timeout_seconds) as client:
        return _run(args, client, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
