from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.actions import DEFAULT_ACTIONS, FileAction

"""Config loader.

Responsibilities:
- Load YAML config (default: config/workbook.yml)
- Validate against the packaged config_schema.json
- Apply defaults for every optional section
- Resolve secrets / endpoint overrides from the environment (FLATFILE_API_KEY, FLATFILE_API_URL)
"""

__all__ = [
    "ApiConfig",
    "AppConfig",
    "ConfigError",
    "config_from_dict",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_TYPE_MAPPING",
    "FileWaitConfig",
    "InferenceConfig",
    "JobConfig",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/workbook.yml")

API_KEY_ENV = "FLATFILE_API_KEY"
API_URL_ENV = "FLATFILE_API_URL"

DEFAULT_TYPE_MAPPING: dict[str, str] = {
    "String": "string",
    "Enumeration": "enum",
    "Int": "number",
    "Float": "number",
    "Boolean": "boolean",
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = "https://platform.flatfile.com/api/v1"
    timeout_seconds: float = 30.0
    api_key: str | None = None  # env only, never read from YAML


@dataclass(frozen=True)
class JobConfig:
    operation: str = "createWorkbookFromFile"
    ack_progress: int = 10

    @property
    def job_filter(self) -> str:
        """Job kind carried by ``job:ready`` events for our file action."""
        return f"file:{self.operation}"


@dataclass(frozen=True)
class InferenceConfig:
    mode: str = "runtime"  # runtime | tag
    type_mapping: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPE_MAPPING))
    marker_column: str = "Field Name"
    blueprint_name: str = "Dynamically Generated Blueprint"
    workbook_name: str = "Dynamically Generated Workbook"
    validate_headers: bool = True


@dataclass(frozen=True)
class FileWaitConfig:
    interval_seconds: float = 2.0
    max_attempts: int = 30


@dataclass(frozen=True)
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    job: JobConfig = field(default_factory=JobConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    file_wait: FileWaitConfig = field(default_factory=FileWaitConfig)
    actions: tuple[FileAction, ...] = DEFAULT_ACTIONS
    error_log_dir: str = "./logs"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the data
            violates it (unknown keys, wrong types, out-of-range values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_api(raw: dict[str, Any]) -> ApiConfig:
    defaults = ApiConfig()
    # 環境変数が YAML より優先
    base_url = os.getenv(API_URL_ENV) or raw.get("base_url", defaults.base_url)
    return ApiConfig(
        base_url=base_url.rstrip("/"),
        timeout_seconds=float(raw.get("timeout_seconds", defaults.timeout_seconds)),
        api_key=os.getenv(API_KEY_ENV) or None,
    )


def _build_inference(raw: dict[str, Any]) -> InferenceConfig:
    defaults = InferenceConfig()
    mapping = raw.get("type_mapping")
    return InferenceConfig(
        mode=raw.get("mode", defaults.mode),
        type_mapping=dict(mapping) if mapping is not None else defaults.type_mapping,
        marker_column=raw.get("marker_column", defaults.marker_column),
        blueprint_name=raw.get("blueprint_name", defaults.blueprint_name),
        workbook_name=raw.get("workbook_name", defaults.workbook_name),
        validate_headers=raw.get("validate_headers", defaults.validate_headers),
    )


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Validate a raw mapping and turn it into an AppConfig."""
    _validate_config_schema(data)

    job_raw = data.get("job", {})
    wait_raw = data.get("file_wait", {})
    job_defaults = JobConfig()
    wait_defaults = FileWaitConfig()

    actions_raw = data.get("actions")
    actions = (
        tuple(FileAction.from_dict(a) for a in actions_raw)
        if actions_raw is not None
        else DEFAULT_ACTIONS
    )

    return AppConfig(
        api=_build_api(data.get("api", {})),
        job=JobConfig(
            operation=job_raw.get("operation", job_defaults.operation),
            ack_progress=job_raw.get("ack_progress", job_defaults.ack_progress),
        ),
        inference=_build_inference(data.get("inference", {})),
        file_wait=FileWaitConfig(
            interval_seconds=float(wait_raw.get("interval_seconds", wait_defaults.interval_seconds)),
            max_attempts=wait_raw.get("max_attempts", wait_defaults.max_attempts),
        ),
        actions=actions,
        error_log_dir=data.get("error_log_dir", "./logs"),
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    return config_from_dict(data)
