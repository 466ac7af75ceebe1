from __future__ import annotations

from pathlib import Path

import pytest

from workbook_autogen.config.loader import (
    DEFAULT_TYPE_MAPPING,
    AppConfig,
    ConfigError,
    config_from_dict,
    load_config,
)
from workbook_autogen.models.actions import DEFAULT_ACTIONS


def test_load_config_success(write_config: Path) -> None:
    """Test loading the sample YAML."""
    cfg = load_config(write_config)

    assert isinstance(cfg, AppConfig)
    assert cfg.api.base_url == "https://api.test/v1"
    assert cfg.api.timeout_seconds == 5.0
    assert cfg.api.api_key is None
    assert cfg.job.operation == "createWorkbookFromFile"
    assert cfg.job.job_filter == "file:createWorkbookFromFile"
    assert cfg.inference.mode == "runtime"
    assert cfg.inference.type_mapping == DEFAULT_TYPE_MAPPING
    assert cfg.file_wait.interval_seconds == 0.0
    assert cfg.file_wait.max_attempts == 3
    assert cfg.actions == DEFAULT_ACTIONS


def test_defaults_for_empty_mapping() -> None:
    """Test that every section is optional."""
    cfg = config_from_dict({})

    assert cfg.api.base_url == "https://platform.flatfile.com/api/v1"
    assert cfg.job.ack_progress == 10
    assert cfg.inference.marker_column == "Field Name"
    assert cfg.inference.blueprint_name == "Dynamically Generated Blueprint"
    assert cfg.inference.workbook_name == "Dynamically Generated Workbook"
    assert cfg.inference.validate_headers is True
    assert cfg.file_wait.max_attempts == 30
    assert cfg.error_log_dir == "./logs"


def test_environment_overrides(monkeypatch) -> None:
    """Test FLATFILE_API_KEY / FLATFILE_API_URL resolution."""
    monkeypatch.setenv("FLATFILE_API_KEY", "sk_env")
    monkeypatch.setenv("FLATFILE_API_URL", "https://override.test/v1/")

    cfg = config_from_dict({"api": {"base_url": "https://yaml.test/v1"}})

    assert cfg.api.api_key == "sk_env"
    assert cfg.api.base_url == "https://override.test/v1"


def test_custom_actions_and_mapping() -> None:
    """Test action and type mapping overrides."""
    cfg = config_from_dict(
        {
            "inference": {"mode": "tag", "type_mapping": {"Text": "string", "Flag": "boolean"}},
            "actions": [{"operation": "makeWorkbook", "label": "Make", "mode": "background"}],
        }
    )

    assert cfg.inference.type_mapping == {"Text": "string", "Flag": "boolean"}
    (action,) = cfg.actions
    assert action.operation == "makeWorkbook"
    assert action.mode == "background"
    assert action.confirm is True


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"unknown": 1}, "Additional properties"),
        ({"api": {"api_key": "sk_in_yaml"}}, "Additional properties"),
        ({"inference": {"mode": "guess"}}, "guess"),
        ({"inference": {"type_mapping": {"Date": "date"}}}, "date"),
        ({"file_wait": {"max_attempts": 0}}, "0"),
        ({"job": {"ack_progress": 101}}, "101"),
        ({"actions": [{"operation": "x"}]}, "label"),
    ],
)
def test_schema_violations(data, message) -> None:
    """Test that invalid configs are rejected by the JSON schema."""
    with pytest.raises(ConfigError, match="config validation failed") as excinfo:
        config_from_dict(data)
    assert message in str(excinfo.value)


def test_load_config_missing_file(temp_workdir: Path) -> None:
    """Test a missing config file."""
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_load_config_invalid_yaml(temp_workdir: Path) -> None:
    """Test a config file that is not YAML."""
    path = temp_workdir / "config" / "workbook.yml"
    path.write_text("api: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_load_config_non_mapping_root(temp_workdir: Path) -> None:
    """Test a YAML list root."""
    path = temp_workdir / "config" / "workbook.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config(path)


def test_load_config_empty_file_uses_defaults(temp_workdir: Path) -> None:
    """Test that an empty file is the all-defaults config."""
    path = temp_workdir / "config" / "workbook.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == config_from_dict({})


def test_repository_sample_config_is_valid() -> None:
    """Test that the shipped config/workbook.yml validates."""
    root = Path(__file__).resolve().parents[2]
    cfg = load_config(root / "config" / "workbook.yml")
    assert cfg.inference.mode == "runtime"
