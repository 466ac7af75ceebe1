# Shared pytest fixtures
from __future__ import annotations

import json
import re
import tempfile
from pathlib import Path
from typing import Any

import httpx
import pytest

from workbook_autogen.api.client import PlatformClient
from workbook_autogen.config.loader import AppConfig, config_from_dict
from workbook_autogen.logging.init import reset_logging

BASE_URL = "https://api.test/v1"


def cell(value: Any) -> dict[str, Any]:
    return {"value": value, "valid": True, "messages": []}


def api_record(record_id: str, **values: Any) -> dict[str, Any]:
    """Raw record as returned by the records endpoint."""
    return {"id": record_id, "values": {k: cell(v) for k, v in values.items()}}


class FakePlatform:
    """In-memory control plane served through httpx.MockTransport.

    State is plain dicts so tests can seed and inspect it directly. Every request
    is appended to ``calls`` as (method, path, json body or None).
    """

    def __init__(self) -> None:
        self.files: dict[str, dict[str, Any]] = {}
        self.workbooks: dict[str, dict[str, Any]] = {}
        self.records: dict[str, list[dict[str, Any]]] = {}
        self.jobs: dict[str, dict[str, Any]] = {}
        self.file_statuses: dict[str, list[str]] = {}  # polled statuses, consumed in order
        self.fail_on: dict[tuple[str, str], int] = {}  # (method, path) -> status code
        self.calls: list[tuple[str, str, Any]] = []
        self._created = 0

    # -- seeding -----------------------------------------------------------
    def add_upload(
        self,
        file_id: str,
        records: list[dict[str, Any]],
        *,
        space_id: str = "us_sp_1",
        workbook_id: str = "us_wb_src",
        sheet_id: str = "us_sh_src",
        actions: list[dict[str, Any]] | None = None,
    ) -> None:
        self.files[file_id] = {
            "id": file_id,
            "status": "complete",
            "workbookId": workbook_id,
            "spaceId": space_id,
            "actions": list(actions or []),
        }
        self.workbooks[workbook_id] = {
            "id": workbook_id,
            "spaceId": space_id,
            "sheets": [{"id": sheet_id, "name": "Sheet1"}],
        }
        self.records[sheet_id] = records

    def add_workbook(self, workbook_id: str, space_id: str, sheet_count: int) -> None:
        self.workbooks[workbook_id] = {
            "id": workbook_id,
            "spaceId": space_id,
            "sheets": [{"id": f"{workbook_id}_sh{i}"} for i in range(sheet_count)],
        }

    # -- inspection --------------------------------------------------------
    def calls_to(self, method: str, pattern: str) -> list[tuple[str, str, Any]]:
        rx = re.compile(pattern)
        return [c for c in self.calls if c[0] == method and rx.fullmatch(c[1])]

    # -- transport ---------------------------------------------------------
    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v1")
        method = request.method
        body = json.loads(request.content) if request.content else None
        self.calls.append((method, path, body))

        status = self.fail_on.get((method, path))
        if status is not None:
            return httpx.Response(status, json={"errors": [{"message": "injected failure"}]})

        parts = path.strip("/").split("/")
        if parts[0] == "files":
            return self._files(method, parts[1], body)
        if parts[0] == "workbooks":
            return self._workbooks(method, parts[1] if len(parts) > 1 else None, request, body)
        if parts[0] == "sheets" and parts[2:] == ["records"]:
            return self._ok({"records": self.records.get(parts[1], [])})
        if parts[0] == "jobs":
            return self._jobs(method, parts[1], parts[2] if len(parts) > 2 else None, body)
        return httpx.Response(404, json={"errors": [{"message": f"no route {path}"}]})

    @staticmethod
    def _ok(data: Any) -> httpx.Response:
        return httpx.Response(200, json={"data": data})

    def _files(self, method: str, file_id: str, body: Any) -> httpx.Response:
        file = self.files.get(file_id)
        if file is None:
            return httpx.Response(404, json={"errors": [{"message": "file not found"}]})
        if method == "PATCH":
            file["actions"] = list(body.get("actions", []))
            return self._ok(file)
        pending = self.file_statuses.get(file_id)
        if pending:
            file["status"] = pending.pop(0)
        return self._ok(dict(file))

    def _workbooks(self, method: str, workbook_id: str | None, request: httpx.Request, body: Any) -> httpx.Response:
        if workbook_id is None and method == "GET":
            space_id = request.url.params.get("spaceId")
            return self._ok([wb for wb in self.workbooks.values() if wb["spaceId"] == space_id])
        if workbook_id is None and method == "POST":
            self._created += 1
            new_id = f"us_wb_new{self._created}"
            self.workbooks[new_id] = {
                "id": new_id,
                "name": body["name"],
                "spaceId": body["spaceId"],
                "sheets": [dict(s, id=f"{new_id}_sh{i}") for i, s in enumerate(body.get("sheets", []))],
            }
            return self._ok(self.workbooks[new_id])
        if workbook_id not in self.workbooks:
            return httpx.Response(404, json={"errors": [{"message": "workbook not found"}]})
        if method == "DELETE":
            del self.workbooks[workbook_id]
            return self._ok({"success": True})
        return self._ok(self.workbooks[workbook_id])

    def _jobs(self, method: str, job_id: str, action: str | None, body: Any) -> httpx.Response:
        job = self.jobs.setdefault(job_id, {"id": job_id, "status": "ready"})
        if method == "POST" and action in ("ack", "complete", "fail"):
            job["status"] = {"ack": "executing", "complete": "complete", "fail": "failed"}[action]
            job[action] = body
        return self._ok(job)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("FLATFILE_API_KEY", raising=False)
    monkeypatch.delenv("FLATFILE_API_URL", raising=False)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: https://api.test/v1
  timeout_seconds: 5
job:
  operation: createWorkbookFromFile
  ack_progress: 10
inference:
  mode: runtime
  marker_column: Field Name
file_wait:
  interval_seconds: 0
  max_attempts: 3
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "workbook.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def app_config(temp_workdir: Path) -> AppConfig:
    return config_from_dict(
        {
            "api": {"base_url": BASE_URL},
            "file_wait": {"interval_seconds": 0, "max_attempts": 3},
            "error_log_dir": str(temp_workdir / "logs"),
        }
    )


@pytest.fixture()
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture()
def client(fake_platform: FakePlatform) -> PlatformClient:
    with PlatformClient(BASE_URL, "sk_test", transport=httpx.MockTransport(fake_platform.handler)) as c:
        yield c
