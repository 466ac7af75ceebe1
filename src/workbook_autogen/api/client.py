from __future__ import annotations

import logging
from typing import Any

import httpx

"""HTTP client for the platform control-plane API.

Only the endpoints the workbook job needs are wrapped. Each resource method is a
single request: no retries, no caching. Responses are unwrapped from the
platform's ``{"data": ...}`` envelope.

Usage:
    with PlatformClient(base_url, api_key) as client:
        file = client.files.get("us_fl_123")
        client.jobs.ack("us_jb_456", info="Accepted", progress=10)
"""

__all__ = [
    "PlatformClient",
    "RemoteCallError",
]

logger = logging.getLogger(__name__)


class RemoteCallError(Exception):
    """Raised when a control-plane call fails (network, auth, 4xx/5xx)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class _Resource:
    def __init__(self, client: PlatformClient) -> None:
        self._client = client


class FilesResource(_Resource):
    def get(self, file_id: str) -> dict[str, Any]:
        return self._client.request("GET", f"/files/{file_id}")

    def update(self, file_id: str, *, actions: list[dict[str, Any]]) -> dict[str, Any]:
        return self._client.request("PATCH", f"/files/{file_id}", json={"actions": actions})


class WorkbooksResource(_Resource):
    def get(self, workbook_id: str) -> dict[str, Any]:
        return self._client.request("GET", f"/workbooks/{workbook_id}")

    def create(self, config: dict[str, Any]) -> dict[str, Any]:
        return self._client.request("POST", "/workbooks", json=config)

    def list(self, *, space_id: str) -> list[dict[str, Any]]:
        return self._client.request("GET", "/workbooks", params={"spaceId": space_id}) or []

    def delete(self, workbook_id: str) -> None:
        self._client.request("DELETE", f"/workbooks/{workbook_id}")


class RecordsResource(_Resource):
    def get(self, sheet_id: str) -> list[dict[str, Any]]:
        data = self._client.request("GET", f"/sheets/{sheet_id}/records")
        return list((data or {}).get("records") or [])


class JobsResource(_Resource):
    def get(self, job_id: str) -> dict[str, Any]:
        return self._client.request("GET", f"/jobs/{job_id}")

    def ack(self, job_id: str, *, info: str, progress: int) -> dict[str, Any]:
        return self._client.request(
            "POST", f"/jobs/{job_id}/ack", json={"info": info, "progress": progress}
        )

    def complete(self, job_id: str, *, message: str, info: str) -> dict[str, Any]:
        return self._client.request(
            "POST",
            f"/jobs/{job_id}/complete",
            json={"outcome": {"message": message}, "info": info},
        )

    def fail(self, job_id: str, *, message: str, info: str) -> dict[str, Any]:
        return self._client.request(
            "POST",
            f"/jobs/{job_id}/fail",
            json={"outcome": {"message": message}, "info": info},
        )


class PlatformClient:
    """Synchronous control-plane client built on httpx.

    Args:
        base_url: API root, e.g. ``https://platform.flatfile.com/api/v1``
        api_key: Secret key sent as a bearer token
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass an ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        self.files = FilesResource(self)
        self.workbooks = WorkbooksResource(self)
        self.records = RecordsResource(self)
        self.jobs = JobsResource(self)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Issue one request and return the unwrapped ``data`` payload.

        Raises:
            RemoteCallError: On transport failure, timeout or non-2xx status.
        """
        try:
            response = self._http.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteCallError(
                f"{method} {path} failed with status {status}: {e.response.text[:200]}",
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteCallError(f"{method} {path} failed: {e}") from e

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteCallError(f"{method} {path} returned invalid JSON: {e}") from e
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> PlatformClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
