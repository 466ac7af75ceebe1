from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..api.client import PlatformClient
from ..config.loader import AppConfig
from ..services.file_actions import handle_file_created
from ..services.orchestrator import run_create_workbook_job

"""Event routing between the host runtime and the handlers.

The host (the platform's agent runtime or the CLI) turns each platform event
into an Event and calls ``EventRouter.dispatch``. Handlers are registered per
topic, optionally narrowed to a job kind the way ``job:ready`` events are
filtered to ``file:createWorkbookFromFile``.
"""

__all__ = [
    "Event",
    "EventRouter",
    "FILE_CREATED",
    "JOB_READY",
    "build_router",
]

logger = logging.getLogger(__name__)

FILE_CREATED = "file:created"
JOB_READY = "job:ready"

Handler = Callable[["Event"], Any]


@dataclass(frozen=True)
class Event:
    """A platform event: topic plus its context (fileId, jobId, job, spaceId, ...)."""
    topic: str
    context: Mapping[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_payload(payload: Mapping[str, Any]) -> Event:
        topic = payload.get("topic")
        if not isinstance(topic, str) or not topic:
            raise ValueError("event payload has no topic")
        return Event(topic=topic, context=dict(payload.get("context") or {}))

    def require(self, key: str) -> str:
        value = self.context.get(key)
        if not value:
            raise ValueError(f"{self.topic} event is missing context.{key}")
        return str(value)


@dataclass(frozen=True)
class _Route:
    topic: str
    handler: Handler
    job: str | None = None

    def matches(self, event: Event) -> bool:
        if event.topic != self.topic:
            return False
        return self.job is None or event.context.get("job") == self.job


class EventRouter:
    """Topic → handler registry. Handlers run in registration order."""

    def __init__(self) -> None:
        self._routes: list[_Route] = []

    def on(self, topic: str, handler: Handler, *, job: str | None = None) -> None:
        self._routes.append(_Route(topic=topic, handler=handler, job=job))
        logger.debug("registered handler topic=%s job=%s", topic, job)

    def dispatch(self, event: Event) -> list[Any]:
        """Call every matching handler and return their results."""
        matched = [r for r in self._routes if r.matches(event)]
        if not matched:
            logger.debug("no handler for topic=%s job=%s", event.topic, event.context.get("job"))
        return [route.handler(event) for route in matched]


def build_router(client: PlatformClient, config: AppConfig) -> EventRouter:
    """Router wired with the file:created and job:ready handlers."""
    router = EventRouter()

    def on_file_created(event: Event) -> Any:
        return handle_file_created(
            client,
            event.require("fileId"),
            config.actions,
            interval_seconds=config.file_wait.interval_seconds,
            max_attempts=config.file_wait.max_attempts,
        )

    def on_job_ready(event: Event) -> Any:
        return run_create_workbook_job(
            client, config, event.require("fileId"), event.require("jobId")
        )

    router.on(FILE_CREATED, on_file_created)
    router.on(JOB_READY, on_job_ready, job=config.job.job_filter)
    return router
