"""Per-connection dispatch of task requests."""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from api.services.connection_hub import ConnectionHub
from core.config import Settings
from core.log import get_logger
from core.models.api.events import (
    ErrorEvent,
    LogEvent,
    TaskDetailsEvent,
    TaskEvent,
    TaskStartedEvent,
    TaskStoppedEvent,
)
from core.models.api.requests import StartTaskRequest, TaskReferenceRequest
from core.tasks import (
    MalformedRequestError,
    TaskRegistry,
    TaskRunnerError,
    TaskValidationError,
)
from core.types import ConnectionID, LogSeverity

logger = get_logger(__name__)


def describe_validation_error(error: ValidationError) -> str:
    """Reduce a pydantic error to one line a client can show."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"])
    if first["type"] == "missing":
        return f"{field} is required"
    return str(first["msg"]).removeprefix("Value error, ")


class ConnectionGateway:
    """Translates one connection's requests into registry operations.

    Every request is answered on the requesting connection; request errors
    become ``error`` events and never close the connection.
    """

    def __init__(
        self,
        connection_id: ConnectionID,
        hub: ConnectionHub,
        registry: TaskRegistry,
        settings: Settings,
    ) -> None:
        self.connection_id = connection_id
        self.hub = hub
        self.registry = registry
        self.settings = settings
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            "start": self.handle_start,
            "stop": self.handle_stop,
            "view_details": self.handle_view_details,
        }

    async def handle_message(self, raw: str | bytes) -> None:
        """Parse and dispatch one inbound message."""
        kind: str | None = None
        try:
            payload = self._parse(raw)
            kind = payload.get("type")
            if kind is None:
                raise MalformedRequestError("Request type is missing")
            handler = self._handlers.get(kind) if isinstance(kind, str) else None
            if handler is None:
                raise MalformedRequestError(f"Unknown request type: {kind!r}")
            await handler(payload)
        except MalformedRequestError as e:
            await self._reply(ErrorEvent(message=str(e)))
        except TaskRunnerError as e:
            await self._reply(ErrorEvent(message=str(e), origin=kind))
        except Exception as e:
            logger.error(f"Unhandled error serving {kind} request: {e}", exc_info=True)
            await self._reply(ErrorEvent(message="Internal error", origin=kind))

    async def handle_start(self, payload: dict[str, Any]) -> None:
        try:
            request = StartTaskRequest.model_validate(payload)
        except ValidationError as e:
            raise TaskValidationError(describe_validation_error(e)) from e

        config = request.to_config(
            self.settings.default_interval_seconds,
            self.settings.min_interval_seconds,
        )
        task = self.registry.create(config, self.connection_id)
        await self._reply(TaskStartedEvent(task_id=task.id))

        entry = task.log(
            f"Task started with {len(config.items)} item(s), "
            f"sending every {config.interval_seconds:g}s"
        )
        await self._reply(LogEvent.from_entry(task.id, entry))

    async def handle_stop(self, payload: dict[str, Any]) -> None:
        task = self.registry.remove(self._task_id(payload))

        entry = await task.log_locked("Task stopped", LogSeverity.WARNING)
        stopped_log = LogEvent.from_entry(task.id, entry)
        await self._reply(stopped_log)
        await self._reply(TaskStoppedEvent(task_id=task.id))

        if task.owner != self.connection_id and self.hub.is_connected(task.owner):
            await self.hub.send(task.owner, stopped_log)

    async def handle_view_details(self, payload: dict[str, Any]) -> None:
        task = self.registry.lookup(self._task_id(payload))
        stats = task.stats
        await self._reply(
            TaskDetailsEvent(
                task_id=task.id,
                sent=stats.sent,
                failed=stats.failed,
                active_cookies_count=task.active_credentials,
                loops_completed=stats.loops_completed,
                restarts=stats.restarts,
                logs=task.logs.snapshot(),
            )
        )

    def close(self) -> int:
        """Forget every task this connection created.

        Returns:
            Number of tasks removed
        """
        removed = self.registry.remove_all_owned_by(self.connection_id)
        return len(removed)

    def _task_id(self, payload: dict[str, Any]) -> str:
        try:
            return TaskReferenceRequest.model_validate(payload).task_id
        except ValidationError as e:
            raise TaskValidationError(describe_validation_error(e)) from e

    def _parse(self, raw: str | bytes) -> dict[str, Any]:
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedRequestError("Malformed request: not valid JSON") from e
        if not isinstance(payload, dict):
            raise MalformedRequestError("Malformed request: expected a JSON object")
        return payload

    async def _reply(self, event: TaskEvent) -> None:
        await self.hub.send(self.connection_id, event)
