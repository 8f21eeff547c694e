"""Outbound WebSocket event models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.models.domain.task import LogEntry
from core.types import LogSeverity


class TaskEvent(BaseModel):
    """Base class for every event pushed to a connection."""

    model_config = ConfigDict(populate_by_name=True)

    type: str

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names, dropping unset optionals."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class TaskStartedEvent(TaskEvent):
    """A task was created for the requesting connection."""

    type: str = "task_started"
    task_id: str = Field(..., alias="taskId")


class TaskStoppedEvent(TaskEvent):
    """A task was stopped by the requesting connection."""

    type: str = "task_stopped"
    task_id: str = Field(..., alias="taskId")


class TaskDetailsEvent(TaskEvent):
    """Counters and retained log of a task."""

    type: str = "task_details"
    task_id: str = Field(..., alias="taskId")
    sent: int
    failed: int
    active_cookies_count: int = Field(..., alias="activeCookiesCount")
    loops_completed: int = Field(..., alias="loopsCompleted")
    restarts: int
    logs: list[LogEntry]


class LogEvent(TaskEvent):
    """One task log line."""

    type: str = "log"
    task_id: str = Field(..., alias="taskId")
    message: str
    message_type: LogSeverity = Field(LogSeverity.INFO, alias="messageType")

    @classmethod
    def from_entry(cls, task_id: str, entry: LogEntry) -> "LogEvent":
        return cls(task_id=task_id, message=entry.message, message_type=entry.severity)


class ErrorEvent(TaskEvent):
    """A request could not be served."""

    type: str = "error"
    message: str
    origin: str | None = Field(default=None, alias="from")
