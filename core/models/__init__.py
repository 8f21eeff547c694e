"""Unified models package for looprunner system."""

# API models (requests, responses, events)
from core.models.api.events import (
    ErrorEvent,
    LogEvent,
    TaskDetailsEvent,
    TaskEvent,
    TaskStartedEvent,
    TaskStoppedEvent,
)
from core.models.api.requests import (
    StartTaskRequest,
    TaskReferenceRequest,
    resolve_interval,
)
from core.models.api.responses import HealthResponse

# Domain models (core business logic)
from core.models.domain.task import LogEntry, TaskConfig, TaskStats

__all__ = [
    "ErrorEvent",
    "HealthResponse",
    "LogEntry",
    "LogEvent",
    "StartTaskRequest",
    "TaskConfig",
    "TaskDetailsEvent",
    "TaskEvent",
    "TaskReferenceRequest",
    "TaskStartedEvent",
    "TaskStats",
    "TaskStoppedEvent",
    "resolve_interval",
]
