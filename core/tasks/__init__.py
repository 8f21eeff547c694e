"""Task lifecycle management: log buffers, tasks, scheduling and registry."""

from .exceptions import (
    CycleFailure,
    MalformedRequestError,
    TaskNotFoundError,
    TaskRunnerError,
    TaskValidationError,
)
from .log_buffer import LogBuffer
from .registry import TaskRegistry, generate_task_id
from .scheduler import EventNotifier, ScheduleHandle, ScheduleStatus, TaskScheduler
from .task import Task
from .work import LoggingUnitOfWork, UnitOfWork, UnitOfWorkFactory, default_work_factory

__all__ = [
    "CycleFailure",
    "EventNotifier",
    "LogBuffer",
    "LoggingUnitOfWork",
    "MalformedRequestError",
    "ScheduleHandle",
    "ScheduleStatus",
    "Task",
    "TaskNotFoundError",
    "TaskRegistry",
    "TaskRunnerError",
    "TaskScheduler",
    "TaskValidationError",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "default_work_factory",
    "generate_task_id",
]
