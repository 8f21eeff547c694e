"""Custom exceptions for task lifecycle management."""


class TaskRunnerError(Exception):
    """Base exception for task runner errors."""

    pass


class TaskValidationError(TaskRunnerError):
    """Raised when a start request is missing a required field."""

    pass


class TaskNotFoundError(TaskRunnerError):
    """Raised when a task id is not known to the registry."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class MalformedRequestError(TaskRunnerError):
    """Raised when a request is not a JSON object or has no usable kind."""

    pass


class CycleFailure(TaskRunnerError):
    """Raised by a unit of work when one cycle could not be performed."""

    pass
