"""Common type definitions for the looprunner system."""

from enum import Enum
from typing import TypeAlias

TaskID: TypeAlias = str
ConnectionID: TypeAlias = str


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogSeverity(str, Enum):
    """Severity of a task log entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
