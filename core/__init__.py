"""Core functionality for the looprunner system."""

from .config import Settings, settings
from .log import (
    get_logger,
    get_task_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .types import Environment, LogSeverity

__all__ = [
    "Environment",
    "LogSeverity",
    "Settings",
    "settings",
    "get_logger",
    "get_task_logger",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
]
