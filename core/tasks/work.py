"""Pluggable unit of work performed once per task cycle."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from core.log import get_logger
from core.models.domain.task import TaskConfig

logger = get_logger(__name__)


class UnitOfWork(ABC):
    """Abstract base class for the action a task performs each cycle."""

    @abstractmethod
    async def perform(self, payload: str) -> None:
        """Perform the action for one composed payload.

        Any exception raised here is recorded as a failed cycle; it never
        stops the task.
        """
        pass

    async def on_start(self) -> None:
        """Called once before the first cycle and after every auto-restart."""
        pass

    async def on_stop(self) -> None:
        """Called when the task stops and before every auto-restart."""
        pass


class LoggingUnitOfWork(UnitOfWork):
    """Default unit of work: records each payload in the application log."""

    def __init__(self, config: TaskConfig) -> None:
        self.target = config.target or "default"
        self.delivered = 0

    async def perform(self, payload: str) -> None:
        self.delivered += 1
        logger.info(f"Delivered to {self.target}: {payload}")

    async def on_start(self) -> None:
        logger.debug(f"Unit of work for {self.target} started")

    async def on_stop(self) -> None:
        logger.debug(f"Unit of work for {self.target} stopped")


UnitOfWorkFactory = Callable[[TaskConfig], UnitOfWork]


def default_work_factory(config: TaskConfig) -> UnitOfWork:
    """Build the unit of work used when the app is not given another one."""
    return LoggingUnitOfWork(config)
