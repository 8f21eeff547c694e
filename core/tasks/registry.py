"""Registry of live tasks keyed by their opaque id."""

import asyncio
import uuid
from collections.abc import Callable

from core.constants import (
    CYCLE_GRACE_SECONDS,
    LOG_BUFFER_CAPACITY,
    RESTART_FAILURE_THRESHOLD,
)
from core.log import get_logger
from core.models.domain.task import TaskConfig
from core.tasks.exceptions import TaskNotFoundError
from core.tasks.scheduler import TaskScheduler
from core.tasks.task import Task
from core.tasks.work import UnitOfWorkFactory, default_work_factory
from core.types import ConnectionID, TaskID

logger = get_logger(__name__)


def generate_task_id() -> TaskID:
    """Generate a fresh opaque task id."""
    return uuid.uuid4().hex


class TaskRegistry:
    """Map from task id to task, shared by every connection.

    All mutations are synchronous and run on the event loop thread, so a
    lookup never observes a task that is removed but still scheduled or the
    other way around.
    """

    def __init__(
        self,
        scheduler: TaskScheduler,
        work_factory: UnitOfWorkFactory = default_work_factory,
        log_capacity: int = LOG_BUFFER_CAPACITY,
        restart_failure_threshold: int = RESTART_FAILURE_THRESHOLD,
        id_factory: Callable[[], TaskID] = generate_task_id,
    ) -> None:
        self._scheduler = scheduler
        self._work_factory = work_factory
        self._log_capacity = log_capacity
        self._restart_failure_threshold = restart_failure_threshold
        self._id_factory = id_factory
        self._tasks: dict[TaskID, Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def create(self, config: TaskConfig, owner: ConnectionID) -> Task:
        """Build a task, start its schedule and store it.

        Args:
            config: Frozen task configuration
            owner: Id of the connection creating the task

        Returns:
            The scheduled task
        """
        task = Task(
            task_id=self._allocate_id(),
            owner=owner,
            config=config,
            work=self._work_factory(config),
            log_capacity=self._log_capacity,
            restart_failure_threshold=self._restart_failure_threshold,
        )
        self._scheduler.schedule(task)
        self._tasks[task.id] = task
        logger.info(
            f"Created task {task.id} for {owner} "
            f"({len(config.items)} items every {config.interval_seconds}s)"
        )
        return task

    def lookup(self, task_id: TaskID) -> Task:
        """Get a live task.

        Raises:
            TaskNotFoundError: If no live task has this id
        """
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def remove(self, task_id: TaskID) -> Task:
        """Cancel a task's schedule and forget it.

        Raises:
            TaskNotFoundError: If no live task has this id
        """
        task = self._tasks.pop(task_id, None)
        if task is None:
            raise TaskNotFoundError(task_id)
        if task.handle is not None:
            task.handle.cancel()
        logger.info(f"Removed task {task_id}")
        return task

    def remove_all_owned_by(self, owner: ConnectionID) -> list[Task]:
        """Remove every task created by a connection."""
        owned = [task_id for task_id, task in self._tasks.items() if task.owner == owner]
        removed = [self.remove(task_id) for task_id in owned]
        if removed:
            logger.info(f"Removed {len(removed)} task(s) owned by {owner}")
        return removed

    def owned_by(self, owner: ConnectionID) -> list[Task]:
        return [task for task in self._tasks.values() if task.owner == owner]

    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    async def shutdown(self, grace: float = CYCLE_GRACE_SECONDS) -> None:
        """Remove every task and wait for their loops to exit.

        Args:
            grace: Seconds a running cycle may take to finish before its
                loop is interrupted
        """
        removed = [self.remove(task_id) for task_id in list(self._tasks)]
        await asyncio.gather(
            *(task.handle.stop(grace) for task in removed if task.handle is not None)
        )
        logger.info(f"Task registry shut down ({len(removed)} task(s) stopped)")

    def _allocate_id(self) -> TaskID:
        while True:
            task_id = self._id_factory()
            if task_id not in self._tasks:
                return task_id
