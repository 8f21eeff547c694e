"""Per-task periodic execution.

Every task gets its own ``asyncio.Task`` running a fixed-rate loop: the k-th
cycle fires at ``start + k * interval``. A cycle that overruns one or more
ticks makes the loop skip the missed ticks instead of replaying them.
"""

import asyncio
from enum import Enum
from typing import Protocol

from core.constants import CYCLE_GRACE_SECONDS
from core.log import get_logger, get_task_logger
from core.models.api.events import LogEvent, TaskEvent
from core.tasks.task import Task
from core.types import ConnectionID

logger = get_logger(__name__)


class ScheduleStatus(Enum):
    """Status of a task's periodic loop."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class EventNotifier(Protocol):
    """Delivers events to a single connection."""

    async def send(self, connection_id: ConnectionID, event: TaskEvent) -> bool: ...


class ScheduleHandle:
    """Cancellable handle of one task's periodic loop."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        self.status = ScheduleStatus.IDLE
        self._stop_event = asyncio.Event()
        self._runner: asyncio.Task[None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    @property
    def done(self) -> bool:
        return self._runner is None or self._runner.done()

    def cancel(self) -> None:
        """Stop scheduling cycles.

        Takes effect immediately: no cycle starts after this returns. A cycle
        already running is left to finish.
        """
        self._stop_event.set()

    async def wait(self) -> None:
        """Wait until the loop has exited."""
        if self._runner is None:
            return
        try:
            await self._runner
        except asyncio.CancelledError:
            pass

    async def stop(self, grace: float = CYCLE_GRACE_SECONDS) -> None:
        """Cancel the loop and wait for it to exit.

        A cycle still running after ``grace`` seconds is interrupted.
        """
        self.cancel()
        if self._runner is None or self._runner.done():
            return

        await asyncio.wait({self._runner}, timeout=grace)
        if not self._runner.done():
            logger.warning(
                f"Task {self.task_id} did not stop within {grace:g}s, interrupting"
            )
            self._runner.cancel()
        await self.wait()


class TaskScheduler:
    """Drives each task's cycles on its own timer."""

    def __init__(self, notifier: EventNotifier | None = None) -> None:
        """Initialize the scheduler.

        Args:
            notifier: Where cycle log events are delivered; events are
                dropped when no notifier is given
        """
        self.notifier = notifier

    def schedule(self, task: Task) -> ScheduleHandle:
        """Start the periodic loop of a task and attach its handle."""
        handle = ScheduleHandle(task.id)
        task.handle = handle
        handle._runner = asyncio.create_task(
            self._periodic_loop(task, handle), name=f"task-{task.id}"
        )
        logger.debug(
            f"Scheduled task {task.id} every {task.config.interval_seconds}s"
        )
        return handle

    async def _periodic_loop(self, task: Task, handle: ScheduleHandle) -> None:
        """Background loop for one task."""
        task_logger = get_task_logger(__name__, task.id)
        loop = asyncio.get_running_loop()
        interval = task.config.interval_seconds

        try:
            await task.work.on_start()
        except Exception as e:
            task_logger.error(f"Unit of work failed to start: {e}")

        handle.status = ScheduleStatus.RUNNING
        start = loop.time()
        last_tick = 0
        task_logger.info("Periodic loop started")

        try:
            while not handle.cancelled:
                tick = max(last_tick + 1, int((loop.time() - start) // interval) + 1)
                delay = start + tick * interval - loop.time()

                # Wait for next tick or stop signal
                if delay > 0:
                    try:
                        await asyncio.wait_for(handle._stop_event.wait(), timeout=delay)
                        break
                    except asyncio.TimeoutError:
                        pass

                if handle.cancelled:
                    break
                last_tick = tick

                try:
                    entries = await task.run_cycle()
                    for entry in entries:
                        # A stop may land while an earlier entry is being sent
                        if handle.cancelled:
                            break
                        await self._emit(task, LogEvent.from_entry(task.id, entry))
                except Exception as e:
                    task_logger.error(f"Error in periodic loop: {e}")
        finally:
            handle.status = ScheduleStatus.STOPPED
            try:
                await task.work.on_stop()
            except Exception as e:
                task_logger.error(f"Error during unit of work cleanup: {e}")
            task_logger.info("Periodic loop stopped")

    async def _emit(self, task: Task, event: TaskEvent) -> None:
        if self.notifier is None:
            return
        await self.notifier.send(task.owner, event)
