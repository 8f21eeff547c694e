"""A single recurring task and its per-cycle algorithm."""

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING

from core.constants import (
    CREDENTIALS_PER_TASK,
    CYCLE_GRACE_SECONDS,
    LOG_BUFFER_CAPACITY,
    RESTART_FAILURE_THRESHOLD,
)
from core.log import get_task_logger
from core.models.domain.task import LogEntry, TaskConfig, TaskStats
from core.tasks.log_buffer import LogBuffer
from core.tasks.work import UnitOfWork
from core.types import ConnectionID, LogSeverity, TaskID

if TYPE_CHECKING:
    from core.tasks.scheduler import ScheduleHandle


class Task:
    """Recurring work owned by one connection.

    State is only mutated by the task's own cycles and by the stop path for
    the same id. Cycles are serialized through ``_lock`` so two cycles of one
    task never interleave.
    """

    def __init__(
        self,
        task_id: TaskID,
        owner: ConnectionID,
        config: TaskConfig,
        work: UnitOfWork,
        log_capacity: int = LOG_BUFFER_CAPACITY,
        restart_failure_threshold: int = RESTART_FAILURE_THRESHOLD,
    ) -> None:
        self.id = task_id
        self.owner = owner
        self.config = config
        self.work = work
        self.restart_failure_threshold = restart_failure_threshold

        self.stats = TaskStats()
        self.cursor = 0
        self.logs = LogBuffer(log_capacity)
        self.created_at = datetime.now()
        self.handle: "ScheduleHandle | None" = None

        self._lock = asyncio.Lock()
        self._logger = get_task_logger(__name__, task_id)

    @property
    def cancelled(self) -> bool:
        return self.handle is not None and self.handle.cancelled

    @property
    def active_credentials(self) -> int:
        """Number of credential blobs attached to this task."""
        return CREDENTIALS_PER_TASK if self.config.credentials else 0

    def log(self, message: str, severity: LogSeverity = LogSeverity.INFO) -> LogEntry:
        """Append an entry to the task log and return it."""
        entry = LogEntry(message=message, severity=severity)
        self.logs.append(entry)
        return entry

    async def log_locked(
        self,
        message: str,
        severity: LogSeverity = LogSeverity.INFO,
        timeout: float = CYCLE_GRACE_SECONDS,
    ) -> LogEntry:
        """Append an entry once any in-flight cycle has finished.

        A cycle still running after ``timeout`` seconds does not hold the
        entry back.
        """
        try:
            await asyncio.wait_for(self._lock.acquire(), timeout=timeout)
        except asyncio.TimeoutError:
            self._logger.warning(f"Cycle still running after {timeout:g}s")
            return self.log(message, severity)

        try:
            return self.log(message, severity)
        finally:
            self._lock.release()

    async def run_cycle(self) -> list[LogEntry]:
        """Execute one cycle of work.

        Returns:
            Log entries produced by the cycle, empty when there is nothing
            to do
        """
        items = self.config.items
        if not items:
            return []

        async with self._lock:
            item = items[self.cursor]
            self.cursor = (self.cursor + 1) % len(items)
            if self.cursor == 0:
                self.stats.loops_completed += 1

            payload = self.config.compose(item)
            self.stats.last_cycle_time = datetime.now()

            try:
                await self.work.perform(payload)
            except Exception as e:
                entries = [self._record_failure(payload, e)]
                if (
                    self.restart_failure_threshold > 0
                    and self.stats.consecutive_failures
                    >= self.restart_failure_threshold
                ):
                    entries.append(await self._restart())
                return entries

            self.stats.sent += 1
            self.stats.consecutive_failures = 0
            return [self.log(f"Sent: {payload}", LogSeverity.SUCCESS)]

    def _record_failure(self, payload: str, error: Exception) -> LogEntry:
        self.stats.failed += 1
        self.stats.consecutive_failures += 1
        self.stats.last_error_time = datetime.now()
        self._logger.warning(f"Cycle failed: {error}")
        return self.log(f"Failed to send '{payload}': {error}", LogSeverity.ERROR)

    async def _restart(self) -> LogEntry:
        """Restart the unit of work after a streak of failed cycles."""
        streak = self.stats.consecutive_failures
        self.stats.restarts += 1
        self.stats.consecutive_failures = 0
        self._logger.warning(f"Auto-recovery after {streak} consecutive failures")

        try:
            await self.work.on_stop()
            await self.work.on_start()
        except Exception as e:
            self._logger.error(f"Auto-recovery restart failed: {e}")
            return self.log(f"Auto-recovery restart failed: {e}", LogSeverity.ERROR)

        return self.log(
            f"Auto-recovery: restarted after {streak} consecutive failures",
            LogSeverity.WARNING,
        )
