"""Task management domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.types import LogSeverity


class LogEntry(BaseModel):
    """A single timestamped line of a task's log."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    message: str
    severity: LogSeverity = LogSeverity.INFO


class TaskConfig(BaseModel):
    """Immutable snapshot of what a task was started with."""

    model_config = ConfigDict(frozen=True)

    items: tuple[str, ...] = Field(..., description="Ordered work items")
    interval_seconds: float = Field(..., gt=0, description="Seconds between cycles")
    prefix: str = ""
    suffix: str = ""
    target: str = Field(default="", description="Opaque destination label")
    credentials: str = Field(
        default="", repr=False, description="Opaque credential blob, never parsed"
    )

    def compose(self, item: str) -> str:
        """Build the outbound payload for one work item."""
        return f"{self.prefix} {item} {self.suffix}".strip()


class TaskStats(BaseModel):
    """Counters of a running task. All counters only ever grow."""

    sent: int = 0
    failed: int = 0
    loops_completed: int = 0
    restarts: int = 0
    consecutive_failures: int = 0
    last_cycle_time: datetime | None = None
    last_error_time: datetime | None = None
