"""Bounded per-task log retention."""

from collections import deque
from collections.abc import Iterator

from core.constants import LOG_BUFFER_CAPACITY
from core.models.domain.task import LogEntry


class LogBuffer:
    """Append-only ring of log entries; the oldest entry is evicted first."""

    def __init__(self, capacity: int = LOG_BUFFER_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def snapshot(self) -> list[LogEntry]:
        """Return the entries oldest to newest as an independent list."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.snapshot())
