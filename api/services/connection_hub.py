"""Routing of outbound events to individual connections."""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from core.log import get_logger
from core.models.api.events import TaskEvent
from core.types import ConnectionID

logger = get_logger(__name__)

Sender = Callable[[dict[str, Any]], Awaitable[None]]


class ConnectionHub:
    """Tracks open connections and delivers events to exactly one of them."""

    def __init__(self) -> None:
        self._senders: dict[ConnectionID, Sender] = {}
        self._send_locks: dict[ConnectionID, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._senders)

    def register(self, sender: Sender, connection_id: ConnectionID | None = None) -> ConnectionID:
        """Register an open channel.

        Args:
            sender: Coroutine function writing one JSON object to the channel
            connection_id: Explicit id, generated when omitted

        Returns:
            The connection id
        """
        connection_id = connection_id or uuid.uuid4().hex
        self._senders[connection_id] = sender
        self._send_locks[connection_id] = asyncio.Lock()
        logger.info(f"Connection {connection_id} opened ({len(self)} open)")
        return connection_id

    def unregister(self, connection_id: ConnectionID) -> None:
        if self._senders.pop(connection_id, None) is not None:
            logger.info(f"Connection {connection_id} closed ({len(self)} open)")
        self._send_locks.pop(connection_id, None)

    def is_connected(self, connection_id: ConnectionID) -> bool:
        return connection_id in self._senders

    async def send(self, connection_id: ConnectionID, event: TaskEvent) -> bool:
        """Deliver an event to one connection.

        Returns:
            False when the connection is gone or the write failed
        """
        sender = self._senders.get(connection_id)
        lock = self._send_locks.get(connection_id)
        if sender is None or lock is None:
            logger.debug(f"Dropping {event.type} event for closed connection {connection_id}")
            return False

        try:
            async with lock:
                await sender(event.to_wire())
        except Exception as e:
            logger.warning(
                f"Failed to send {event.type} event to {connection_id}, "
                f"removing connection: {e}"
            )
            self.unregister(connection_id)
            return False
        return True
