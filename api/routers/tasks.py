"""WebSocket router for task control."""

from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket

from api.dependencies import get_connection_hub, get_settings, get_task_registry
from api.services.connection_hub import ConnectionHub
from api.services.gateway import ConnectionGateway
from core.config import Settings
from core.constants import DEFAULT_WEBSOCKET_PATH
from core.log import get_logger
from core.tasks import TaskRegistry

logger = get_logger(__name__)


async def task_socket(
    websocket: WebSocket,
    registry: Annotated[TaskRegistry, Depends(get_task_registry)],
    hub: Annotated[ConnectionHub, Depends(get_connection_hub)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Serve one client: every request in, every owned event out."""
    await websocket.accept()
    connection_id = hub.register(websocket.send_json)
    gateway = ConnectionGateway(connection_id, hub, registry, settings)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await gateway.handle_message(raw)
    finally:
        hub.unregister(connection_id)
        removed = gateway.close()
        logger.info(f"Connection {connection_id} gone, {removed} task(s) removed")


def create_tasks_router(websocket_path: str = DEFAULT_WEBSOCKET_PATH) -> APIRouter:
    """Create the task router serving the WebSocket at ``websocket_path``."""
    router = APIRouter(tags=["tasks"])
    router.add_api_websocket_route(websocket_path, task_socket, name="task_socket")
    return router
