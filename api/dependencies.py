"""FastAPI dependencies for services held in app state.

Dependencies take an ``HTTPConnection`` so they resolve for both HTTP and
WebSocket routes.
"""

from fastapi.requests import HTTPConnection

from api.services.connection_hub import ConnectionHub
from core.config import Settings
from core.tasks import TaskRegistry


def get_settings(connection: HTTPConnection) -> Settings:
    """Get settings from app state."""
    settings: Settings = connection.app.state.settings
    return settings


def get_task_registry(connection: HTTPConnection) -> TaskRegistry:
    """Get the task registry from app state."""
    registry: TaskRegistry = connection.app.state.task_registry
    return registry


def get_connection_hub(connection: HTTPConnection) -> ConnectionHub:
    """Get the connection hub from app state."""
    hub: ConnectionHub = connection.app.state.connection_hub
    return hub
