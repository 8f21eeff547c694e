"""API routers package."""

from .common import router as common_router
from .tasks import create_tasks_router

__all__ = [
    "common_router",
    "create_tasks_router",
]
