"""Common API endpoints router."""

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_connection_hub, get_settings, get_task_registry
from api.services.connection_hub import ConnectionHub
from core import get_logger
from core.config import Settings
from core.models import HealthResponse
from core.tasks import TaskRegistry

logger = get_logger(__name__)

router = APIRouter(tags=["common"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
    registry: Annotated[TaskRegistry, Depends(get_task_registry)],
    hub: Annotated[ConnectionHub, Depends(get_connection_hub)],
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        timestamp=datetime.datetime.now().isoformat(),
        active_tasks=len(registry),
        connections=len(hub),
    )
