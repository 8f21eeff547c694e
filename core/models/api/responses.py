"""API response models."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    timestamp: str
    active_tasks: int = Field(..., ge=0, description="Tasks currently scheduled")
    connections: int = Field(..., ge=0, description="Open WebSocket connections")
