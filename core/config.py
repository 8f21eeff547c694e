"""Configuration management for the looprunner system."""

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_WEBSOCKET_PATH,
    LOG_BUFFER_CAPACITY,
    MIN_INTERVAL_SECONDS,
    RESTART_FAILURE_THRESHOLD,
)
from .types import Environment


class Settings(BaseModel):
    """Application settings."""

    # Environment
    version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )

    # API Settings
    api_title: str = Field(default="LoopRunner API", description="API title")
    api_version: str = Field(default="1.0.0", description="API version")
    websocket_path: str = Field(
        default=DEFAULT_WEBSOCKET_PATH, description="Path of the task WebSocket"
    )

    # CORS Settings
    cors_allow_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Task Settings
    default_interval_seconds: float = Field(
        default=DEFAULT_INTERVAL_SECONDS,
        description="Cycle interval used when the client sends none or garbage",
    )
    min_interval_seconds: float = Field(
        default=MIN_INTERVAL_SECONDS,
        description="Smallest cycle interval a client may request",
    )
    log_buffer_capacity: int = Field(
        default=LOG_BUFFER_CAPACITY,
        description="Number of log entries retained per task",
    )
    restart_failure_threshold: int = Field(
        default=RESTART_FAILURE_THRESHOLD,
        description="Consecutive cycle failures before the unit of work restarts",
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.min_interval_seconds <= 0:
            raise ValueError("min_interval_seconds must be positive")
        # Default interval may never undercut the minimum
        if self.default_interval_seconds < self.min_interval_seconds:
            self.default_interval_seconds = self.min_interval_seconds

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    # Parse CORS origins from comma-separated string
    cors_origins_str = os.getenv("LOOPRUNNER_CORS_ORIGINS", "*")
    if cors_origins_str == "*":
        cors_origins = ["*"]
    else:
        cors_origins = [origin.strip() for origin in cors_origins_str.split(",")]

    # Parse task settings
    default_interval = float(
        os.getenv("LOOPRUNNER_DEFAULT_INTERVAL", str(DEFAULT_INTERVAL_SECONDS))
    )
    min_interval = float(
        os.getenv("LOOPRUNNER_MIN_INTERVAL", str(MIN_INTERVAL_SECONDS))
    )
    log_capacity = int(os.getenv("LOOPRUNNER_LOG_CAPACITY", str(LOG_BUFFER_CAPACITY)))
    restart_threshold = int(
        os.getenv("LOOPRUNNER_RESTART_THRESHOLD", str(RESTART_FAILURE_THRESHOLD))
    )

    return Settings(
        environment=Environment(os.getenv("LOOPRUNNER_ENV", "development")),
        api_title=os.getenv("LOOPRUNNER_API_TITLE", "LoopRunner API"),
        api_version=os.getenv("LOOPRUNNER_API_VERSION", "1.0.0"),
        websocket_path=os.getenv("LOOPRUNNER_WS_PATH", DEFAULT_WEBSOCKET_PATH),
        cors_allow_origins=cors_origins,
        log_level=os.getenv("LOOPRUNNER_LOG_LEVEL", "INFO").upper(),
        default_interval_seconds=default_interval,
        min_interval_seconds=min_interval,
        log_buffer_capacity=log_capacity,
        restart_failure_threshold=restart_threshold,
    )


# Global settings instance
settings = load_settings()
