"""Application service initializer for managing startup and shutdown."""

from fastapi import FastAPI

from api.services.connection_hub import ConnectionHub
from core.config import Settings
from core.log import get_logger
from core.tasks import TaskRegistry, TaskScheduler, UnitOfWorkFactory, default_work_factory

logger = get_logger(__name__)


class AppServiceInitializer:
    """Manages initialization and lifecycle of application services."""

    def __init__(self, settings: Settings):
        """Initialize with application settings."""
        self.settings = settings
        self.connection_hub: ConnectionHub | None = None
        self.scheduler: TaskScheduler | None = None
        self.task_registry: TaskRegistry | None = None

    async def initialize_all_services(
        self,
        app: FastAPI,
        work_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        """Initialize all services and configure app.state."""
        logger.info("Initializing all application services...")

        await self.initialize_connection_services()
        await self.initialize_task_services(work_factory)
        self._setup_app_state(app)

        logger.info("All application services initialized successfully")

    async def initialize_connection_services(self) -> None:
        """Initialize the hub that routes events to connections."""
        self.connection_hub = ConnectionHub()

    async def initialize_task_services(
        self, work_factory: UnitOfWorkFactory | None = None
    ) -> None:
        """Initialize the scheduler and the task registry."""
        if not self.connection_hub:
            raise RuntimeError(
                "Connection services must be initialized before task services"
            )

        self.scheduler = TaskScheduler(notifier=self.connection_hub)
        self.task_registry = TaskRegistry(
            self.scheduler,
            work_factory=work_factory or default_work_factory,
            log_capacity=self.settings.log_buffer_capacity,
            restart_failure_threshold=self.settings.restart_failure_threshold,
        )
        logger.info(
            f"Task services ready (default interval "
            f"{self.settings.default_interval_seconds:g}s, minimum "
            f"{self.settings.min_interval_seconds:g}s)"
        )

    async def stop_all_services(self) -> None:
        """Stop every running task."""
        logger.info("Stopping all background services...")

        if self.task_registry:
            await self.task_registry.shutdown()

        logger.info("All background services stopped successfully")

    def _setup_app_state(self, app: FastAPI) -> None:
        """Configure app.state with initialized services."""
        app.state.connection_hub = self.connection_hub
        app.state.scheduler = self.scheduler
        app.state.task_registry = self.task_registry
