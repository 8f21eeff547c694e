"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import common_router, create_tasks_router
from api.services.app_initializer import AppServiceInitializer
from core import get_logger, setup_logging
from core.config import Settings, load_settings
from core.tasks import UnitOfWorkFactory

logger = get_logger(__name__)


def _build_lifespan(work_factory: UnitOfWorkFactory | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        settings: Settings = app.state.settings
        setup_logging(
            level=settings.log_level,
            enable_file_logging=True,
            is_test_env=settings.is_testing,
        )
        logger.info(f"Starting LoopRunner API server in {settings.environment} mode")

        initializer = AppServiceInitializer(settings)
        await initializer.initialize_all_services(app, work_factory=work_factory)
        app.state.initializer = initializer

        logger.info("LoopRunner API server initialized successfully")

        yield

        await initializer.stop_all_services()
        logger.info("LoopRunner API server shutting down")

    return lifespan


def create_app(
    settings: Settings | None = None,
    work_factory: UnitOfWorkFactory | None = None,
) -> FastAPI:
    """Create FastAPI app.

    Args:
        settings: Settings to use, loaded from the environment when omitted
        work_factory: Builds the unit of work of each new task
    """
    settings = settings or load_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Backend API for LoopRunner recurring tasks",
        version=settings.api_version,
        lifespan=_build_lifespan(work_factory),
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(common_router)
    app.include_router(create_tasks_router(settings.websocket_path))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


app = create_app()
