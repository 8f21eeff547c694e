"""Global pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from logging import Logger

import pytest
import pytest_asyncio

from api.services.connection_hub import ConnectionHub
from core import setup_test_logging
from core.config import Settings
from core.tasks import TaskRegistry, TaskScheduler
from core.types import Environment

from tests.utils.test_helpers import RecordingNotifier, RecordingUnitOfWork


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from core import get_logger

    return get_logger("test")


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests; a long default interval keeps sockets quiet."""
    return Settings(
        environment=Environment.TESTING,
        log_level="DEBUG",
        default_interval_seconds=60.0,
        min_interval_seconds=0.05,
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def work() -> RecordingUnitOfWork:
    """Unit of work shared by every task the registry fixture creates."""
    return RecordingUnitOfWork()


@pytest_asyncio.fixture
async def registry(
    notifier: RecordingNotifier, work: RecordingUnitOfWork
) -> AsyncGenerator[TaskRegistry, None]:
    """Task registry driven by a recording notifier."""
    registry = TaskRegistry(TaskScheduler(notifier=notifier), work_factory=lambda _: work)
    yield registry
    await registry.shutdown()


@pytest.fixture
def hub() -> ConnectionHub:
    return ConnectionHub()


@pytest_asyncio.fixture
async def hub_registry(hub: ConnectionHub) -> AsyncGenerator[TaskRegistry, None]:
    """Task registry whose events flow through a real connection hub."""
    registry = TaskRegistry(
        TaskScheduler(notifier=hub), work_factory=lambda _: RecordingUnitOfWork()
    )
    yield registry
    await registry.shutdown()
