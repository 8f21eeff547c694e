"""Common fixtures for integration tests."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core.config import Settings
from core.log import get_logger

logger = get_logger(__name__)


@pytest.fixture
def integration_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client with the lifespan running, so tasks outlive single requests."""
    app = create_app(settings=test_settings)
    with TestClient(app) as client:
        yield client
