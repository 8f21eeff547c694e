"""Fixtures for API tests."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core.config import Settings


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client with services initialized by the lifespan."""
    with TestClient(create_app(settings=test_settings)) as client:
        yield client
