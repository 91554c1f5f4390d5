"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from liftcoach.main import app


@pytest.fixture
def client(db_engine):
    """Test client bound to the per-test database.

    The lifespan is not entered, so init_db() does not touch the configured
    database URL.
    """
    return TestClient(app)
