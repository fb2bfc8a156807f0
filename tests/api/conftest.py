"""
API test fixtures.

Provides a FastAPI TestClient with authentication and services overridden.
The lifespan is not entered, so no real clients are built.

Dependencies: fastapi, pytest
System role: HTTP layer test infrastructure
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from respondo.api.deps import get_current_user, get_identity_client
from respondo.api.main import create_app
from respondo.boundary.identity.identity_client import AuthenticatedUser, IdentityClient


@pytest.fixture
def app():
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def current_user() -> AuthenticatedUser:
    return AuthenticatedUser(id="user-1", email="user@example.com")


@pytest.fixture
def mock_identity_client(current_user) -> MagicMock:
    identity = MagicMock(spec=IdentityClient)
    identity.get_user = AsyncMock(return_value=current_user)
    return identity


@pytest.fixture
def anonymous_client(app, mock_identity_client) -> TestClient:
    """Client that still goes through bearer token resolution."""
    app.dependency_overrides[get_identity_client] = lambda: mock_identity_client
    return TestClient(app)


@pytest.fixture
def client(app, current_user) -> TestClient:
    """Client whose requests are authenticated as current_user."""
    app.dependency_overrides[get_current_user] = lambda: current_user
    return TestClient(app)
