"""Shared fixtures for API integration tests"""
import pytest
import httpx
from typing import AsyncGenerator, Dict
from unittest.mock import patch
from uuid import uuid4

from progression import config
from progression.api.middleware import limiter
from progression.api.routes import get_services
from progression.api.server import create_api_application


@pytest.fixture
def app(services, test_api_key):
    """
    API application wired to the in-memory service container.

    The lifespan (pool, settings, global container) does not run under
    ASGITransport; services are injected through dependency overrides.
    """
    with patch.object(config, "API_KEYS", [test_api_key]), patch.object(limiter, "enabled", False):
        application = create_api_application()
        application.dependency_overrides[get_services] = lambda: services
        yield application


@pytest.fixture
def auth_headers(test_api_key: str) -> Dict[str, str]:
    """Valid authentication headers"""
    return {"Authorization": f"Bearer {test_api_key}"}


@pytest.fixture
async def api_client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client talking to the app in-process"""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
        timeout=30.0,
        follow_redirects=True
    ) as client:
        yield client


@pytest.fixture
def unique_user_id() -> str:
    """Generate unique user ID for test isolation"""
    return f"test_user_{uuid4().hex[:12]}"
