# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import asyncio
import pytest
from fastapi.testclient import TestClient
from typing import Generator, Optional

from main import create_app
from core.session import get_identity_source
from models.enums import Role
from models.identity import Identity


class FakeIdentitySource:
    """Stands in for Supabase Auth: token → Identity table."""

    def __init__(self, identities: Optional[dict] = None, error: Exception = None, delay: float = 0.0):
        self.identities = identities or {}
        self.error = error
        self.delay = delay
        self.calls = []
        self.invalidated = []

    async def get_current_identity(self, token: str) -> Optional[Identity]:
        self.calls.append(token)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.identities.get(token)

    def invalidate(self, token: str) -> None:
        self.invalidated.append(token)


def make_identity(role: Role, is_active: bool = True, user_id: str = None) -> Identity:
    return Identity(
        id=user_id or f"{role.value}-user-id",
        role=role,
        is_active=is_active,
        email=f"{role.value}@example.com",
    )


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def identities():
    """One active identity per role plus an inactive landlord."""
    table = {f"{role.value}-token": make_identity(role) for role in Role}
    table["inactive-token"] = make_identity(Role.landlord, is_active=False, user_id="inactive-id")
    return table


@pytest.fixture
def identity_source(identities):
    return FakeIdentitySource(identities)


@pytest.fixture(scope="function")
def app(identity_source):
    """Create a test FastAPI application instance."""
    app = create_app()
    app.dependency_overrides[get_identity_source] = lambda: identity_source
    return app


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client that does not follow redirects."""
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_state():
    """Reset identity cache and rate limits before each test."""
    from core.cache import cache_clear
    from core.rate_limiter import reset_rate_limits
    cache_clear()
    reset_rate_limits()
    yield
    cache_clear()
    reset_rate_limits()
