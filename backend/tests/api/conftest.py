"""API-specific test fixtures."""

import time

import jwt as pyjwt
import pytest
from httpx import ASGITransport, AsyncClient

from serious_people.api.deps import get_generator
from serious_people.artifacts.generator_fake import FakeContentGenerator
from serious_people.core.config import get_settings


def _make_token(user_id: str, admin: bool = False, expires_in: int = 3600) -> str:
    """Sign a session JWT with the test secret."""
    settings = get_settings()
    payload = {"sub": user_id, "exp": int(time.time()) + expires_in}
    if admin:
        payload["public_metadata"] = {"admin": True}
    return pyjwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)


def _auth_headers(user_id: str, admin: bool = False) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(user_id, admin=admin)}"}


@pytest.fixture
def api_generator() -> FakeContentGenerator:
    """Generator used by route dependencies; swap the scenario per test."""
    return FakeContentGenerator()


@pytest.fixture
def app(engine, fake_redis, api_generator):
    """FastAPI app wired to the SQLite test database and fake Redis.

    ASGITransport does not run the lifespan; the engine and fake_redis
    fixtures install the database and Redis instead.
    Background tasks finish before the in-process response is returned.
    """
    from serious_people.main import create_app

    app = create_app()
    app.dependency_overrides[get_generator] = lambda: api_generator
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def make_token():
    """Factory: make_token(user_id, admin=False, expires_in=3600) -> signed JWT."""
    return _make_token


@pytest.fixture
def auth_headers():
    """Factory: auth_headers(user_id, admin=False) -> Authorization header dict."""
    return _auth_headers
