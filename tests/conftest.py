"""Shared test fixtures and configuration."""
import os

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

# Set test environment variables before importing app
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("SESSION_PREFIX", "telephony:sess:")
os.environ.setdefault("SESSION_TTL_SECONDS", "7200")

from app.main import app
from app.core.config import Settings
from app.core.dependencies import get_session_store
from app.services.call_session.store import SessionStore


class FakeRedis:
    """In-memory stand-in for the redis.asyncio client with controllable time."""

    def __init__(self):
        self.data = {}
        self.expires_at = {}
        self.now = 0.0
        self.set_calls = []
        self.closed = False

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _expire_if_due(self, key: str) -> None:
        deadline = self.expires_at.get(key)
        if deadline is not None and self.now >= deadline:
            self.data.pop(key, None)
            self.expires_at.pop(key, None)

    async def get(self, key: str):
        self._expire_if_due(key)
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int = None):
        self.set_calls.append((key, ex))
        self.data[key] = value
        if ex is None:
            self.expires_at.pop(key, None)
        else:
            self.expires_at[key] = self.now + ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._expire_if_due(key)
            if key in self.data:
                removed += 1
            self.data.pop(key, None)
            self.expires_at.pop(key, None)
        return removed

    async def ttl(self, key: str) -> int:
        self._expire_if_due(key)
        if key not in self.data:
            return -2
        deadline = self.expires_at.get(key)
        if deadline is None:
            return -1
        return int(deadline - self.now)

    async def aclose(self) -> None:
        self.closed = True


class FailingRedis:
    """Client whose every call fails as if the backend were down."""

    async def get(self, key: str):
        raise RedisConnectionError("Connection refused")

    async def set(self, key: str, value: str, ex: int = None):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys: str):
        raise RedisConnectionError("Connection refused")

    async def aclose(self) -> None:
        return None


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        redis_url="redis://localhost:6379/15",
        session_prefix="telephony:sess:",
        session_ttl_seconds=7200,
        default_provider_mode=None,
    )


@pytest.fixture
def fake_redis():
    """Fresh in-memory Redis double."""
    return FakeRedis()


@pytest.fixture
def session_store(fake_redis, test_settings):
    """Session store backed by the in-memory double."""
    return SessionStore(
        prefix=test_settings.session_prefix,
        ttl_seconds=test_settings.session_ttl_seconds,
        client=fake_redis,
    )


@pytest.fixture
def failing_store():
    """Session store whose backend is unreachable."""
    return SessionStore(client=FailingRedis())


def _client_for(store, test_settings, monkeypatch):
    app.dependency_overrides[get_session_store] = lambda: store
    monkeypatch.setattr("app.core.config.settings", test_settings)
    monkeypatch.setattr("app.api.webhooks.voice.settings", test_settings)
    return TestClient(app)


@pytest.fixture
def test_client(session_store, test_settings, monkeypatch):
    """Create FastAPI test client with the in-memory session store."""
    client = _client_for(session_store, test_settings, monkeypatch)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def degraded_client(failing_store, test_settings, monkeypatch):
    """Create FastAPI test client whose session backend is down."""
    client = _client_for(failing_store, test_settings, monkeypatch)

    yield client

    app.dependency_overrides.clear()
