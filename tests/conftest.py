import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECURITY__SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE__URL", f"sqlite+aiosqlite:///{BASE_DIR / 'test.db'}")

from planbee.core.config import get_settings  # noqa: E402  (import after env vars are set)
from planbee.interfaces.http.deps import get_clock  # noqa: E402
from planbee.main import create_app  # noqa: E402


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture()
def clock():
    return FakeClock(datetime.now(timezone.utc))


@pytest.fixture()
def database_url(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'planbee.db'}"
    monkeypatch.setenv("DATABASE__URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest.fixture()
def app(database_url, clock):
    application = create_app()
    application.dependency_overrides[get_clock] = lambda: clock
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def register(client):
    def _register(**overrides):
        body = {
            "email": "a@x.com",
            "password": "secret1",
            "tag": "john_doe",
            "username": "John",
        }
        body.update(overrides)
        return client.post("/api/auth/register", json=body)

    return _register
