from __future__ import annotations

import os

# The app module builds an instance at import time.
os.environ["SESSION_SECRET"] = "test-session-secret"
for _name in ("DATABASE_URL", "SUPABASE_DB_URL", "SMTP_HOST", "ENVIRONMENT"):
    os.environ.pop(_name, None)

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from vapecave.core.config import get_settings
from vapecave.main import create_app
from vapecave.services.db_storage import DatabaseStorage
from vapecave.services.memory_storage import MemoryStorage

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+pysqlite:///{tmp_path / 'vapecave.db'}"


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path: Path):
    if request.param == "memory":
        yield MemoryStorage()
        return
    db_storage = DatabaseStorage.from_url(sqlite_url(tmp_path))
    yield db_storage
    db_storage.engine.dispose()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def app(memory_storage: MemoryStorage):
    return create_app(storage=memory_storage)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_user(memory_storage: MemoryStorage):
    return memory_storage.create_user({"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD, "is_admin": True})


@pytest.fixture
def admin_client(client: TestClient, admin_user) -> TestClient:
    response = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
