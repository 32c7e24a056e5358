from fastapi.testclient import TestClient

from vapecave.main import create_app
from vapecave.services.memory_storage import MemoryStorage


def test_health_returns_ok() -> None:
    app = create_app(storage=MemoryStorage())
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "storage": "MemoryStorage"}
    assert response.headers["X-Request-ID"]


def test_health_echoes_safe_request_id() -> None:
    client = TestClient(create_app(storage=MemoryStorage()))

    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


def test_health_replaces_unsafe_request_id() -> None:
    client = TestClient(create_app(storage=MemoryStorage()))

    response = client.get("/health", headers={"X-Request-ID": "bad id<script>"})

    assert response.headers["X-Request-ID"] != "bad id<script>"


def test_create_app_requires_session_secret(monkeypatch) -> None:
    import pytest

    from vapecave.core.config import get_settings
    from vapecave.core.exceptions import ConfigurationError

    monkeypatch.delenv("SESSION_SECRET", raising=False)
    get_settings.cache_clear()

    with pytest.raises(ConfigurationError):
        create_app(storage=MemoryStorage())
