from __future__ import annotations

from types import SimpleNamespace

from vapecave.db.session import build_engine
from vapecave.services import storage as storage_module
from vapecave.services.db_storage import DatabaseStorage
from vapecave.services.memory_storage import MemoryStorage


def _settings(database_url: str | None) -> SimpleNamespace:
    return SimpleNamespace(database_url=database_url, db_pool_size=1, db_max_overflow=0, db_create_tables=True)


def test_no_database_url_selects_memory_storage() -> None:
    assert isinstance(storage_module.create_storage(_settings(None)), MemoryStorage)
    assert isinstance(storage_module.create_storage(_settings("   ")), MemoryStorage)


def test_reachable_database_selects_database_storage(tmp_path) -> None:
    selected = storage_module.create_storage(_settings(f"sqlite:///{tmp_path / 'ok.db'}"))

    try:
        assert isinstance(selected, DatabaseStorage)
    finally:
        selected.engine.dispose()


def test_unreachable_database_falls_back_to_memory(tmp_path) -> None:
    missing_dir = tmp_path / "does-not-exist" / "nested"
    selected = storage_module.create_storage(_settings(f"sqlite:///{missing_dir / 'db.sqlite'}"))

    assert isinstance(selected, MemoryStorage)


def test_failed_health_check_falls_back_to_memory(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(storage_module, "_database_is_healthy", lambda storage: False)

    selected = storage_module.create_storage(_settings(f"sqlite:///{tmp_path / 'ok.db'}"))

    assert isinstance(selected, MemoryStorage)


def test_driverless_postgres_url_builds_psycopg_engine(monkeypatch) -> None:
    monkeypatch.setattr(storage_module, "_database_is_healthy", lambda storage: True)
    monkeypatch.setattr(DatabaseStorage, "from_url", classmethod(_from_url_without_tables))

    selected = storage_module.create_storage(_settings("postgres://user:pw@127.0.0.1:1/vapecave"))

    try:
        assert isinstance(selected, DatabaseStorage)
        assert selected.engine.dialect.driver == "psycopg"
    finally:
        selected.engine.dispose()


def test_missing_driver_falls_back_to_memory(monkeypatch) -> None:
    def missing_driver(cls, db_url, **kwargs):
        raise ModuleNotFoundError("No module named 'psycopg2'")

    monkeypatch.setattr(DatabaseStorage, "from_url", classmethod(missing_driver))

    selected = storage_module.create_storage(_settings("postgresql://user:pw@127.0.0.1:1/vapecave"))

    assert isinstance(selected, MemoryStorage)


def _from_url_without_tables(cls, db_url, *, pool_size=5, max_overflow=5, create_tables=True):
    return cls(build_engine(db_url, pool_size=pool_size, max_overflow=max_overflow))
