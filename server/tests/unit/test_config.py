from __future__ import annotations

from vapecave.core.config import AppSettings


def clear_env(monkeypatch) -> None:
    for name in ("CORS_ORIGINS", "FRONTEND_ORIGIN", "DATABASE_URL", "SUPABASE_DB_URL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


def test_resolved_cors_origins_appends_frontend_origin(monkeypatch) -> None:
    clear_env(monkeypatch)
    frontend_origin = "https://vapecavetx.com"
    monkeypatch.setenv("FRONTEND_ORIGIN", frontend_origin)

    settings = AppSettings(_env_file=None)

    origins = settings.resolved_cors_origins
    assert "http://localhost:5173" in origins
    assert frontend_origin in origins


def test_resolved_cors_origins_deduplicates(monkeypatch) -> None:
    clear_env(monkeypatch)
    frontend_origin = "https://vapecavetx.com"
    monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:5173", "https://vapecavetx.com"]')
    monkeypatch.setenv("FRONTEND_ORIGIN", f"{frontend_origin}/")

    settings = AppSettings(_env_file=None)

    assert settings.resolved_cors_origins.count(frontend_origin) == 1


def test_database_url_accepts_supabase_alias(monkeypatch) -> None:
    clear_env(monkeypatch)
    monkeypatch.setenv("SUPABASE_DB_URL", "postgresql+psycopg://pooler.example/postgres")

    settings = AppSettings(_env_file=None)

    assert settings.database_url == "postgresql+psycopg://pooler.example/postgres"


def test_production_flag_and_session_lifetime(monkeypatch) -> None:
    clear_env(monkeypatch)
    monkeypatch.setenv("ENVIRONMENT", "Production")

    settings = AppSettings(_env_file=None)

    assert settings.is_production is True
    assert settings.session_max_age_seconds == 30 * 24 * 60 * 60
