from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

# Hosted Postgres providers hand out driverless URLs; psycopg 3 is the installed driver.
_DRIVERLESS_POSTGRES = {"postgres", "postgresql"}
POSTGRES_DRIVER = "postgresql+psycopg"


def normalize_database_url(db_url: str) -> str:
    url = make_url(db_url.strip())
    if url.drivername in _DRIVERLESS_POSTGRES:
        url = url.set(drivername=POSTGRES_DRIVER)
    return url.render_as_string(hide_password=False)


def build_engine(db_url: str, *, pool_size: int = 5, max_overflow: int = 5) -> Engine:
    db_url = normalize_database_url(db_url)
    kwargs: dict[str, Any] = {}
    if make_url(db_url).get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_pre_ping=True,
            pool_size=pool_size,
            max_overflow=max_overflow,
        )
    return create_engine(db_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
