from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, select, text
from sqlalchemy.orm import Session

from scripts import create_admin, migrate_database, seed_products, seed_store_locations
from vapecave.db.base import Base
from vapecave.db.models import Brand, BrandCategory, Product, SessionRecord, utcnow
from vapecave.services.db_storage import DatabaseStorage


def db_url(tmp_path: Path, name: str) -> str:
    return f"sqlite:///{tmp_path / name}"


def populate_source(url: str) -> None:
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add(BrandCategory(id=7, category="Disposables", display_order=1))
        session.add(Brand(id=3, category_id=7, name="Geek Bar", image="g.png", description="", display_order=0))
        session.add(Product(id=5, name="Pod Kit", description="", price="39.99", image="p.png", category="devices"))
        session.add(SessionRecord(sid="abc", sess="{}", expire=utcnow()))
        session.commit()
    engine.dispose()


def test_migrate_copies_tables_and_preserves_ids(tmp_path: Path) -> None:
    source = db_url(tmp_path, "source.db")
    target = db_url(tmp_path, "target.db")
    populate_source(source)

    reports = migrate_database.migrate(source_url=source, target_url=target)

    by_table = {report.table: report for report in reports}
    assert by_table["brand_categories"].copied == 1
    assert by_table["brands"].target_count == 1
    assert "sessions" not in by_table

    engine = create_engine(target)
    with Session(engine) as session:
        assert session.scalars(select(Brand.category_id)).one() == 7
        assert session.scalars(select(Product.id)).one() == 5
        assert session.execute(text("SELECT COUNT(*) FROM sessions")).scalar_one() == 0
    engine.dispose()


def test_migrate_continues_after_row_conflicts(tmp_path: Path) -> None:
    source = db_url(tmp_path, "source.db")
    target = db_url(tmp_path, "target.db")
    populate_source(source)
    migrate_database.migrate(source_url=source, target_url=target)

    reports = migrate_database.migrate(source_url=source, target_url=target)

    products = next(report for report in reports if report.table == "products")
    assert products.failed == 1
    assert products.target_count == 1


def test_migrate_truncate_replaces_target_rows(tmp_path: Path) -> None:
    source = db_url(tmp_path, "source.db")
    target = db_url(tmp_path, "target.db")
    populate_source(source)
    migrate_database.migrate(source_url=source, target_url=target)

    reports = migrate_database.migrate(source_url=source, target_url=target, truncate=True)

    assert all(report.failed == 0 for report in reports)


def test_migrate_rejects_same_database_and_unknown_tables(tmp_path: Path) -> None:
    url = db_url(tmp_path, "same.db")

    with pytest.raises(ValueError):
        migrate_database.migrate(source_url=url, target_url=url)
    with pytest.raises(ValueError):
        migrate_database.migratable_tables(["orders"])


def test_create_admin_creates_then_resets(tmp_path: Path) -> None:
    storage = DatabaseStorage.from_url(db_url(tmp_path, "admin.db"))
    try:
        user, created = create_admin.ensure_admin(storage, username="owner", password="first-pass")
        assert created is True
        assert user.is_admin is True

        again, created = create_admin.ensure_admin(storage, username="owner", password="second-pass")
        assert created is False
        assert again.id == user.id
        assert storage.validate_user("owner", "second-pass") is not None
        assert storage.validate_user("owner", "first-pass") is None
    finally:
        storage.engine.dispose()


def test_seed_scripts_run_against_database(tmp_path: Path) -> None:
    url = db_url(tmp_path, "seed.db")

    locations = seed_store_locations.run(db_url=url)
    products = seed_products.run(db_url=url)
    products_again = seed_products.run(db_url=url)

    assert locations.inserted == 2
    assert products.inserted == 12
    assert products_again.skipped == 12


def test_seed_script_requires_database_url(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_DB_URL", raising=False)
    monkeypatch.setattr(
        seed_products,
        "AppSettings",
        lambda: type("Stub", (), {"database_url": None})(),
    )

    with pytest.raises(ValueError):
        seed_products._default_db_url()
