from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from sqlalchemy import Table, delete, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from vapecave.core.config import AppSettings
from vapecave.db.base import Base
from vapecave.db.session import build_engine

import vapecave.db.models  # noqa: F401  registers the tables on Base.metadata

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("migrate_database")

SKIPPED_TABLES = {"sessions"}


@dataclass
class TableReport:
    table: str
    read: int = 0
    copied: int = 0
    failed: int = 0
    target_count: int = 0


def migratable_tables(names: Sequence[str] | None = None) -> List[Table]:
    tables = [table for table in Base.metadata.sorted_tables if table.name not in SKIPPED_TABLES]
    if names:
        wanted = set(names)
        unknown = wanted - {table.name for table in tables}
        if unknown:
            raise ValueError(f"Unknown tables: {', '.join(sorted(unknown))}")
        tables = [table for table in tables if table.name in wanted]
    return tables


def truncate_tables(engine: Engine, tables: Iterable[Table]) -> None:
    with engine.begin() as connection:
        for table in reversed(list(tables)):
            connection.execute(delete(table))
            logger.info("Cleared %s", table.name)


def copy_table(source: Engine, target: Engine, table: Table) -> TableReport:
    """Copy rows one at a time, each in its own transaction. A failing row is logged and skipped."""
    report = TableReport(table=table.name)
    order = list(table.primary_key.columns)
    with source.connect() as connection:
        rows = connection.execute(select(table).order_by(*order)).mappings().all()
    report.read = len(rows)

    for row in rows:
        try:
            with target.begin() as connection:
                connection.execute(table.insert().values(**dict(row)))
            report.copied += 1
        except SQLAlchemyError as exc:
            report.failed += 1
            logger.error("Failed to copy %s row %s: %s", table.name, row.get("id"), exc)
    return report


def reset_sequences(engine: Engine, tables: Iterable[Table]) -> None:
    if engine.dialect.name != "postgresql":
        return
    with engine.begin() as connection:
        for table in tables:
            if "id" not in table.columns:
                continue
            connection.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{table.name}', 'id'), "
                    f"COALESCE(MAX(id), 1), MAX(id) IS NOT NULL) FROM {table.name}"
                )
            )
            logger.info("Reset id sequence for %s", table.name)


def count_rows(engine: Engine, table: Table) -> int:
    with engine.connect() as connection:
        return connection.execute(select(func.count()).select_from(table)).scalar_one()


def migrate(
    *,
    source_url: str,
    target_url: str,
    truncate: bool = False,
    table_names: Sequence[str] | None = None,
) -> List[TableReport]:
    if source_url.strip() == target_url.strip():
        raise ValueError("Source and target databases must differ.")

    tables = migratable_tables(table_names)
    source = build_engine(source_url, pool_size=1, max_overflow=0)
    target = build_engine(target_url, pool_size=1, max_overflow=0)
    reports: list[TableReport] = []
    try:
        Base.metadata.create_all(target)
        if truncate:
            truncate_tables(target, tables)
        for table in tables:
            report = copy_table(source, target, table)
            logger.info("Copied %s: %d/%d rows (%d failed)", table.name, report.copied, report.read, report.failed)
            reports.append(report)
        reset_sequences(target, tables)
        for table, report in zip(tables, reports):
            report.target_count = count_rows(target, table)
    finally:
        source.dispose()
        target.dispose()

    for report in reports:
        logger.info("%s: %d rows in target", report.table, report.target_count)
    return reports


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Copy every catalog table from one database to another.")
    parser.add_argument("--source", help="Source database URL. Defaults to MIGRATION_SOURCE_URL, then DATABASE_URL.")
    parser.add_argument("--target", help="Target database URL. Defaults to MIGRATION_TARGET_URL.")
    parser.add_argument("--truncate", action="store_true", help="Delete existing rows in the target first.")
    parser.add_argument("--table", action="append", dest="tables", help="Limit the copy to this table (repeatable).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = AppSettings()
    source_url = args.source or settings.migration_source_url or settings.database_url
    target_url = args.target or settings.migration_target_url
    if not source_url or not target_url:
        raise SystemExit("Both a source and a target database URL are required.")
    migrate(source_url=source_url, target_url=target_url, truncate=args.truncate, table_names=args.tables)


if __name__ == "__main__":
    main()
