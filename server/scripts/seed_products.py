from __future__ import annotations

import argparse
import logging
from pathlib import Path

from vapecave.core.config import AppSettings
from vapecave.services.db_storage import DatabaseStorage
from vapecave.services.seeding import PRODUCTS_FILE, SeedResult, load_products, seed_products

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("seed_products")


def _default_db_url() -> str:
    settings = AppSettings()
    db_url = (settings.database_url or "").strip()
    if not db_url:
        raise ValueError("DATABASE_URL must be set (or pass --db).")
    return db_url


def run(*, db_url: str, source: Path = PRODUCTS_FILE) -> SeedResult:
    records = load_products(source)
    storage = DatabaseStorage.from_url(db_url, pool_size=1, max_overflow=0)
    try:
        result = seed_products(storage, records)
    finally:
        storage.engine.dispose()
    if result.skipped:
        logger.info("Found %d existing products. Skipping seed.", result.skipped)
    else:
        logger.info("Seeded %d products (%d failed)", result.inserted, result.failed)
    return result


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load the starter product catalog into an empty database.")
    parser.add_argument("--db", help="SQLAlchemy database URL. Defaults to DATABASE_URL.")
    parser.add_argument("--source", type=Path, default=PRODUCTS_FILE, help="JSON file with product records.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    run(db_url=args.db or _default_db_url(), source=args.source)


if __name__ == "__main__":
    main()
