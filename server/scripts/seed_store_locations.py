from __future__ import annotations

import argparse
import logging
from pathlib import Path

from vapecave.core.config import AppSettings
from vapecave.services.db_storage import DatabaseStorage
from vapecave.services.seeding import STORE_LOCATIONS_FILE, SeedResult, load_store_locations, seed_store_locations

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("seed_store_locations")


def _default_db_url() -> str:
    settings = AppSettings()
    db_url = (settings.database_url or "").strip()
    if not db_url:
        raise ValueError("DATABASE_URL must be set (or pass --db).")
    return db_url


def run(*, db_url: str, source: Path = STORE_LOCATIONS_FILE) -> SeedResult:
    records = load_store_locations(source)
    storage = DatabaseStorage.from_url(db_url, pool_size=1, max_overflow=0)
    try:
        result = seed_store_locations(storage, records)
    finally:
        storage.engine.dispose()
    logger.info(
        "Seeded store locations (inserted=%d, updated=%d, failed=%d)",
        result.inserted,
        result.updated,
        result.failed,
    )
    return result


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or refresh store locations from the bundled catalog.")
    parser.add_argument("--db", help="SQLAlchemy database URL. Defaults to DATABASE_URL.")
    parser.add_argument(
        "--source",
        type=Path,
        default=STORE_LOCATIONS_FILE,
        help="JSON file with store location records.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    run(db_url=args.db or _default_db_url(), source=args.source)


if __name__ == "__main__":
    main()
