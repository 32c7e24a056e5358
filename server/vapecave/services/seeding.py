from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from vapecave.models.locations import StoreLocationCreate
from vapecave.models.products import ProductCreate
from vapecave.services.storage import Storage

logger = logging.getLogger("vapecave.seeding")

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
STORE_LOCATIONS_FILE = DATA_DIR / "store_locations.json"
PRODUCTS_FILE = DATA_DIR / "products.json"


@dataclass
class SeedResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def _load_json_list(path: Path) -> list[dict]:
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise ValueError(f"Catalog file {path} must contain a JSON list.")
    return payload


def load_store_locations(path: Path = STORE_LOCATIONS_FILE) -> List[StoreLocationCreate]:
    records: list[StoreLocationCreate] = []
    for row in _load_json_list(path):
        try:
            records.append(StoreLocationCreate.model_validate(row))
        except ValidationError as exc:
            raise ValueError(f"Invalid store location row {row.get('name')!r}: {exc}") from exc
    return records


def load_products(path: Path = PRODUCTS_FILE) -> List[ProductCreate]:
    records: list[ProductCreate] = []
    for row in _load_json_list(path):
        try:
            records.append(ProductCreate.model_validate(row))
        except ValidationError as exc:
            raise ValueError(f"Invalid product row {row.get('name')!r}: {exc}") from exc
    return records


def seed_store_locations(storage: Storage, records: Iterable[StoreLocationCreate] | None = None) -> SeedResult:
    """
    Upsert store locations keyed by city, case-insensitively.

    A failing row is logged and counted; the rest of the batch still runs, so
    the seed can be repeated safely.
    """
    records = list(records) if records is not None else load_store_locations()
    existing = storage.get_all_store_locations()
    logger.info("seed.store_locations.start", extra={"existing": len(existing), "incoming": len(records)})

    result = SeedResult()
    for record in records:
        data = record.model_dump()
        try:
            current = storage.get_store_location_by_city(record.city)
            if current is not None:
                storage.update_store_location(current.id, data)
                result.updated += 1
                logger.info("seed.store_locations.updated", extra={"city": record.city, "id": current.id})
            else:
                created = storage.create_store_location(data)
                result.inserted += 1
                logger.info("seed.store_locations.inserted", extra={"city": record.city, "id": created.id})
        except (SQLAlchemyError, ValueError) as exc:
            result.failed += 1
            logger.error("seed.store_locations.failed", extra={"city": record.city, "error": str(exc)})

    logger.info("seed.store_locations.done", extra=result.as_dict())
    return result


def seed_products(storage: Storage, records: Iterable[ProductCreate] | None = None) -> SeedResult:
    """Insert the starter catalog, but only into an empty products table."""
    existing = storage.get_all_products()
    if existing:
        logger.info("seed.products.skipped", extra={"existing": len(existing)})
        return SeedResult(skipped=len(existing))

    records = list(records) if records is not None else load_products()
    result = SeedResult()
    for record in records:
        try:
            storage.create_product(record.model_dump())
            result.inserted += 1
        except (SQLAlchemyError, ValueError) as exc:
            result.failed += 1
            logger.error("seed.products.failed", extra={"product": record.name, "error": str(exc)})

    logger.info("seed.products.done", extra=result.as_dict())
    return result
