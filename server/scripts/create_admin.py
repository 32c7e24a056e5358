from __future__ import annotations

import argparse
import logging
import os

from vapecave.core.config import AppSettings
from vapecave.models.users import User
from vapecave.services.db_storage import DatabaseStorage

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("create_admin")


def ensure_admin(storage: DatabaseStorage, *, username: str, password: str) -> tuple[User, bool]:
    """Create the admin, or reset the password and admin flag of an existing user. Returns (user, created)."""
    existing = storage.get_user_by_username(username)
    if existing is None:
        user = storage.create_user({"username": username, "password": password, "is_admin": True})
        return user, True
    user = storage.update_user_password(existing.id, password, is_admin=True)
    return user, False


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an admin user or reset an existing one.")
    parser.add_argument("--db", help="SQLAlchemy database URL. Defaults to DATABASE_URL.")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", help="New password. Defaults to the ADMIN_PASSWORD environment variable.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    password = args.password or os.environ.get("ADMIN_PASSWORD")
    if not password:
        raise SystemExit("Pass --password or set ADMIN_PASSWORD.")
    db_url = args.db or (AppSettings().database_url or "").strip()
    if not db_url:
        raise SystemExit("DATABASE_URL must be set (or pass --db).")

    storage = DatabaseStorage.from_url(db_url, pool_size=1, max_overflow=0)
    try:
        user, created = ensure_admin(storage, username=args.username, password=password)
    finally:
        storage.engine.dispose()
    logger.info("%s admin user %r (id=%d)", "Created" if created else "Reset", user.username, user.id)


if __name__ == "__main__":
    main()
