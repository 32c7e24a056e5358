from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vapecave.core.config import AppSettings
from vapecave.models.blog import BlogPost
from vapecave.models.brands import Brand, BrandCategory
from vapecave.models.locations import StoreLocation
from vapecave.models.newsletter import NewsletterSubscription
from vapecave.models.products import Product, ProductCategory
from vapecave.models.users import User

logger = logging.getLogger("vapecave.storage")


class Storage(Protocol):
    """
    Typed accessors for every persisted entity.

    Reads return ``None`` for missing rows, updates apply only the keys they are
    given, deletes report whether a row was removed. Payload validation happens
    at the HTTP boundary, never here.
    """

    # users
    def get_user(self, user_id: int) -> User | None: ...

    def get_user_by_username(self, username: str) -> User | None: ...

    def create_user(self, data: dict[str, Any]) -> User: ...

    def update_user_password(self, user_id: int, password: str, *, is_admin: bool | None = None) -> User | None: ...

    def validate_user(self, username: str, password: str) -> User | None: ...

    # brand categories
    def get_all_brand_categories(self) -> list[BrandCategory]: ...

    def get_brand_category(self, category_id: int) -> BrandCategory | None: ...

    def create_brand_category(self, data: dict[str, Any]) -> BrandCategory: ...

    def update_brand_category(self, category_id: int, changes: dict[str, Any]) -> BrandCategory | None: ...

    def delete_brand_category(self, category_id: int) -> bool: ...

    # brands
    def get_all_brands(self) -> list[Brand]: ...

    def get_brands_by_category(self, category_id: int) -> list[Brand]: ...

    def get_brand(self, brand_id: int) -> Brand | None: ...

    def create_brand(self, data: dict[str, Any]) -> Brand: ...

    def update_brand(self, brand_id: int, changes: dict[str, Any]) -> Brand | None: ...

    def delete_brand(self, brand_id: int) -> bool: ...

    # blog posts
    def get_all_blog_posts(self, include_unpublished: bool = False) -> list[BlogPost]: ...

    def get_featured_blog_posts(self, limit: int | None = None) -> list[BlogPost]: ...

    def get_blog_post(self, post_id: int) -> BlogPost | None: ...

    def get_blog_post_by_slug(self, slug: str) -> BlogPost | None: ...

    def create_blog_post(self, data: dict[str, Any]) -> BlogPost: ...

    def update_blog_post(self, post_id: int, changes: dict[str, Any]) -> BlogPost | None: ...

    def delete_blog_post(self, post_id: int) -> bool: ...

    def increment_blog_post_view_count(self, post_id: int) -> None: ...

    # store locations
    def get_all_store_locations(self) -> list[StoreLocation]: ...

    def get_store_location(self, location_id: int) -> StoreLocation | None: ...

    def get_store_location_by_city(self, city: str) -> StoreLocation | None: ...

    def create_store_location(self, data: dict[str, Any]) -> StoreLocation: ...

    def update_store_location(self, location_id: int, changes: dict[str, Any]) -> StoreLocation | None: ...

    def delete_store_location(self, location_id: int) -> bool: ...

    # product categories
    def get_all_product_categories(self) -> list[ProductCategory]: ...

    def get_product_category(self, category_id: int) -> ProductCategory | None: ...

    def get_product_category_by_slug(self, slug: str) -> ProductCategory | None: ...

    def create_product_category(self, data: dict[str, Any]) -> ProductCategory: ...

    def update_product_category(self, category_id: int, changes: dict[str, Any]) -> ProductCategory | None: ...

    def delete_product_category(self, category_id: int) -> bool: ...

    # products
    def get_all_products(self) -> list[Product]: ...

    def get_featured_products(self, limit: int | None = None) -> list[Product]: ...

    def get_products_by_category(self, category: str) -> list[Product]: ...

    def get_product(self, product_id: int) -> Product | None: ...

    def create_product(self, data: dict[str, Any]) -> Product: ...

    def update_product(self, product_id: int, changes: dict[str, Any]) -> Product | None: ...

    def delete_product(self, product_id: int) -> bool: ...

    # newsletter
    def get_all_newsletter_subscriptions(self) -> list[NewsletterSubscription]: ...

    def get_newsletter_subscription(self, subscription_id: int) -> NewsletterSubscription | None: ...

    def get_newsletter_subscription_by_email(self, email: str) -> NewsletterSubscription | None: ...

    def create_newsletter_subscription(self, data: dict[str, Any]) -> NewsletterSubscription: ...

    def set_newsletter_subscription_status(
        self, subscription_id: int, is_active: bool
    ) -> NewsletterSubscription | None: ...

    def delete_newsletter_subscription(self, subscription_id: int) -> bool: ...

    # sessions
    def get_session(self, sid: str) -> dict[str, Any] | None: ...

    def save_session(self, sid: str, data: dict[str, Any], expires_at: datetime) -> None: ...

    def destroy_session(self, sid: str) -> None: ...

    def prune_expired_sessions(self) -> int: ...


def _database_is_healthy(storage: Any) -> bool:
    try:
        with storage.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("storage.health_check_failed", extra={"error": str(exc)})
        return False
    return True


def create_storage(settings: AppSettings) -> Storage:
    """
    Pick the storage backend once, at startup.

    A configured database that answers ``SELECT 1`` wins; otherwise the process
    runs on in-memory storage for its whole lifetime.
    """
    from vapecave.services.db_storage import DatabaseStorage
    from vapecave.services.memory_storage import MemoryStorage

    db_url = (settings.database_url or "").strip()
    if not db_url:
        logger.warning("storage.memory_fallback", extra={"reason": "DATABASE_URL not set"})
        return MemoryStorage()

    try:
        storage = DatabaseStorage.from_url(
            db_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            create_tables=settings.db_create_tables,
        )
    except (SQLAlchemyError, ImportError) as exc:
        logger.warning("storage.memory_fallback", extra={"reason": "database unavailable", "error": str(exc)})
        return MemoryStorage()

    if not _database_is_healthy(storage):
        storage.engine.dispose()
        logger.warning("storage.memory_fallback", extra={"reason": "health check failed"})
        return MemoryStorage()

    logger.info("storage.database_selected", extra={"backend": storage.engine.dialect.name})
    return storage
