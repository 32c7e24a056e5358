from __future__ import annotations

import copy
import itertools
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Type, TypeVar

from pydantic import BaseModel

from vapecave.core.security import dummy_verify, get_password_hash, verify_password
from vapecave.db.models import utcnow
from vapecave.models.blog import BlogPost
from vapecave.models.brands import Brand, BrandCategory
from vapecave.models.locations import StoreLocation
from vapecave.models.newsletter import NewsletterSubscription
from vapecave.models.products import Product, ProductCategory
from vapecave.models.users import User

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_TIMESTAMP_FIELDS = ("created_at", "updated_at", "subscribed_at")
_IMMUTABLE_FIELDS = {"id", "created_at", "subscribed_at"}


class _Table:
    def __init__(self, schema: Type[BaseModel]) -> None:
        self.schema = schema
        self.rows: Dict[int, BaseModel] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)


class MemoryStorage:
    """
    Process-local storage used when no database is reachable.

    Rows live in dicts keyed by id with one counter per entity. There is no
    locking; it serves a single instance only.
    """

    def __init__(self) -> None:
        self._tables: Dict[Type[BaseModel], _Table] = {
            schema: _Table(schema)
            for schema in (
                User,
                BrandCategory,
                Brand,
                BlogPost,
                StoreLocation,
                ProductCategory,
                Product,
                NewsletterSubscription,
            )
        }
        self._sessions: Dict[str, tuple[dict[str, Any], datetime]] = {}

    # generic helpers

    def _table(self, schema: Type[SchemaT]) -> _Table:
        return self._tables[schema]

    def _select(
        self,
        schema: Type[SchemaT],
        where: Callable[[Any], bool] | None = None,
        order_by: Callable[[Any], Any] | None = None,
        descending: bool = False,
    ) -> list[SchemaT]:
        rows: Iterable[Any] = self._table(schema).rows.values()
        if where is not None:
            rows = [row for row in rows if where(row)]
        rows = sorted(rows, key=order_by or (lambda row: row.id), reverse=descending)
        return [row.model_copy(deep=True) for row in rows]

    def _get(self, schema: Type[SchemaT], pk: int) -> SchemaT | None:
        row = self._table(schema).rows.get(pk)
        return row.model_copy(deep=True) if row is not None else None

    def _create(self, schema: Type[SchemaT], data: dict[str, Any]) -> SchemaT:
        table = self._table(schema)
        values = {key: copy.deepcopy(value) for key, value in data.items() if key in schema.model_fields}
        now = utcnow()
        for field in _TIMESTAMP_FIELDS:
            if field in schema.model_fields:
                values[field] = now
        values["id"] = table.next_id()
        row = schema.model_validate(values)
        table.rows[row.id] = row
        return row.model_copy(deep=True)

    def _update(self, schema: Type[SchemaT], pk: int, changes: dict[str, Any]) -> SchemaT | None:
        table = self._table(schema)
        row = table.rows.get(pk)
        if row is None:
            return None
        applied = {
            key: copy.deepcopy(value)
            for key, value in changes.items()
            if key in schema.model_fields and key not in _IMMUTABLE_FIELDS
        }
        if "updated_at" in schema.model_fields:
            applied["updated_at"] = utcnow()
        updated = row.model_copy(update=applied)
        table.rows[pk] = updated
        return updated.model_copy(deep=True)

    def _delete(self, schema: Type[BaseModel], pk: int) -> bool:
        return self._table(schema).rows.pop(pk, None) is not None

    @staticmethod
    def _limit(rows: list[SchemaT], limit: int | None) -> list[SchemaT]:
        return rows if limit is None else rows[:limit]

    @staticmethod
    def _display_order(row: Any) -> tuple[int, int]:
        return (row.display_order or 0, row.id)

    @staticmethod
    def _newest_first(row: Any) -> tuple[datetime, int]:
        return (getattr(row, "created_at", None) or row.subscribed_at, row.id)

    # users

    def get_user(self, user_id: int) -> User | None:
        return self._get(User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        matches = self._select(User, where=lambda row: row.username == username)
        return matches[0] if matches else None

    def create_user(self, data: dict[str, Any]) -> User:
        values = dict(data)
        values["password"] = get_password_hash(values["password"])
        return self._create(User, values)

    def update_user_password(self, user_id: int, password: str, *, is_admin: bool | None = None) -> User | None:
        changes: dict[str, Any] = {"password": get_password_hash(password)}
        if is_admin is not None:
            changes["is_admin"] = is_admin
        return self._update(User, user_id, changes)

    def validate_user(self, username: str, password: str) -> User | None:
        user = self.get_user_by_username(username)
        if user is None:
            dummy_verify()
            return None
        if not verify_password(password, user.password):
            return None
        return user

    # brand categories

    def get_all_brand_categories(self) -> list[BrandCategory]:
        return self._select(BrandCategory, order_by=self._display_order)

    def get_brand_category(self, category_id: int) -> BrandCategory | None:
        return self._get(BrandCategory, category_id)

    def create_brand_category(self, data: dict[str, Any]) -> BrandCategory:
        return self._create(BrandCategory, data)

    def update_brand_category(self, category_id: int, changes: dict[str, Any]) -> BrandCategory | None:
        return self._update(BrandCategory, category_id, changes)

    def delete_brand_category(self, category_id: int) -> bool:
        return self._delete(BrandCategory, category_id)

    # brands

    def get_all_brands(self) -> list[Brand]:
        return self._select(Brand, order_by=self._display_order)

    def get_brands_by_category(self, category_id: int) -> list[Brand]:
        return self._select(Brand, where=lambda row: row.category_id == category_id, order_by=self._display_order)

    def get_brand(self, brand_id: int) -> Brand | None:
        return self._get(Brand, brand_id)

    def create_brand(self, data: dict[str, Any]) -> Brand:
        return self._create(Brand, data)

    def update_brand(self, brand_id: int, changes: dict[str, Any]) -> Brand | None:
        return self._update(Brand, brand_id, changes)

    def delete_brand(self, brand_id: int) -> bool:
        return self._delete(Brand, brand_id)

    # blog posts

    def get_all_blog_posts(self, include_unpublished: bool = False) -> list[BlogPost]:
        where = None if include_unpublished else (lambda row: row.is_published)
        return self._select(BlogPost, where=where, order_by=self._newest_first, descending=True)

    def get_featured_blog_posts(self, limit: int | None = None) -> list[BlogPost]:
        rows = self._select(
            BlogPost,
            where=lambda row: row.is_published and row.is_featured,
            order_by=self._newest_first,
            descending=True,
        )
        return self._limit(rows, limit)

    def get_blog_post(self, post_id: int) -> BlogPost | None:
        return self._get(BlogPost, post_id)

    def get_blog_post_by_slug(self, slug: str) -> BlogPost | None:
        matches = self._select(BlogPost, where=lambda row: row.slug == slug)
        return matches[0] if matches else None

    def create_blog_post(self, data: dict[str, Any]) -> BlogPost:
        return self._create(BlogPost, data)

    def update_blog_post(self, post_id: int, changes: dict[str, Any]) -> BlogPost | None:
        return self._update(BlogPost, post_id, changes)

    def delete_blog_post(self, post_id: int) -> bool:
        return self._delete(BlogPost, post_id)

    def increment_blog_post_view_count(self, post_id: int) -> None:
        rows = self._table(BlogPost).rows
        row = rows.get(post_id)
        if row is not None:
            rows[post_id] = row.model_copy(update={"view_count": row.view_count + 1})

    # store locations

    def get_all_store_locations(self) -> list[StoreLocation]:
        return self._select(StoreLocation)

    def get_store_location(self, location_id: int) -> StoreLocation | None:
        return self._get(StoreLocation, location_id)

    def get_store_location_by_city(self, city: str) -> StoreLocation | None:
        wanted = city.strip().lower()
        matches = self._select(StoreLocation, where=lambda row: row.city.lower() == wanted)
        return matches[0] if matches else None

    def create_store_location(self, data: dict[str, Any]) -> StoreLocation:
        return self._create(StoreLocation, data)

    def update_store_location(self, location_id: int, changes: dict[str, Any]) -> StoreLocation | None:
        return self._update(StoreLocation, location_id, changes)

    def delete_store_location(self, location_id: int) -> bool:
        return self._delete(StoreLocation, location_id)

    # product categories

    def get_all_product_categories(self) -> list[ProductCategory]:
        return self._select(ProductCategory, order_by=self._display_order)

    def get_product_category(self, category_id: int) -> ProductCategory | None:
        return self._get(ProductCategory, category_id)

    def get_product_category_by_slug(self, slug: str) -> ProductCategory | None:
        matches = self._select(ProductCategory, where=lambda row: row.slug == slug)
        return matches[0] if matches else None

    def create_product_category(self, data: dict[str, Any]) -> ProductCategory:
        return self._create(ProductCategory, data)

    def update_product_category(self, category_id: int, changes: dict[str, Any]) -> ProductCategory | None:
        return self._update(ProductCategory, category_id, changes)

    def delete_product_category(self, category_id: int) -> bool:
        return self._delete(ProductCategory, category_id)

    # products

    def get_all_products(self) -> list[Product]:
        return self._select(Product)

    def get_featured_products(self, limit: int | None = None) -> list[Product]:
        return self._limit(self._select(Product, where=lambda row: row.featured), limit)

    def get_products_by_category(self, category: str) -> list[Product]:
        return self._select(Product, where=lambda row: row.category == category)

    def get_product(self, product_id: int) -> Product | None:
        return self._get(Product, product_id)

    def create_product(self, data: dict[str, Any]) -> Product:
        return self._create(Product, data)

    def update_product(self, product_id: int, changes: dict[str, Any]) -> Product | None:
        return self._update(Product, product_id, changes)

    def delete_product(self, product_id: int) -> bool:
        return self._delete(Product, product_id)

    # newsletter

    def get_all_newsletter_subscriptions(self) -> list[NewsletterSubscription]:
        return self._select(NewsletterSubscription, order_by=self._newest_first, descending=True)

    def get_newsletter_subscription(self, subscription_id: int) -> NewsletterSubscription | None:
        return self._get(NewsletterSubscription, subscription_id)

    def get_newsletter_subscription_by_email(self, email: str) -> NewsletterSubscription | None:
        wanted = email.strip().lower()
        matches = self._select(NewsletterSubscription, where=lambda row: row.email.lower() == wanted)
        return matches[0] if matches else None

    def create_newsletter_subscription(self, data: dict[str, Any]) -> NewsletterSubscription:
        return self._create(NewsletterSubscription, data)

    def set_newsletter_subscription_status(
        self, subscription_id: int, is_active: bool
    ) -> NewsletterSubscription | None:
        return self._update(NewsletterSubscription, subscription_id, {"is_active": is_active})

    def delete_newsletter_subscription(self, subscription_id: int) -> bool:
        return self._delete(NewsletterSubscription, subscription_id)

    # sessions

    def get_session(self, sid: str) -> dict[str, Any] | None:
        entry = self._sessions.get(sid)
        if entry is None:
            return None
        data, expires_at = entry
        if expires_at <= utcnow():
            self._sessions.pop(sid, None)
            return None
        return copy.deepcopy(data)

    def save_session(self, sid: str, data: dict[str, Any], expires_at: datetime) -> None:
        self._sessions[sid] = (copy.deepcopy(data), expires_at)

    def destroy_session(self, sid: str) -> None:
        self._sessions.pop(sid, None)

    def prune_expired_sessions(self) -> int:
        now = utcnow()
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)
