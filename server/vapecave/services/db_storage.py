from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from vapecave.core.security import dummy_verify, get_password_hash, verify_password
from vapecave.db import models as orm
from vapecave.db.base import Base
from vapecave.db.session import build_engine, build_session_factory, session_scope
from vapecave.models.blog import BlogPost
from vapecave.models.brands import Brand, BrandCategory
from vapecave.models.locations import StoreLocation
from vapecave.models.newsletter import NewsletterSubscription
from vapecave.models.products import Product, ProductCategory
from vapecave.models.users import User

logger = logging.getLogger("vapecave.storage.db")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _columns(model: Type[Base]) -> set[str]:
    return {column.key for column in model.__table__.columns}


class DatabaseStorage:
    """SQLAlchemy-backed storage. Every call runs in its own short session."""

    def __init__(self, engine: Engine, session_factory: sessionmaker[Session] | None = None) -> None:
        self.engine = engine
        self._session_factory = session_factory or build_session_factory(engine)

    @classmethod
    def from_url(
        cls,
        db_url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 5,
        create_tables: bool = True,
    ) -> "DatabaseStorage":
        engine = build_engine(db_url, pool_size=pool_size, max_overflow=max_overflow)
        if create_tables:
            Base.metadata.create_all(engine)
        return cls(engine)

    def _scope(self):
        return session_scope(self._session_factory)

    # generic helpers

    def _list(self, schema: Type[SchemaT], stmt) -> list[SchemaT]:
        with self._scope() as session:
            return [schema.model_validate(row) for row in session.scalars(stmt)]

    def _first(self, schema: Type[SchemaT], stmt) -> SchemaT | None:
        with self._scope() as session:
            row = session.scalars(stmt.limit(1)).first()
            return schema.model_validate(row) if row is not None else None

    def _get(self, model: Type[Base], schema: Type[SchemaT], pk: int) -> SchemaT | None:
        with self._scope() as session:
            row = session.get(model, pk)
            return schema.model_validate(row) if row is not None else None

    def _create(self, model: Type[Base], schema: Type[SchemaT], data: dict[str, Any]) -> SchemaT:
        allowed = _columns(model) - {"id"}
        values = {key: value for key, value in data.items() if key in allowed}
        with self._scope() as session:
            row = model(**values)
            session.add(row)
            session.flush()
            session.refresh(row)
            return schema.model_validate(row)

    def _update(
        self, model: Type[Base], schema: Type[SchemaT], pk: int, changes: dict[str, Any]
    ) -> SchemaT | None:
        columns = _columns(model)
        allowed = columns - {"id", "created_at", "subscribed_at"}
        with self._scope() as session:
            row = session.get(model, pk)
            if row is None:
                return None
            for key, value in changes.items():
                if key in allowed:
                    setattr(row, key, value)
            if "updated_at" in columns:
                row.updated_at = orm.utcnow()
            session.flush()
            session.refresh(row)
            return schema.model_validate(row)

    def _delete(self, model: Type[Base], pk: int) -> bool:
        with self._scope() as session:
            result = session.execute(delete(model).where(model.id == pk))
            return result.rowcount > 0

    # users

    def get_user(self, user_id: int) -> User | None:
        return self._get(orm.User, User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return self._first(User, select(orm.User).where(orm.User.username == username))

    def create_user(self, data: dict[str, Any]) -> User:
        values = dict(data)
        values["password"] = get_password_hash(values["password"])
        return self._create(orm.User, User, values)

    def update_user_password(self, user_id: int, password: str, *, is_admin: bool | None = None) -> User | None:
        changes: dict[str, Any] = {"password": get_password_hash(password)}
        if is_admin is not None:
            changes["is_admin"] = is_admin
        return self._update(orm.User, User, user_id, changes)

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
        stmt = select(orm.BrandCategory).order_by(orm.BrandCategory.display_order, orm.BrandCategory.id)
        return self._list(BrandCategory, stmt)

    def get_brand_category(self, category_id: int) -> BrandCategory | None:
        return self._get(orm.BrandCategory, BrandCategory, category_id)

    def create_brand_category(self, data: dict[str, Any]) -> BrandCategory:
        return self._create(orm.BrandCategory, BrandCategory, data)

    def update_brand_category(self, category_id: int, changes: dict[str, Any]) -> BrandCategory | None:
        return self._update(orm.BrandCategory, BrandCategory, category_id, changes)

    def delete_brand_category(self, category_id: int) -> bool:
        return self._delete(orm.BrandCategory, category_id)

    # brands

    def get_all_brands(self) -> list[Brand]:
        stmt = select(orm.Brand).order_by(orm.Brand.display_order, orm.Brand.id)
        return self._list(Brand, stmt)

    def get_brands_by_category(self, category_id: int) -> list[Brand]:
        stmt = (
            select(orm.Brand)
            .where(orm.Brand.category_id == category_id)
            .order_by(orm.Brand.display_order, orm.Brand.id)
        )
        return self._list(Brand, stmt)

    def get_brand(self, brand_id: int) -> Brand | None:
        return self._get(orm.Brand, Brand, brand_id)

    def create_brand(self, data: dict[str, Any]) -> Brand:
        return self._create(orm.Brand, Brand, data)

    def update_brand(self, brand_id: int, changes: dict[str, Any]) -> Brand | None:
        return self._update(orm.Brand, Brand, brand_id, changes)

    def delete_brand(self, brand_id: int) -> bool:
        return self._delete(orm.Brand, brand_id)

    # blog posts

    def get_all_blog_posts(self, include_unpublished: bool = False) -> list[BlogPost]:
        stmt = select(orm.BlogPost)
        if not include_unpublished:
            stmt = stmt.where(orm.BlogPost.is_published.is_(True))
        stmt = stmt.order_by(orm.BlogPost.created_at.desc(), orm.BlogPost.id.desc())
        return self._list(BlogPost, stmt)

    def get_featured_blog_posts(self, limit: int | None = None) -> list[BlogPost]:
        stmt = (
            select(orm.BlogPost)
            .where(orm.BlogPost.is_published.is_(True), orm.BlogPost.is_featured.is_(True))
            .order_by(orm.BlogPost.created_at.desc(), orm.BlogPost.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._list(BlogPost, stmt)

    def get_blog_post(self, post_id: int) -> BlogPost | None:
        return self._get(orm.BlogPost, BlogPost, post_id)

    def get_blog_post_by_slug(self, slug: str) -> BlogPost | None:
        return self._first(BlogPost, select(orm.BlogPost).where(orm.BlogPost.slug == slug))

    def create_blog_post(self, data: dict[str, Any]) -> BlogPost:
        return self._create(orm.BlogPost, BlogPost, data)

    def update_blog_post(self, post_id: int, changes: dict[str, Any]) -> BlogPost | None:
        return self._update(orm.BlogPost, BlogPost, post_id, changes)

    def delete_blog_post(self, post_id: int) -> bool:
        return self._delete(orm.BlogPost, post_id)

    def increment_blog_post_view_count(self, post_id: int) -> None:
        with self._scope() as session:
            session.execute(
                update(orm.BlogPost)
                .where(orm.BlogPost.id == post_id)
                .values(view_count=orm.BlogPost.view_count + 1)
            )

    # store locations

    def get_all_store_locations(self) -> list[StoreLocation]:
        return self._list(StoreLocation, select(orm.StoreLocation).order_by(orm.StoreLocation.id))

    def get_store_location(self, location_id: int) -> StoreLocation | None:
        return self._get(orm.StoreLocation, StoreLocation, location_id)

    def get_store_location_by_city(self, city: str) -> StoreLocation | None:
        stmt = (
            select(orm.StoreLocation)
            .where(func.lower(orm.StoreLocation.city) == city.strip().lower())
            .order_by(orm.StoreLocation.id)
        )
        return self._first(StoreLocation, stmt)

    def create_store_location(self, data: dict[str, Any]) -> StoreLocation:
        return self._create(orm.StoreLocation, StoreLocation, data)

    def update_store_location(self, location_id: int, changes: dict[str, Any]) -> StoreLocation | None:
        return self._update(orm.StoreLocation, StoreLocation, location_id, changes)

    def delete_store_location(self, location_id: int) -> bool:
        return self._delete(orm.StoreLocation, location_id)

    # product categories

    def get_all_product_categories(self) -> list[ProductCategory]:
        stmt = select(orm.ProductCategory).order_by(orm.ProductCategory.display_order, orm.ProductCategory.id)
        return self._list(ProductCategory, stmt)

    def get_product_category(self, category_id: int) -> ProductCategory | None:
        return self._get(orm.ProductCategory, ProductCategory, category_id)

    def get_product_category_by_slug(self, slug: str) -> ProductCategory | None:
        return self._first(ProductCategory, select(orm.ProductCategory).where(orm.ProductCategory.slug == slug))

    def create_product_category(self, data: dict[str, Any]) -> ProductCategory:
        return self._create(orm.ProductCategory, ProductCategory, data)

    def update_product_category(self, category_id: int, changes: dict[str, Any]) -> ProductCategory | None:
        return self._update(orm.ProductCategory, ProductCategory, category_id, changes)

    def delete_product_category(self, category_id: int) -> bool:
        return self._delete(orm.ProductCategory, category_id)

    # products

    def get_all_products(self) -> list[Product]:
        return self._list(Product, select(orm.Product).order_by(orm.Product.id))

    def get_featured_products(self, limit: int | None = None) -> list[Product]:
        stmt = select(orm.Product).where(orm.Product.featured.is_(True)).order_by(orm.Product.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._list(Product, stmt)

    def get_products_by_category(self, category: str) -> list[Product]:
        stmt = select(orm.Product).where(orm.Product.category == category).order_by(orm.Product.id)
        return self._list(Product, stmt)

    def get_product(self, product_id: int) -> Product | None:
        return self._get(orm.Product, Product, product_id)

    def create_product(self, data: dict[str, Any]) -> Product:
        return self._create(orm.Product, Product, data)

    def update_product(self, product_id: int, changes: dict[str, Any]) -> Product | None:
        return self._update(orm.Product, Product, product_id, changes)

    def delete_product(self, product_id: int) -> bool:
        return self._delete(orm.Product, product_id)

    # newsletter

    def get_all_newsletter_subscriptions(self) -> list[NewsletterSubscription]:
        stmt = select(orm.NewsletterSubscription).order_by(
            orm.NewsletterSubscription.subscribed_at.desc(), orm.NewsletterSubscription.id.desc()
        )
        return self._list(NewsletterSubscription, stmt)

    def get_newsletter_subscription(self, subscription_id: int) -> NewsletterSubscription | None:
        return self._get(orm.NewsletterSubscription, NewsletterSubscription, subscription_id)

    def get_newsletter_subscription_by_email(self, email: str) -> NewsletterSubscription | None:
        stmt = select(orm.NewsletterSubscription).where(
            func.lower(orm.NewsletterSubscription.email) == email.strip().lower()
        )
        return self._first(NewsletterSubscription, stmt)

    def create_newsletter_subscription(self, data: dict[str, Any]) -> NewsletterSubscription:
        return self._create(orm.NewsletterSubscription, NewsletterSubscription, data)

    def set_newsletter_subscription_status(
        self, subscription_id: int, is_active: bool
    ) -> NewsletterSubscription | None:
        return self._update(
            orm.NewsletterSubscription, NewsletterSubscription, subscription_id, {"is_active": is_active}
        )

    def delete_newsletter_subscription(self, subscription_id: int) -> bool:
        return self._delete(orm.NewsletterSubscription, subscription_id)

    # sessions

    def get_session(self, sid: str) -> dict[str, Any] | None:
        with self._scope() as session:
            row = session.scalars(
                select(orm.SessionRecord).where(
                    orm.SessionRecord.sid == sid, orm.SessionRecord.expire > orm.utcnow()
                )
            ).first()
            if row is None:
                return None
            try:
                return json.loads(row.sess)
            except ValueError:
                logger.warning("session.corrupt", extra={"sid_prefix": sid[:8]})
                return None

    def save_session(self, sid: str, data: dict[str, Any], expires_at: datetime) -> None:
        with self._scope() as session:
            session.merge(orm.SessionRecord(sid=sid, sess=json.dumps(data), expire=expires_at))

    def destroy_session(self, sid: str) -> None:
        with self._scope() as session:
            session.execute(delete(orm.SessionRecord).where(orm.SessionRecord.sid == sid))

    def prune_expired_sessions(self) -> int:
        with self._scope() as session:
            result = session.execute(delete(orm.SessionRecord).where(orm.SessionRecord.expire <= orm.utcnow()))
            return result.rowcount or 0
