from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from pydantic import Field, field_validator

from vapecave.models.blog import SLUG_PATTERN
from vapecave.models.common import CamelModel, PartialUpdateModel, SnakeModel


def _price_to_text(value: object) -> object:
    # Prices are stored as text; an empty value means "call for price".
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return f"{value:.2f}"
    if isinstance(value, str):
        return value.strip() or None
    return value


class ProductCategory(SnakeModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    display_order: int = 0
    created_at: datetime
    updated_at: datetime


class ProductCategoryCreate(SnakeModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., pattern=SLUG_PATTERN)
    description: str | None = None
    display_order: int = 0


class ProductCategoryUpdate(PartialUpdateModel, SnakeModel):
    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"name", "slug", "display_order"})

    name: str | None = Field(None, min_length=1)
    slug: str | None = Field(None, pattern=SLUG_PATTERN)
    description: str | None = None
    display_order: int | None = None


class Product(CamelModel):
    id: int
    name: str
    description: str
    price: str | None = None
    image: str
    category: str
    category_id: int | None = None
    featured: bool = False
    featured_label: str | None = None
    hide_price: bool = False
    stock: int | None = None
    created_at: datetime
    updated_at: datetime


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str
    price: str | None = None
    image: str
    category: str = Field(..., min_length=1)
    category_id: int | None = None
    featured: bool = False
    featured_label: str | None = None
    hide_price: bool = False
    stock: int | None = Field(None, ge=0)

    _coerce_price = field_validator("price", mode="before")(_price_to_text)


class ProductUpdate(PartialUpdateModel, CamelModel):
    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset(
        {"name", "description", "image", "category", "featured", "hide_price"}
    )

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    price: str | None = None
    image: str | None = None
    category: str | None = Field(None, min_length=1)
    category_id: int | None = None
    featured: bool | None = None
    featured_label: str | None = None
    hide_price: bool | None = None
    stock: int | None = Field(None, ge=0)

    _coerce_price = field_validator("price", mode="before")(_price_to_text)
