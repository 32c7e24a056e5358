from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError

from vapecave.api.deps import get_storage, require_admin
from vapecave.core.exceptions import ConflictError, NotFoundError
from vapecave.models.common import MessageResponse, SeedResponse
from vapecave.models.products import (
    Product,
    ProductCategory,
    ProductCategoryCreate,
    ProductCategoryUpdate,
    ProductCreate,
    ProductUpdate,
)
from vapecave.services.seeding import seed_products
from vapecave.services.storage import Storage

router = APIRouter(prefix="/api", tags=["products"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _ensure_unique_category_slug(storage: Storage, slug: str, category_id: int | None = None) -> None:
    existing = storage.get_product_category_by_slug(slug)
    if existing is not None and existing.id != category_id:
        raise ConflictError("A product category with this slug already exists")


@router.get("/product-categories", response_model=List[ProductCategory])
def list_product_categories(storage: Storage = Depends(get_storage)) -> List[ProductCategory]:
    return storage.get_all_product_categories()


@router.get("/product-categories/slug/{slug}", response_model=ProductCategory)
def get_product_category_by_slug(slug: str, storage: Storage = Depends(get_storage)) -> ProductCategory:
    category = storage.get_product_category_by_slug(slug)
    if category is None:
        raise NotFoundError("Product category not found")
    return category


@router.get("/product-categories/{category_id}", response_model=ProductCategory)
def get_product_category(category_id: int, storage: Storage = Depends(get_storage)) -> ProductCategory:
    category = storage.get_product_category(category_id)
    if category is None:
        raise NotFoundError("Product category not found")
    return category


@router.get("/products", response_model=List[Product])
def list_products(storage: Storage = Depends(get_storage)) -> List[Product]:
    return storage.get_all_products()


@router.get("/products/featured", response_model=List[Product])
def featured_products(
    limit: int | None = Query(None, ge=1),
    storage: Storage = Depends(get_storage),
) -> List[Product]:
    return storage.get_featured_products(limit)


@router.get("/products/category/{category}", response_model=List[Product])
def products_by_category(category: str, storage: Storage = Depends(get_storage)) -> List[Product]:
    return storage.get_products_by_category(category)


@router.get("/products/{product_id}", response_model=Product)
def get_product(product_id: int, storage: Storage = Depends(get_storage)) -> Product:
    product = storage.get_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


@admin_router.post("/product-categories", response_model=ProductCategory, status_code=status.HTTP_201_CREATED)
def create_product_category(
    payload: ProductCategoryCreate,
    storage: Storage = Depends(get_storage),
) -> ProductCategory:
    _ensure_unique_category_slug(storage, payload.slug)
    try:
        return storage.create_product_category(payload.model_dump())
    except IntegrityError as exc:
        raise ConflictError("A product category with this slug already exists") from exc


@admin_router.put("/product-categories/{category_id}", response_model=ProductCategory)
def update_product_category(
    category_id: int,
    payload: ProductCategoryUpdate,
    storage: Storage = Depends(get_storage),
) -> ProductCategory:
    changes = payload.changes()
    if "slug" in changes:
        _ensure_unique_category_slug(storage, changes["slug"], category_id)
    category = storage.update_product_category(category_id, changes)
    if category is None:
        raise NotFoundError("Product category not found")
    return category


@admin_router.delete("/product-categories/{category_id}", response_model=MessageResponse)
def delete_product_category(category_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_product_category(category_id):
        raise NotFoundError("Product category not found")
    return MessageResponse(message="Product category deleted successfully")


@admin_router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, storage: Storage = Depends(get_storage)) -> Product:
    return storage.create_product(payload.model_dump())


@admin_router.put("/products/{product_id}", response_model=Product)
def update_product(product_id: int, payload: ProductUpdate, storage: Storage = Depends(get_storage)) -> Product:
    product = storage.update_product(product_id, payload.changes())
    if product is None:
        raise NotFoundError("Product not found")
    return product


@admin_router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_product(product_id):
        raise NotFoundError("Product not found")
    return MessageResponse(message="Product deleted successfully")


@admin_router.post("/seed-products", response_model=SeedResponse)
def seed_product_catalog(storage: Storage = Depends(get_storage)) -> SeedResponse:
    result = seed_products(storage)
    return SeedResponse(message="Products seeded successfully", **result.as_dict())
