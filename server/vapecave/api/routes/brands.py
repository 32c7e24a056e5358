from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from vapecave.api.deps import get_storage, require_admin
from vapecave.core.exceptions import NotFoundError
from vapecave.models.brands import (
    BrandCategory,
    BrandCategoryCreate,
    BrandCategoryUpdate,
    BrandCreate,
    BrandUpdate,
    BrandView,
    FeaturedBrandCategory,
)
from vapecave.models.common import MessageResponse
from vapecave.services.storage import Storage

router = APIRouter(prefix="/api", tags=["brands"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/brand-categories", response_model=List[BrandCategory])
def list_brand_categories(storage: Storage = Depends(get_storage)) -> List[BrandCategory]:
    return storage.get_all_brand_categories()


@router.get("/brand-categories/{category_id}", response_model=BrandCategory)
def get_brand_category(category_id: int, storage: Storage = Depends(get_storage)) -> BrandCategory:
    category = storage.get_brand_category(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


@router.get("/brands", response_model=List[BrandView])
def list_brands(
    category_id: int | None = Query(None, alias="categoryId"),
    storage: Storage = Depends(get_storage),
) -> List[BrandView]:
    if category_id is not None:
        brands = storage.get_brands_by_category(category_id)
    else:
        brands = storage.get_all_brands()
    return [BrandView.from_brand(brand) for brand in brands]


@router.get("/brands/{brand_id}", response_model=BrandView)
def get_brand(brand_id: int, storage: Storage = Depends(get_storage)) -> BrandView:
    brand = storage.get_brand(brand_id)
    if brand is None:
        raise NotFoundError("Brand not found")
    return BrandView.from_brand(brand)


@router.get("/featured-brands", response_model=List[FeaturedBrandCategory])
def featured_brands(storage: Storage = Depends(get_storage)) -> List[FeaturedBrandCategory]:
    return [
        FeaturedBrandCategory(
            **category.model_dump(),
            brands=[BrandView.from_brand(brand) for brand in storage.get_brands_by_category(category.id)],
        )
        for category in storage.get_all_brand_categories()
    ]


@admin_router.post("/brand-categories", response_model=BrandCategory, status_code=status.HTTP_201_CREATED)
def create_brand_category(payload: BrandCategoryCreate, storage: Storage = Depends(get_storage)) -> BrandCategory:
    return storage.create_brand_category(payload.model_dump())


@admin_router.put("/brand-categories/{category_id}", response_model=BrandCategory)
def update_brand_category(
    category_id: int,
    payload: BrandCategoryUpdate,
    storage: Storage = Depends(get_storage),
) -> BrandCategory:
    category = storage.update_brand_category(category_id, payload.changes())
    if category is None:
        raise NotFoundError("Category not found")
    return category


@admin_router.delete("/brand-categories/{category_id}", response_model=MessageResponse)
def delete_brand_category(category_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    # Brands in the category are left in place.
    if not storage.delete_brand_category(category_id):
        raise NotFoundError("Category not found")
    return MessageResponse(message="Category deleted successfully")


@admin_router.post("/brands", response_model=BrandView, status_code=status.HTTP_201_CREATED)
def create_brand(payload: BrandCreate, storage: Storage = Depends(get_storage)) -> BrandView:
    brand = storage.create_brand(payload.model_dump(exclude={"image_size"}))
    return BrandView.from_brand(brand)


@admin_router.put("/brands/{brand_id}", response_model=BrandView)
def update_brand(brand_id: int, payload: BrandUpdate, storage: Storage = Depends(get_storage)) -> BrandView:
    changes = payload.changes()
    changes.pop("image_size", None)
    brand = storage.update_brand(brand_id, changes)
    if brand is None:
        raise NotFoundError("Brand not found")
    return BrandView.from_brand(brand)


@admin_router.delete("/brands/{brand_id}", response_model=MessageResponse)
def delete_brand(brand_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_brand(brand_id):
        raise NotFoundError("Brand not found")
    return MessageResponse(message="Brand deleted successfully")
