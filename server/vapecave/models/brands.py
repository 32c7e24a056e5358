from __future__ import annotations

from typing import ClassVar, List

from pydantic import Field

from vapecave.db.models import DEFAULT_BRAND_BG_CLASS
from vapecave.models.common import CamelModel, PartialUpdateModel

DEFAULT_IMAGE_SIZE = "medium"


class BrandCategory(CamelModel):
    id: int
    category: str
    bg_class: str | None = DEFAULT_BRAND_BG_CLASS
    display_order: int | None = 0
    interval_ms: int | None = 5000


class BrandCategoryCreate(CamelModel):
    category: str = Field(..., min_length=1)
    bg_class: str | None = DEFAULT_BRAND_BG_CLASS
    display_order: int | None = 0
    interval_ms: int | None = Field(5000, ge=0)


class BrandCategoryUpdate(PartialUpdateModel, CamelModel):
    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"category"})

    category: str | None = Field(None, min_length=1)
    bg_class: str | None = None
    display_order: int | None = None
    interval_ms: int | None = Field(None, ge=0)


class Brand(CamelModel):
    """Persisted brand row. The carousel image size is not part of it."""

    id: int
    category_id: int
    name: str
    image: str
    description: str
    display_order: int | None = 0


class BrandView(Brand):
    image_size: str = DEFAULT_IMAGE_SIZE

    @classmethod
    def from_brand(cls, brand: Brand) -> "BrandView":
        return cls(**brand.model_dump())


class BrandCreate(CamelModel):
    category_id: int
    name: str = Field(..., min_length=1)
    image: str
    description: str
    display_order: int | None = 0
    # Accepted for compatibility with the admin form; never stored.
    image_size: str | None = DEFAULT_IMAGE_SIZE


class BrandUpdate(PartialUpdateModel, CamelModel):
    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"category_id", "name", "image", "description"})

    category_id: int | None = None
    name: str | None = Field(None, min_length=1)
    image: str | None = None
    description: str | None = None
    display_order: int | None = None
    image_size: str | None = None


class FeaturedBrandCategory(BrandCategory):
    brands: List[BrandView] = Field(default_factory=list)
