from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from pydantic import Field

from vapecave.models.common import PartialUpdateModel, SnakeModel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class BlogPost(SnakeModel):
    id: int
    title: str
    slug: str
    summary: str
    content: str
    featured_image: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    is_featured: bool = False
    is_published: bool = False
    view_count: int = 0
    created_at: datetime
    updated_at: datetime


class BlogPostCreate(SnakeModel):
    title: str = Field(..., min_length=1)
    slug: str = Field(..., pattern=SLUG_PATTERN)
    summary: str
    content: str
    featured_image: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    is_featured: bool = False
    is_published: bool = False


class BlogPostUpdate(PartialUpdateModel, SnakeModel):
    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset(
        {"title", "slug", "summary", "content", "is_featured", "is_published"}
    )

    title: str | None = Field(None, min_length=1)
    slug: str | None = Field(None, pattern=SLUG_PATTERN)
    summary: str | None = None
    content: str | None = None
    featured_image: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    is_featured: bool | None = None
    is_published: bool | None = None
