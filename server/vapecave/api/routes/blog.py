from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from vapecave.api.deps import get_current_user, get_storage, require_admin
from vapecave.core.exceptions import ConflictError, NotFoundError
from vapecave.models.blog import BlogPost, BlogPostCreate, BlogPostUpdate
from vapecave.models.common import MessageResponse
from vapecave.models.users import User
from vapecave.services.storage import Storage

logger = logging.getLogger("vapecave.blog")

router = APIRouter(prefix="/api/blog-posts", tags=["blog"])
admin_router = APIRouter(prefix="/api/admin/blog-posts", tags=["admin"], dependencies=[Depends(require_admin)])


def record_view(storage: Storage, post_id: int) -> None:
    """Runs after the response is sent; a failure only costs one view."""
    try:
        storage.increment_blog_post_view_count(post_id)
    except SQLAlchemyError as exc:
        logger.error("blog.view_count_failed", extra={"post_id": post_id, "error": str(exc)})


@router.get("", response_model=List[BlogPost])
def list_blog_posts(
    include_unpublished: bool = Query(False, alias="includeUnpublished"),
    user: User | None = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[BlogPost]:
    is_admin = user is not None and user.is_admin
    return storage.get_all_blog_posts(include_unpublished=include_unpublished and is_admin)


@router.get("/featured", response_model=List[BlogPost])
def featured_blog_posts(
    limit: int | None = Query(None, ge=1),
    storage: Storage = Depends(get_storage),
) -> List[BlogPost]:
    return storage.get_featured_blog_posts(limit)


@router.get("/slug/{slug}", response_model=BlogPost)
def get_blog_post_by_slug(
    slug: str,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
) -> BlogPost:
    post = storage.get_blog_post_by_slug(slug)
    if post is None:
        raise NotFoundError("Blog post not found")
    background_tasks.add_task(record_view, storage, post.id)
    return post


@router.get("/{post_id}", response_model=BlogPost)
def get_blog_post(
    post_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
) -> BlogPost:
    post = storage.get_blog_post(post_id)
    if post is None:
        raise NotFoundError("Blog post not found")
    background_tasks.add_task(record_view, storage, post.id)
    return post


@admin_router.post("", response_model=BlogPost, status_code=status.HTTP_201_CREATED)
def create_blog_post(payload: BlogPostCreate, storage: Storage = Depends(get_storage)) -> BlogPost:
    if storage.get_blog_post_by_slug(payload.slug) is not None:
        raise ConflictError("A blog post with this slug already exists")
    try:
        return storage.create_blog_post(payload.model_dump())
    except IntegrityError as exc:
        raise ConflictError("A blog post with this slug already exists") from exc


@admin_router.put("/{post_id}", response_model=BlogPost)
def update_blog_post(post_id: int, payload: BlogPostUpdate, storage: Storage = Depends(get_storage)) -> BlogPost:
    changes = payload.changes()
    if "slug" in changes:
        existing = storage.get_blog_post_by_slug(changes["slug"])
        if existing is not None and existing.id != post_id:
            raise ConflictError("A blog post with this slug already exists")
    post = storage.update_blog_post(post_id, changes)
    if post is None:
        raise NotFoundError("Blog post not found")
    return post


@admin_router.delete("/{post_id}", response_model=MessageResponse)
def delete_blog_post(post_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_blog_post(post_id):
        raise NotFoundError("Blog post not found")
    return MessageResponse(message="Blog post deleted successfully")
