from __future__ import annotations

from fastapi.testclient import TestClient


def _post(**overrides):
    payload = {
        "title": "Store news",
        "slug": "store-news",
        "summary": "What is new",
        "content": "Long form body",
        "is_published": True,
    }
    payload.update(overrides)
    return payload


def test_public_listing_hides_drafts_even_when_asked(client: TestClient, memory_storage) -> None:
    memory_storage.create_blog_post(_post())
    memory_storage.create_blog_post(_post(slug="draft", is_published=False))

    plain = client.get("/api/blog-posts").json()
    asked = client.get("/api/blog-posts", params={"includeUnpublished": "true"}).json()

    assert [post["slug"] for post in plain] == ["store-news"]
    assert [post["slug"] for post in asked] == ["store-news"]


def test_admin_can_include_unpublished(admin_client: TestClient, memory_storage) -> None:
    memory_storage.create_blog_post(_post())
    memory_storage.create_blog_post(_post(slug="draft", is_published=False))

    posts = admin_client.get("/api/blog-posts", params={"includeUnpublished": "true"}).json()

    assert {post["slug"] for post in posts} == {"store-news", "draft"}


def test_reading_a_post_counts_views(client: TestClient, memory_storage) -> None:
    post = memory_storage.create_blog_post(_post())

    first = client.get(f"/api/blog-posts/{post.id}")
    client.get("/api/blog-posts/slug/store-news")

    assert first.status_code == 200
    assert first.json()["view_count"] == 0
    assert memory_storage.get_blog_post(post.id).view_count == 2


def test_featured_posts_respect_limit(client: TestClient, memory_storage) -> None:
    for index in range(3):
        memory_storage.create_blog_post(_post(slug=f"feature-{index}", is_featured=True))

    response = client.get("/api/blog-posts/featured", params={"limit": 2})

    assert [post["slug"] for post in response.json()] == ["feature-2", "feature-1"]


def test_missing_post_is_404(client: TestClient) -> None:
    assert client.get("/api/blog-posts/slug/nope").status_code == 404
    assert client.get("/api/blog-posts/42").status_code == 404


def test_admin_post_lifecycle(admin_client: TestClient) -> None:
    created = admin_client.post("/api/admin/blog-posts", json=_post())
    assert created.status_code == 201
    post_id = created.json()["id"]

    updated = admin_client.put(f"/api/admin/blog-posts/{post_id}", json={"is_featured": True})
    assert updated.json()["is_featured"] is True
    assert updated.json()["title"] == "Store news"

    deleted = admin_client.delete(f"/api/admin/blog-posts/{post_id}")
    assert deleted.json() == {"message": "Blog post deleted successfully"}
    assert admin_client.get(f"/api/blog-posts/{post_id}").status_code == 404


def test_duplicate_slug_conflicts(admin_client: TestClient) -> None:
    admin_client.post("/api/admin/blog-posts", json=_post())
    other = admin_client.post("/api/admin/blog-posts", json=_post(slug="other")).json()

    duplicate = admin_client.post("/api/admin/blog-posts", json=_post())
    renamed = admin_client.put(f"/api/admin/blog-posts/{other['id']}", json={"slug": "store-news"})

    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["type"] == "CONFLICT"
    assert renamed.status_code == 409


def test_invalid_slug_is_rejected(admin_client: TestClient) -> None:
    response = admin_client.post("/api/admin/blog-posts", json=_post(slug="Not A Slug"))

    assert response.status_code == 400
