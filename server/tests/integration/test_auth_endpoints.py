from __future__ import annotations

from fastapi.testclient import TestClient


def test_login_with_wrong_password_is_rejected_without_cookie(client: TestClient, admin_user) -> None:
    response = client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["error"]["type"] == "UNAUTHORIZED"
    assert "set-cookie" not in response.headers
    assert client.get("/api/auth/status").json() == {"authenticated": False}


def test_unknown_user_gets_the_same_401(client: TestClient, admin_user) -> None:
    response = client.post("/api/auth/login", json={"username": "ghost", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


def test_login_sets_session_and_status_reports_user(client: TestClient, admin_user) -> None:
    response = client.post("/api/auth/login", json={"username": "admin", "password": "correct-horse"})

    assert response.status_code == 200
    assert response.json() == {"user": {"id": admin_user.id, "username": "admin", "isAdmin": True}}
    assert "httponly" in response.headers["set-cookie"].lower()

    status = client.get("/api/auth/status").json()
    assert status["authenticated"] is True
    assert status["user"]["username"] == "admin"
    assert "password" not in status["user"]


def test_logout_destroys_session(admin_client: TestClient) -> None:
    response = admin_client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    assert admin_client.get("/api/auth/status").json() == {"authenticated": False}
    assert admin_client.post("/api/admin/brand-categories", json={"category": "x"}).status_code == 401


def test_login_requires_both_fields(client: TestClient) -> None:
    response = client.post("/api/auth/login", json={"username": "admin"})

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "VALIDATION_ERROR"


def test_admin_routes_require_session(client: TestClient) -> None:
    response = client.post("/api/admin/users", json={"username": "new", "password": "pw"})

    assert response.status_code == 401


def test_non_admin_gets_403(client: TestClient, memory_storage) -> None:
    memory_storage.create_user({"username": "clerk", "password": "clerk-pass", "is_admin": False})
    client.post("/api/auth/login", json={"username": "clerk", "password": "clerk-pass"})

    response = client.post("/api/admin/brand-categories", json={"category": "Nope"})

    assert response.status_code == 403
    assert response.json()["error"]["type"] == "FORBIDDEN"


def test_admin_rights_are_rechecked_each_request(admin_client: TestClient, memory_storage, admin_user) -> None:
    assert admin_client.post("/api/admin/brand-categories", json={"category": "Ok"}).status_code == 201

    memory_storage.update_user_password(admin_user.id, "correct-horse", is_admin=False)

    assert admin_client.post("/api/admin/brand-categories", json={"category": "Denied"}).status_code == 403


def test_admin_creates_user_and_duplicates_conflict(admin_client: TestClient) -> None:
    created = admin_client.post("/api/admin/users", json={"username": "staff", "password": "pw", "isAdmin": False})
    duplicate = admin_client.post("/api/admin/users", json={"username": "staff", "password": "pw"})

    assert created.status_code == 201
    assert created.json()["username"] == "staff"
    assert "password" not in created.json()
    assert duplicate.status_code == 409
