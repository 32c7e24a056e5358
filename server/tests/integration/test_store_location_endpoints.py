from __future__ import annotations

from fastapi.testclient import TestClient

IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
ANDROID_UA = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 Chrome/120.0 Mobile"


def _location(**overrides):
    payload = {
        "name": "Vape Cave Frisco",
        "city": "Frisco",
        "address": "6959 Main St",
        "full_address": "6959 Main St, Frisco, TX 75033, United States",
        "phone": "(469) 294-0061",
        "hours": "10:00 AM - 12:00 AM",
        "closed_days": "Sunday",
        "image": "https://example.com/frisco.jpg",
        "lat": 33.1507,
        "lng": -96.8236,
        "google_place_id": "ChIJxyz",
        "opening_hours": {"Monday": "10:00 AM - 12:00 AM", "Sunday": "Closed"},
    }
    payload.update(overrides)
    return payload


def test_create_coerces_coordinates_to_text(admin_client: TestClient) -> None:
    response = admin_client.post("/api/admin/store-locations", json=_location())

    assert response.status_code == 201
    body = response.json()
    assert body["lat"] == "33.1507"
    assert body["lng"] == "-96.8236"
    assert body["services"] == []


def test_city_lookup_ignores_case(client: TestClient, memory_storage) -> None:
    created = memory_storage.create_store_location(_location(lat="33.1507", lng="-96.8236"))

    response = client.get("/api/store-locations/city/fRiScO")

    assert response.status_code == 200
    assert response.json()["id"] == created.id
    assert client.get("/api/store-locations/city/plano").status_code == 404


def test_hours_update_normalises_empty_values(admin_client: TestClient) -> None:
    before = admin_client.post("/api/admin/store-locations", json=_location()).json()
    location_id = before["id"]

    response = admin_client.put(
        f"/api/admin/store-locations/{location_id}/hours",
        json={"opening_hours": {"Monday": "9:00 AM - 9:00 PM"}, "closed_days": ""},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["opening_hours"] == {"Monday": "9:00 AM - 9:00 PM"}
    assert body["closed_days"] is None
    assert body["hours"] == ""

    after = admin_client.get(f"/api/store-locations/{location_id}").json()
    hours_fields = {"opening_hours", "closed_days", "hours", "updated_at"}
    assert after["opening_hours"] == {"Monday": "9:00 AM - 9:00 PM"}
    assert after["closed_days"] is None
    assert {k: v for k, v in after.items() if k not in hours_fields} == {
        k: v for k, v in before.items() if k not in hours_fields
    }


def test_hours_update_requires_an_object(admin_client: TestClient) -> None:
    location_id = admin_client.post("/api/admin/store-locations", json=_location()).json()["id"]

    response = admin_client.put(
        f"/api/admin/store-locations/{location_id}/hours",
        json={"opening_hours": "always open"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "VALIDATION_ERROR"


def test_map_markers_use_numeric_coordinates(client: TestClient, memory_storage) -> None:
    memory_storage.create_store_location(_location(lat="33.1507", lng="-96.8236"))

    markers = client.get("/api/store-locations/map").json()

    assert markers[0]["lat"] == 33.1507
    assert markers[0]["city"] == "Frisco"


def test_structured_data_describes_the_store(client: TestClient, memory_storage) -> None:
    location = memory_storage.create_store_location(_location(lat="33.1507", lng="-96.8236"))

    data = client.get(f"/api/store-locations/{location.id}/structured-data").json()

    assert data["@type"] == "VapeShop"
    assert data["url"].endswith("/locations/frisco")
    assert data["telephone"] == "+14692940061"
    assert data["geo"]["latitude"] == 33.1507
    assert data["hasMap"][0]["url"].endswith("place_id:ChIJxyz")
    days = [spec["dayOfWeek"] for spec in data["openingHoursSpecification"]]
    assert days == ["https://schema.org/Monday"]


def test_directions_follow_the_user_agent(client: TestClient, memory_storage) -> None:
    location = memory_storage.create_store_location(_location(lat="33.1507", lng="-96.8236"))
    path = f"/api/store-locations/{location.id}/directions"

    ios = client.get(path, headers={"User-Agent": IPHONE_UA}).json()
    android = client.get(path, headers={"User-Agent": ANDROID_UA}).json()
    plus = client.get(path, params={"plusCode": "5R2G+7H"}, headers={"User-Agent": ANDROID_UA}).json()

    assert ios["platform"] == "ios"
    assert ios["url"].startswith("https://maps.apple.com/")
    assert android["platform"] == "android"
    assert android["url"].startswith("https://www.google.com/maps/dir/")
    assert "5R2G%2B7H" in plus["url"]


def test_update_and_delete(admin_client: TestClient) -> None:
    location_id = admin_client.post("/api/admin/store-locations", json=_location()).json()["id"]

    updated = admin_client.put(f"/api/admin/store-locations/{location_id}", json={"phone": "(214) 555-0100"})
    deleted = admin_client.delete(f"/api/admin/store-locations/{location_id}")

    assert updated.json()["phone"] == "(214) 555-0100"
    assert updated.json()["city"] == "Frisco"
    assert deleted.status_code == 200
    assert admin_client.get(f"/api/store-locations/{location_id}").status_code == 404


def test_seed_endpoint_is_repeatable(admin_client: TestClient) -> None:
    first = admin_client.post("/api/admin/seed-store-locations").json()
    second = admin_client.post("/api/admin/seed-store-locations").json()

    assert first["inserted"] == 2
    assert second["inserted"] == 0
    assert second["updated"] == 2
    assert len(admin_client.get("/api/store-locations").json()) == 2


def test_seed_endpoint_requires_admin(client: TestClient) -> None:
    assert client.post("/api/admin/seed-store-locations").status_code == 401
