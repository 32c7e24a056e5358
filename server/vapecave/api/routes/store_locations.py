from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Header, Query, status

from vapecave.api.deps import get_app_settings, get_storage, require_admin
from vapecave.core.config import AppSettings
from vapecave.core.exceptions import NotFoundError
from vapecave.models.common import MessageResponse, SeedResponse
from vapecave.models.locations import (
    DirectionsResponse,
    MapMarker,
    StoreHoursUpdate,
    StoreLocation,
    StoreLocationCreate,
    StoreLocationUpdate,
)
from vapecave.services import locations as location_service
from vapecave.services.seeding import seed_store_locations
from vapecave.services.storage import Storage

router = APIRouter(prefix="/api/store-locations", tags=["store-locations"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _get_location_or_404(storage: Storage, location_id: int) -> StoreLocation:
    location = storage.get_store_location(location_id)
    if location is None:
        raise NotFoundError("Store location not found")
    return location


@router.get("", response_model=List[StoreLocation])
def list_store_locations(storage: Storage = Depends(get_storage)) -> List[StoreLocation]:
    return storage.get_all_store_locations()


@router.get("/map", response_model=List[MapMarker])
def store_location_markers(storage: Storage = Depends(get_storage)) -> List[MapMarker]:
    return location_service.map_markers(storage.get_all_store_locations())


@router.get("/city/{city}", response_model=StoreLocation)
def get_store_location_by_city(city: str, storage: Storage = Depends(get_storage)) -> StoreLocation:
    location = storage.get_store_location_by_city(city)
    if location is None:
        raise NotFoundError("Store location not found")
    return location


@router.get("/{location_id}", response_model=StoreLocation)
def get_store_location(location_id: int, storage: Storage = Depends(get_storage)) -> StoreLocation:
    return _get_location_or_404(storage, location_id)


@router.get("/{location_id}/structured-data", response_model=Dict[str, Any])
def get_store_location_structured_data(
    location_id: int,
    storage: Storage = Depends(get_storage),
    settings: AppSettings = Depends(get_app_settings),
) -> Dict[str, Any]:
    location = _get_location_or_404(storage, location_id)
    return location_service.build_structured_data(location, site_url=settings.site_url)


@router.get("/{location_id}/directions", response_model=DirectionsResponse)
def get_store_location_directions(
    location_id: int,
    plus_code: str | None = Query(None, alias="plusCode"),
    user_agent: str | None = Header(None),
    storage: Storage = Depends(get_storage),
) -> DirectionsResponse:
    location = _get_location_or_404(storage, location_id)
    platform = location_service.detect_platform(user_agent)
    return DirectionsResponse(
        platform=platform,
        url=location_service.directions_url(location, platform, plus_code),
    )


@admin_router.post("/store-locations", response_model=StoreLocation, status_code=status.HTTP_201_CREATED)
def create_store_location(payload: StoreLocationCreate, storage: Storage = Depends(get_storage)) -> StoreLocation:
    return storage.create_store_location(payload.model_dump())


@admin_router.put("/store-locations/{location_id}", response_model=StoreLocation)
def update_store_location(
    location_id: int,
    payload: StoreLocationUpdate,
    storage: Storage = Depends(get_storage),
) -> StoreLocation:
    location = storage.update_store_location(location_id, payload.changes())
    if location is None:
        raise NotFoundError("Store location not found")
    return location


@admin_router.put("/store-locations/{location_id}/hours", response_model=StoreLocation)
def update_store_hours(
    location_id: int,
    payload: StoreHoursUpdate,
    storage: Storage = Depends(get_storage),
) -> StoreLocation:
    location = storage.update_store_location(location_id, payload.changes())
    if location is None:
        raise NotFoundError("Store location not found")
    return location


@admin_router.delete("/store-locations/{location_id}", response_model=MessageResponse)
def delete_store_location(location_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_store_location(location_id):
        raise NotFoundError("Store location not found")
    return MessageResponse(message="Store location deleted successfully")


@admin_router.post("/seed-store-locations", response_model=SeedResponse)
def seed_locations(storage: Storage = Depends(get_storage)) -> SeedResponse:
    result = seed_store_locations(storage)
    return SeedResponse(message="Store locations seeded successfully", **result.as_dict())
