from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Dict, List

from pydantic import BaseModel, Field, field_validator

from vapecave.models.common import PartialUpdateModel, SnakeModel


def _coordinate_to_text(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


class StoreLocation(SnakeModel):
    id: int
    name: str
    city: str
    address: str
    full_address: str
    phone: str
    hours: str = ""
    closed_days: str | None = None
    image: str
    lat: str
    lng: str
    google_place_id: str | None = None
    apple_maps_link: str | None = None
    map_embed: str | None = None
    email: str | None = None
    store_code: str | None = None
    opening_hours: Dict[str, str] = Field(default_factory=dict)
    services: List[str] = Field(default_factory=list)
    accepted_payments: List[str] = Field(default_factory=list)
    area_served: List[str] = Field(default_factory=list)
    public_transit: str | None = None
    parking: str | None = None
    year_established: int | None = None
    price_range: str | None = None
    social_profiles: Dict[str, str] = Field(default_factory=dict)
    description: str | None = None
    neighborhood_info: str | None = None
    amenities: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class StoreLocationCreate(SnakeModel):
    name: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    address: str
    full_address: str
    phone: str
    hours: str = ""
    closed_days: str | None = None
    image: str
    lat: str
    lng: str
    google_place_id: str | None = None
    apple_maps_link: str | None = None
    map_embed: str | None = None
    email: str | None = None
    store_code: str | None = None
    opening_hours: Dict[str, str] = Field(default_factory=dict)
    services: List[str] = Field(default_factory=list)
    accepted_payments: List[str] = Field(default_factory=list)
    area_served: List[str] = Field(default_factory=list)
    public_transit: str | None = None
    parking: str | None = None
    year_established: int | None = None
    price_range: str | None = None
    social_profiles: Dict[str, str] = Field(default_factory=dict)
    description: str | None = None
    neighborhood_info: str | None = None
    amenities: List[str] = Field(default_factory=list)

    _coerce_coordinates = field_validator("lat", "lng", mode="before")(_coordinate_to_text)


class StoreLocationUpdate(PartialUpdateModel, SnakeModel):
    NON_NULLABLE: ClassVar[frozenset[str]] = frozenset(
        {
            "name",
            "city",
            "address",
            "full_address",
            "phone",
            "hours",
            "image",
            "lat",
            "lng",
            "opening_hours",
            "services",
            "accepted_payments",
            "area_served",
            "social_profiles",
            "amenities",
        }
    )

    name: str | None = Field(None, min_length=1)
    city: str | None = Field(None, min_length=1)
    address: str | None = None
    full_address: str | None = None
    phone: str | None = None
    hours: str | None = None
    closed_days: str | None = None
    image: str | None = None
    lat: str | None = None
    lng: str | None = None
    google_place_id: str | None = None
    apple_maps_link: str | None = None
    map_embed: str | None = None
    email: str | None = None
    store_code: str | None = None
    opening_hours: Dict[str, str] | None = None
    services: List[str] | None = None
    accepted_payments: List[str] | None = None
    area_served: List[str] | None = None
    public_transit: str | None = None
    parking: str | None = None
    year_established: int | None = None
    price_range: str | None = None
    social_profiles: Dict[str, str] | None = None
    description: str | None = None
    neighborhood_info: str | None = None
    amenities: List[str] | None = None

    _coerce_coordinates = field_validator("lat", "lng", mode="before")(_coordinate_to_text)


class StoreHoursUpdate(BaseModel):
    opening_hours: Dict[str, str]
    closed_days: str | None = None
    hours: str | None = None

    def changes(self) -> dict[str, object]:
        return {
            "opening_hours": dict(self.opening_hours),
            "closed_days": self.closed_days or None,
            "hours": self.hours or "",
        }


class MapMarker(BaseModel):
    id: int
    name: str
    city: str
    address: str
    lat: float | None = None
    lng: float | None = None
    google_place_id: str | None = None
    apple_maps_link: str | None = None
    phone: str | None = None
    email: str | None = None
    image: str | None = None


class DirectionsResponse(BaseModel):
    platform: str
    url: str
