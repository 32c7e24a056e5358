"""
Presentation helpers for store locations: opening hours, schema.org
structured data, map markers and platform-specific directions links.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, List
from urllib.parse import quote, urlencode

from vapecave.models.locations import MapMarker, StoreLocation

WEEK_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

PLATFORM_IOS = "ios"
PLATFORM_ANDROID = "android"
PLATFORM_DESKTOP = "desktop"

_IOS_AGENT = re.compile(r"iPhone|iPad|iPod", re.IGNORECASE)
_ANDROID_AGENT = re.compile(r"Android", re.IGNORECASE)
_TIME_12H = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
_CITY_IN_ADDRESS = re.compile(r",\s*([^,]+),\s*[A-Z]{2}")
_POSTAL_CODE = re.compile(r"\d{5}(?![\d-])")


def ordered_opening_hours(opening_hours: dict[str, str]) -> list[tuple[str, str]]:
    """Week days first in calendar order, then any other keys as stored."""
    ordered = [(day, opening_hours[day]) for day in WEEK_DAYS if day in opening_hours]
    ordered.extend((day, hours) for day, hours in opening_hours.items() if day not in WEEK_DAYS)
    return ordered


def to_24h(value: str) -> str | None:
    value = value.strip()
    if value.lower() == "closed":
        return None
    match = _TIME_12H.search(value)
    if not match:
        return value
    hour = int(match.group(1))
    minute = match.group(2)
    period = match.group(3).upper()
    if period == "PM" and hour < 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0
    return f"{hour:02d}:{minute}"


def _coordinate(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _city_slug(city: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", city.lower()).strip("-")


def _opening_hours_specification(opening_hours: dict[str, str]) -> list[dict[str, Any]]:
    specs: list[dict[str, Any]] = []
    for day, hours in ordered_opening_hours(opening_hours):
        parts = [part.strip() for part in hours.split(" - ", 1)]
        if len(parts) != 2:
            continue
        opens = to_24h(parts[0])
        if opens is None:
            continue
        closes = to_24h(parts[1]) or "00:00"
        specs.append(
            {
                "@type": "OpeningHoursSpecification",
                "dayOfWeek": f"https://schema.org/{day}",
                "opens": opens,
                "closes": closes,
            }
        )
    return specs


def build_structured_data(location: StoreLocation, *, site_url: str) -> dict[str, Any]:
    base_url = site_url.rstrip("/")
    page_url = f"{base_url}/locations/{_city_slug(location.city)}"
    postal_match = _POSTAL_CODE.search(location.full_address)
    latitude = _coordinate(location.lat)
    longitude = _coordinate(location.lng)

    if location.google_place_id:
        google_map = f"https://www.google.com/maps/place/?q=place_id:{location.google_place_id}"
    else:
        google_map = f"https://www.google.com/maps/search/?api=1&query={quote(location.full_address, safe='')}"
    maps = [google_map] + [url for url in (location.map_embed, location.apple_maps_link) if url]

    data: dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "VapeShop",
        "@id": page_url,
        "name": location.name,
        "url": page_url,
        "image": [location.image],
        "telephone": "+1" + re.sub(r"[^0-9]", "", location.phone),
        "address": {
            "@type": "PostalAddress",
            "streetAddress": location.address,
            "addressLocality": location.city,
            "addressRegion": "TX",
            "postalCode": postal_match.group(0) if postal_match else "",
            "addressCountry": "US",
        },
        "geo": {"@type": "GeoCoordinates", "latitude": latitude, "longitude": longitude},
        "hasMap": [{"@type": "Map", "url": url} for url in maps],
        "openingHoursSpecification": _opening_hours_specification(location.opening_hours),
        "paymentAccepted": ", ".join(location.accepted_payments),
        "currenciesAccepted": "USD",
        "amenityFeature": [
            {"@type": "LocationFeatureSpecification", "name": amenity, "value": True}
            for amenity in location.amenities
        ],
        "department": [{"@type": "Department", "name": service} for service in location.services],
        "areaServed": [{"@type": "City", "name": area} for area in location.area_served],
        "sameAs": list(location.social_profiles.values()),
    }
    optional = {
        "email": location.email,
        "description": location.description,
        "priceRange": location.price_range,
        "foundingDate": str(location.year_established) if location.year_established else None,
        "branchCode": location.store_code,
    }
    data.update({key: value for key, value in optional.items() if value})
    return data


def detect_platform(user_agent: str | None) -> str:
    agent = user_agent or ""
    if _IOS_AGENT.search(agent):
        return PLATFORM_IOS
    if _ANDROID_AGENT.search(agent):
        return PLATFORM_ANDROID
    return PLATFORM_DESKTOP


def directions_url(location: StoreLocation, platform: str, plus_code: str | None = None) -> str:
    address = location.full_address
    match = _CITY_IN_ADDRESS.search(address)
    city = match.group(1).strip() if match else location.city
    plus_code = (plus_code or "").strip() or None

    if platform == PLATFORM_IOS:
        ll = f"{location.lat},{location.lng}"
        if plus_code:
            return "https://maps.apple.com/?" + urlencode({"q": f"{plus_code} {city}", "ll": ll, "address": address})
        return "https://maps.apple.com/?" + urlencode({"address": address, "ll": ll})

    if plus_code:
        query = f"{plus_code} Vape Cave {city}, Texas"
        return "https://www.google.com/maps/search/?" + urlencode({"api": 1, "query": query})

    params: dict[str, Any] = {"api": 1, "destination": address}
    if platform == PLATFORM_ANDROID:
        params["query"] = address
    params["travelmode"] = "driving"
    return "https://www.google.com/maps/dir/?" + urlencode(params)


def map_markers(locations: Iterable[StoreLocation]) -> List[MapMarker]:
    return [
        MapMarker(
            id=location.id,
            name=location.name,
            city=location.city,
            address=location.full_address,
            lat=_coordinate(location.lat),
            lng=_coordinate(location.lng),
            google_place_id=location.google_place_id,
            apple_maps_link=location.apple_maps_link,
            phone=location.phone,
            email=location.email,
            image=location.image,
        )
        for location in locations
    ]
