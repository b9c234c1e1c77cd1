"""Mapping Places API payloads onto business records and stage patches."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable

from lead_pipeline.models import (
    DataTier,
    DetailsPatch,
    Photo,
    PhotoAttribution,
    PhotosPatch,
    Review,
    ReviewsPatch,
    SearchQuery,
)

MAX_REVIEWS = 5

PRICE_LEVELS = {
    "PRICE_LEVEL_FREE": "Free",
    "PRICE_LEVEL_INEXPENSIVE": "$",
    "PRICE_LEVEL_MODERATE": "$$",
    "PRICE_LEVEL_EXPENSIVE": "$$$",
    "PRICE_LEVEL_VERY_EXPENSIVE": "$$$$",
}

# Atmosphere attributes: Places field -> record field
ATMOSPHERE_FIELDS = {
    "allowsDogs": "allows_dogs",
    "goodForChildren": "good_for_children",
    "goodForGroups": "good_for_groups",
    "goodForWatchingSports": "good_for_watching_sports",
    "liveMusic": "live_music",
    "menuForChildren": "menu_for_children",
    "outdoorSeating": "outdoor_seating",
    "reservable": "reservable",
    "restroom": "has_restroom",
    "servesBeer": "serves_beer",
    "servesBreakfast": "serves_breakfast",
    "servesBrunch": "serves_brunch",
    "servesCocktails": "serves_cocktails",
    "servesCoffee": "serves_coffee",
    "servesDessert": "serves_dessert",
    "servesDinner": "serves_dinner",
    "servesLunch": "serves_lunch",
    "servesVegetarianFood": "serves_vegetarian",
    "servesWine": "serves_wine",
    "curbsidePickup": "has_curbside_pickup",
    "delivery": "has_delivery",
    "dineIn": "has_dine_in",
    "takeout": "has_takeout",
    "parkingOptions": "parking_options",
    "paymentOptions": "payment_options",
    "accessibilityOptions": "accessibility_options",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def address_component(components: list[dict] | None, component_type: str) -> str:
    for component in components or []:
        if component_type in component.get("types", []):
            return component.get("longText") or component.get("shortText") or ""
    return ""


def city_from_address(formatted_address: str) -> str:
    parts = [p.strip() for p in formatted_address.split(",")]
    return parts[1] if len(parts) >= 3 else parts[0]


def format_author_display_name(full_name: str) -> str:
    """``"John Smith"`` -> ``"John S."``."""
    parts = (full_name or "").split()
    if not parts:
        return "Anonymous"
    if len(parts) == 1:
        return parts[0]
    return f"{parts[0]} {parts[-1][0].upper()}."


def format_price_level(price_level: str | None) -> str | None:
    if not price_level:
        return None
    return PRICE_LEVELS.get(price_level, price_level)


def friendly_slug(name: str | None, place_id: str) -> str:
    base = re.sub(r"[^a-z0-9]+", "-", (name or "business").lower())
    return f"{base}-{place_id[-8:]}"


def _display_name(place: dict) -> str | None:
    return (place.get("displayName") or {}).get("text")


def _address_fields(place: dict) -> dict[str, Any]:
    components = place.get("addressComponents")
    street = " ".join(
        p for p in (
            address_component(components, "street_number"),
            address_component(components, "route"),
        ) if p
    )
    formatted = place.get("formattedAddress") or ""
    city = (
        address_component(components, "locality")
        or address_component(components, "sublocality")
        or (city_from_address(formatted) if formatted else "")
    )
    location = place.get("location") or {}
    return {
        "address": formatted,
        "street": street or None,
        "city": city or None,
        "state": address_component(components, "administrative_area_level_1") or None,
        "zip_code": address_component(components, "postal_code") or None,
        "country": address_component(components, "country") or None,
        "latitude": location.get("latitude"),
        "longitude": location.get("longitude"),
    }


def _price_range(place: dict, end: str) -> str | None:
    return ((place.get("priceRange") or {}).get(end) or {}).get("units")


def transform_reviews(raw_reviews: list[dict] | None, limit: int = MAX_REVIEWS) -> list[Review]:
    """First ``limit`` reviews, keeping only those with text."""
    reviews = []
    for raw in (raw_reviews or [])[:limit]:
        text = (raw.get("text") or {}).get("text")
        if not text:
            continue
        author = raw.get("authorAttribution") or {}
        name = author.get("displayName") or ""
        reviews.append(Review(
            text=text,
            author_name=name or "Anonymous",
            author_display_name=format_author_display_name(name),
            author_uri=author.get("uri") or "",
            author_photo_uri=author.get("photoUri"),
            rating=raw.get("rating"),
            relative_time=raw.get("relativePublishTimeDescription"),
            publish_time=raw.get("publishTime"),
        ))
    return reviews


def to_search_record(place: dict, query: SearchQuery, tier: DataTier) -> dict[str, Any]:
    """Full record for a text-search hit.

    Richer tiers already carry details (enterprise) and reviews
    (enterprise_atmosphere), so those completion flags are set too.
    """
    now = _now()
    place_id = place["id"]
    name = _display_name(place)
    record: dict[str, Any] = {
        "place_id": place_id,
        "business_name": name or "Unknown",
        "business_type": place.get("primaryType") or "unknown",
        "primary_type": place.get("primaryType"),
        "primary_type_display_name": (place.get("primaryTypeDisplayName") or {}).get("text"),
        "types": place.get("types"),
        "search_query": query.text_query,
        "data_tier": tier,
        **_address_fields(place),
        "google_maps_uri": place.get("googleMapsUri"),
        "business_status": place.get("businessStatus"),
        "utc_offset_minutes": place.get("utcOffsetMinutes"),
        "icon_mask_uri": place.get("iconMaskBaseUri"),
        "icon_background_color": place.get("iconBackgroundColor"),
        "friendly_slug": friendly_slug(name, place_id),
        "searched": True,
        "searched_at": now,
        "pipeline_status": "searched",
    }

    if tier in ("enterprise", "enterprise_atmosphere"):
        regular = place.get("regularOpeningHours")
        current = place.get("currentOpeningHours")
        record.update({
            "phone": place.get("nationalPhoneNumber") or "",
            "international_phone": place.get("internationalPhoneNumber"),
            "website_uri": place.get("websiteUri"),
            "has_website": bool(place.get("websiteUri")),
            "rating": place.get("rating"),
            "rating_count": place.get("userRatingCount"),
            "price_level": format_price_level(place.get("priceLevel")),
            "price_range_start": _price_range(place, "startPrice"),
            "price_range_end": _price_range(place, "endPrice"),
            "hours": "; ".join((regular or {}).get("weekdayDescriptions") or []),
            "hours_json": regular,
            "current_hours_json": current,
            "is_open_now": (current or {}).get("openNow"),
            "details_fetched": True,
            "details_fetched_at": now,
            "pipeline_status": "details",
        })

    if tier == "enterprise_atmosphere":
        reviews = transform_reviews(place.get("reviews"))
        record.update({
            "reviews": [r.model_dump() for r in reviews],
            "editorial_summary": (place.get("editorialSummary") or {}).get("text") or "",
            "review_count": len(reviews),
            "reviews_fetched": True,
            "reviews_fetched_at": now,
        })
        for api_field, record_field in ATMOSPHERE_FIELDS.items():
            record[record_field] = place.get(api_field)

    return record


def to_details_patch(details: dict, place_id: str) -> DetailsPatch:
    regular = details.get("regularOpeningHours")
    current = details.get("currentOpeningHours")
    name = _display_name(details)
    return DetailsPatch(
        **_address_fields(details),
        google_maps_uri=details.get("googleMapsUri") or "",
        primary_type=details.get("primaryType"),
        phone=details.get("nationalPhoneNumber") or "",
        international_phone=details.get("internationalPhoneNumber"),
        website_uri=details.get("websiteUri"),
        has_website=bool(details.get("websiteUri")),
        rating=details.get("rating"),
        rating_count=details.get("userRatingCount"),
        price_level=format_price_level(details.get("priceLevel")),
        price_range_start=_price_range(details, "startPrice"),
        price_range_end=_price_range(details, "endPrice"),
        hours="; ".join((regular or {}).get("weekdayDescriptions") or []),
        hours_json=regular,
        current_hours_json=current,
        secondary_hours_json=details.get("regularSecondaryOpeningHours"),
        is_open_now=(current or {}).get("openNow"),
        business_name=name,
        friendly_slug=friendly_slug(name, place_id),
        details_fetched_at=_now(),
    )


def to_reviews_patch(payload: dict) -> ReviewsPatch:
    reviews = transform_reviews(payload.get("reviews"))
    return ReviewsPatch(
        reviews=reviews,
        editorial_summary=(payload.get("editorialSummary") or {}).get("text") or "",
        review_count=len(reviews),
        reviews_fetched_at=_now(),
    )


def to_photos_patch(payload: dict, max_photos: int, photo_url: Callable[[str], str]) -> PhotosPatch:
    photos = []
    for raw in (payload.get("photos") or [])[:max_photos]:
        photos.append(Photo(
            url=photo_url(raw["name"]),
            name=raw["name"],
            width=raw.get("widthPx"),
            height=raw.get("heightPx"),
            attributions=[
                PhotoAttribution(
                    display_name=a.get("displayName"),
                    uri=a.get("uri"),
                    photo_uri=a.get("photoUri"),
                )
                for a in raw.get("authorAttributions") or []
            ],
        ))
    return PhotosPatch(
        photo_urls=[p.url for p in photos],
        photos_data=photos,
        photo_count=len(photos),
        photos_fetched_at=_now(),
    )
