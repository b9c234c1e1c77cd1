"""Async client for the Google Places API (New), keyed through a credential pool."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from lead_pipeline.credentials.pool import CredentialPool
from lead_pipeline.errors import IncompleteSearchError, PlacesAPIError
from lead_pipeline.models import DataTier

logger = logging.getLogger(__name__)

BASE_URL = "https://places.googleapis.com/v1"
SEARCH_URL = f"{BASE_URL}/places:searchText"

PAGE_SIZE = 20
MAX_RESULTS_PER_QUERY = 60  # hard limit of the Text Search API
PAGE_TOKEN_DELAY = 2.0  # next_page_token needs ~2s before it becomes valid
PHOTO_MAX_WIDTH = 800

# --- Field masks ---

PRO_FIELDS = [
    "id", "displayName", "primaryType", "primaryTypeDisplayName", "types",
    "formattedAddress", "addressComponents", "location", "googleMapsUri",
    "businessStatus", "utcOffsetMinutes", "iconMaskBaseUri", "iconBackgroundColor",
]
ENTERPRISE_FIELDS = PRO_FIELDS + [
    "nationalPhoneNumber", "internationalPhoneNumber", "websiteUri",
    "rating", "userRatingCount", "priceLevel", "priceRange",
    "regularOpeningHours", "currentOpeningHours",
]
ATMOSPHERE_FIELDS = ENTERPRISE_FIELDS + [
    "reviews", "editorialSummary",
    "allowsDogs", "goodForChildren", "goodForGroups", "goodForWatchingSports",
    "liveMusic", "menuForChildren", "outdoorSeating", "reservable", "restroom",
    "servesBeer", "servesBreakfast", "servesBrunch", "servesCocktails",
    "servesCoffee", "servesDessert", "servesDinner", "servesLunch",
    "servesVegetarianFood", "servesWine",
    "curbsidePickup", "delivery", "dineIn", "takeout",
    "parkingOptions", "paymentOptions", "accessibilityOptions",
]
TIER_FIELDS: dict[str, list[str]] = {
    "pro": PRO_FIELDS,
    "enterprise": ENTERPRISE_FIELDS,
    "enterprise_atmosphere": ATMOSPHERE_FIELDS,
}

DETAILS_FIELD_MASK = ",".join([
    "id", "displayName", "formattedAddress", "addressComponents", "location",
    "googleMapsUri", "primaryType",
    "nationalPhoneNumber", "internationalPhoneNumber", "websiteUri",
    "rating", "userRatingCount", "priceLevel", "priceRange",
    "regularOpeningHours", "currentOpeningHours",
    "regularSecondaryOpeningHours", "currentSecondaryOpeningHours",
])
REVIEWS_FIELD_MASK = "reviews,editorialSummary"
PHOTOS_FIELD_MASK = "photos.name,photos.widthPx,photos.heightPx,photos.authorAttributions"


def search_field_mask(tier: DataTier) -> str:
    """``places.*`` mask for a data tier, plus ``nextPageToken`` for paging."""
    fields = TIER_FIELDS.get(tier, ENTERPRISE_FIELDS)
    return ",".join([f"places.{f}" for f in fields] + ["nextPageToken"])


class PlacesClient:
    """Text search, place details and photo URLs.

    Every request takes its key from the credential pool, so throughput
    is bounded by the per-key rate limits no matter how many coroutines
    share the client.
    """

    def __init__(
        self,
        pool: CredentialPool,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        sleep=asyncio.sleep,
    ):
        self.pool = pool
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._sleep = sleep

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_text(
        self,
        text_query: str,
        tier: DataTier = "enterprise",
        max_results: int = MAX_RESULTS_PER_QUERY,
    ) -> list[dict[str, Any]]:
        """All places for ``text_query``, paging 20 at a time up to ``max_results`` (≤60).

        Raises ``PlacesAPIError`` when the first page fails, and
        ``IncompleteSearchError`` carrying the earlier pages when a later
        page fails.
        """
        max_results = min(max_results, MAX_RESULTS_PER_QUERY)
        field_mask = search_field_mask(tier)
        places: list[dict[str, Any]] = []
        page_token: str | None = None

        while True:
            body: dict[str, Any] = {"textQuery": text_query, "pageSize": PAGE_SIZE}
            if page_token:
                body["pageToken"] = page_token

            key = await self.pool.acquire()
            response = await self._client.post(
                SEARCH_URL,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "X-Goog-Api-Key": key,
                    "X-Goog-FieldMask": field_mask,
                },
            )
            if not response.is_success:
                logger.error(
                    "Places search failed for %r: %d - %s",
                    text_query, response.status_code, response.text[:200],
                )
                if places:
                    raise IncompleteSearchError(response.status_code, response.text, places[:max_results])
                raise PlacesAPIError(response.status_code, response.text)

            data = response.json()
            batch = data.get("places") or []
            places.extend(batch)
            page_token = data.get("nextPageToken")
            logger.debug("Page fetched: %d results (total %d)", len(batch), len(places))

            if not page_token or len(places) >= max_results:
                break
            await self._sleep(PAGE_TOKEN_DELAY)

        return places[:max_results]

    async def get_place(self, place_id: str, field_mask: str) -> dict[str, Any]:
        """Place Details with the given mask. Raises ``PlacesAPIError`` on non-2xx."""
        key = await self.pool.acquire()
        response = await self._client.get(
            f"{BASE_URL}/places/{place_id}",
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": key,
                "X-Goog-FieldMask": field_mask,
            },
        )
        if not response.is_success:
            raise PlacesAPIError(response.status_code, response.text)
        return response.json()

    async def get_details(self, place_id: str) -> dict[str, Any]:
        return await self.get_place(place_id, DETAILS_FIELD_MASK)

    async def get_reviews(self, place_id: str) -> dict[str, Any]:
        return await self.get_place(place_id, REVIEWS_FIELD_MASK)

    async def get_photos(self, place_id: str) -> dict[str, Any]:
        return await self.get_place(place_id, PHOTOS_FIELD_MASK)

    def photo_url(self, photo_name: str, max_width: int = PHOTO_MAX_WIDTH) -> str:
        """Media URL for a photo resource, signed with the next key in rotation."""
        key = self.pool.next_key()
        return f"{BASE_URL}/{photo_name}/media?key={key}&maxWidthPx={max_width}"
