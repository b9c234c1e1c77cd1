"""Fakes and payload builders shared by the test modules."""

from __future__ import annotations

import httpx

from lead_pipeline.credentials.pool import CredentialPool
from lead_pipeline.places.client import PlacesClient
from lead_pipeline.scrape.fetcher import FetchResponse


class FakeClock:
    """Manually advanced clock; ``sleep`` advances it instead of waiting."""

    def __init__(self, start: float = 1_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


async def no_sleep(_seconds: float) -> None:
    return None


def make_places_client(pool: CredentialPool, handler) -> PlacesClient:
    """PlacesClient whose HTTP calls go to ``handler(request) -> httpx.Response``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PlacesClient(pool, client=client, sleep=no_sleep)


def place(place_id: str, name: str = "Acme Plumbing", website: str | None = None, **extra) -> dict:
    """Minimal Places API place payload."""
    payload = {
        "id": place_id,
        "displayName": {"text": name},
        "formattedAddress": "123 Main St, Denver, CO 80202, USA",
        "primaryType": "plumber",
        "nationalPhoneNumber": "(303) 555-0100",
    }
    if website:
        payload["websiteUri"] = website
    payload.update(extra)
    return payload


class FakeHttp:
    """Stands in for ``HttpFetcher``: canned bodies per URL, 404 for the rest."""

    def __init__(self, pages=None, errors=None, statuses=None):
        self.pages = pages or {}
        self.errors = errors or {}
        self.statuses = statuses or {}
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url):
        self.calls.append(url)
        if url in self.errors:
            return None, self.errors[url]
        if url in self.pages:
            return FetchResponse(body=self.pages[url], status_code=self.statuses.get(url, 200)), None
        return FetchResponse(body="Not found", status_code=404), None

    async def aclose(self):
        self.closed = True


class FakeBrowser:
    """Stands in for ``BrowserPool``; URLs it has no page for fail to render."""

    def __init__(self, pages=None, fail_start: bool = False):
        self.pages = pages or {}
        self.fail_start = fail_start
        self.calls: list[str] = []
        self.started = False
        self.closed = False

    async def start(self):
        if self.fail_start:
            raise RuntimeError("Executable doesn't exist")
        self.started = True

    async def render(self, url):
        self.calls.append(url)
        if url not in self.pages:
            raise RuntimeError("navigation failed")
        return self.pages[url]

    async def close(self):
        self.closed = True


SAMPLE_COPY = {
    "hero": {
        "headline": "Denver's Trusted Plumbers",
        "subheadline": "Fast, honest repairs",
        "primaryCtaText": "Call Now (303) 555-0100",
        "secondaryCtaText": "Get Free Quote",
        "trustBadges": ["Licensed", "Insured", "Local"],
    },
    "servicesSection": {
        "tagline": "WHAT WE OFFER",
        "headline": "Plumbing Done Right",
        "subheadline": "From leaks to full repipes",
        "services": [{"icon": "Wrench", "title": "Repairs", "description": "Leaks fixed fast"}],
    },
    "whyChooseUs": {
        "tagline": "WHY US",
        "headline": "Neighbors Trust Us",
        "benefits": [{"icon": "Clock", "title": "On Time", "description": "We show up"}],
    },
    "serviceArea": {
        "headline": "Serving Denver",
        "hoursHeadline": "Open Today",
        "hoursSubtext": "Call anytime",
        "phoneHeadline": "Talk to a plumber",
    },
    "emergencyCta": {"headline": "Burst Pipe?", "subheadline": "We answer 24/7", "ctaText": "Call Now"},
    "contactSection": {"tagline": "CONTACT", "trustBadges": ["5 Stars", "Family Owned"], "servingNote": "Metro Denver"},
    "seo": {"title": "Acme Plumbing", "description": "Denver plumbers", "keywords": "plumber denver", "schemaType": "Plumber"},
    "theme": {"primary": "#1d4ed8", "primaryDark": "#1e3a8a", "accent": "#f59e0b", "accentHover": "#d97706"},
}
