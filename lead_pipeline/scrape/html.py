"""HTML parsing helpers: visible text, title, links, SPA detection, JSON-LD."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MIN_STATIC_TEXT_CHARS = 500

_NON_CONTENT_TAGS = ("script", "style", "noscript", "template")
_SKIPPED_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:")

_SPA_PATTERNS = [
    re.compile(r"<div\s+id=[\"']root[\"'][^>]*>\s*</div>", re.IGNORECASE),
    re.compile(r"<div\s+id=[\"']app[\"'][^>]*>\s*</div>", re.IGNORECASE),
    re.compile(r"<div\s+id=[\"']__next[\"'][^>]*>\s*</div>", re.IGNORECASE),
    re.compile(r"Loading\.\.\.", re.IGNORECASE),
    re.compile(r"<noscript[^>]*>.*(?:enable|requires?)\s+JavaScript", re.IGNORECASE),
]

SCHEMA_TYPES_OF_INTEREST = frozenset({
    "LocalBusiness", "Organization", "Corporation",
    "HomeAndConstructionBusiness", "ProfessionalService", "FinancialService",
    "InsuranceAgency", "RealEstateAgent", "LegalService", "Dentist",
    "Physician", "Store", "Restaurant", "AutoRepair", "Plumber",
    "Electrician", "HVACBusiness", "RoofingContractor", "GeneralContractor",
})


def _soup(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    return soup


def extract_text(html: str) -> str:
    """Visible text with scripts, styles and comments removed and whitespace collapsed."""
    if not html:
        return ""
    text = _soup(html).get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


def extract_text_lines(html: str) -> list[str]:
    """Visible text split at element boundaries, one stripped block per entry."""
    if not html:
        return []
    lines = _soup(html).get_text("\n").splitlines()
    return [line.strip() for line in lines if line.strip()]


def extract_title(html: str) -> str:
    if not html:
        return ""
    title = BeautifulSoup(html, "lxml").title
    if title is None or title.string is None:
        return ""
    return title.string.strip()


def extract_links(html: str, base_url: str) -> list[str]:
    """Absolute ``href`` targets, deduplicated in document order."""
    links: list[str] = []
    seen: set[str] = set()
    for tag in BeautifulSoup(html, "lxml").find_all(href=True):
        href = tag["href"].strip()
        if not href or href.lower().startswith(_SKIPPED_HREF_PREFIXES):
            continue
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


def needs_browser(html: str) -> bool:
    """True when the HTML looks like a client-rendered shell.

    Either the visible text is under 500 characters or the markup carries
    an empty SPA mount point / loading placeholder.
    """
    if len(extract_text(html)) < MIN_STATIC_TEXT_CHARS:
        return True
    return any(p.search(html) for p in _SPA_PATTERNS)


# ---------------------------------------------------------------------------
# Schema.org JSON-LD
# ---------------------------------------------------------------------------

def _jsonld_items(data: Any) -> list[dict]:
    if isinstance(data, dict) and isinstance(data.get("@graph"), list):
        items = data["@graph"]
    elif isinstance(data, list):
        items = data
    else:
        items = [data]
    return [item for item in items if isinstance(item, dict)]


def _employee_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, dict):
        inner = value.get("value") or value.get("minValue")
        if isinstance(inner, (int, float)) and not isinstance(inner, bool):
            return int(inner)
    return None


def _schema_fields(item: dict, current_year: int) -> dict[str, Any]:
    result: dict[str, Any] = {}

    if item.get("email"):
        result["email"] = re.sub(r"^mailto:", "", str(item["email"]), flags=re.IGNORECASE)
    if item.get("telephone"):
        result["telephone"] = str(item["telephone"])
    if item.get("foundingDate"):
        founding = str(item["foundingDate"])
        result["founding_date"] = founding
        if founding[:4].isdigit() and 1800 <= int(founding[:4]) <= current_year:
            result["founding_year"] = int(founding[:4])
    if item.get("name"):
        result["name"] = str(item["name"])
    if item.get("description"):
        result["description"] = str(item["description"])

    address = item.get("address")
    if isinstance(address, dict):
        result["address"] = {
            "street_address": address.get("streetAddress"),
            "address_locality": address.get("addressLocality"),
            "address_region": address.get("addressRegion"),
            "postal_code": address.get("postalCode"),
        }

    if item.get("sameAs"):
        same_as = item["sameAs"] if isinstance(item["sameAs"], list) else [item["sameAs"]]
        result["same_as"] = [u for u in same_as if isinstance(u, str) and u.startswith("http")]

    employees = _employee_count(item.get("numberOfEmployees"))
    if employees:
        result["number_of_employees"] = employees

    founder = item.get("founder")
    if isinstance(founder, str) and founder:
        result["founder"] = founder
    elif isinstance(founder, dict) and founder.get("name"):
        result["founder"] = str(founder["name"])

    return result


def extract_schema_org(html: str, current_year: int | None = None) -> dict[str, Any] | None:
    """Business facts from the first relevant JSON-LD block.

    Only items typed as a business or organization are considered; the
    first one yielding any field is returned. Malformed blocks are skipped.
    """
    if not html or "application/ld+json" not in html:
        return None
    year_now = current_year or datetime.now().year

    soup = BeautifulSoup(html, "lxml")
    for script in soup.find_all("script", type="application/ld+json"):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw.strip())
        except (json.JSONDecodeError, AttributeError):
            continue

        for item in _jsonld_items(data):
            item_type = item.get("@type")
            types = item_type if isinstance(item_type, list) else [item_type]
            if not any(t in SCHEMA_TYPES_OF_INTEREST for t in types if isinstance(t, str)):
                continue
            result = _schema_fields(item, year_now)
            if result:
                logger.debug(
                    "Schema.org %s with: %s",
                    "/".join(str(t) for t in types), ", ".join(result),
                )
                return result
    return None
