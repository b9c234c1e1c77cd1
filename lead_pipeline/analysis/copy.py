"""Landing page copy generation for businesses without a website."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from lead_pipeline.analysis.llm_client import llm_complete
from lead_pipeline.analysis.prompts import COPY_PROMPT, SYSTEM_PROMPT
from lead_pipeline.config import Config
from lead_pipeline.errors import CopyGenerationError
from lead_pipeline.models import CopyPatch

logger = logging.getLogger(__name__)

# (system, prompt) -> response text
LLMCall = Callable[[str, str], Awaitable[str]]

_ZIP_RE = re.compile(r"\b(\d{5}(?:-\d{4})?)\b")
_BADGE_SEPARATOR = " | "


def _load_reviews(raw: Any) -> list[dict[str, Any]]:
    """Stored reviews as a list, tolerating the JSON-string form older records carry."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw or "[]")
        except json.JSONDecodeError:
            return []
    if not isinstance(raw, list):
        return []
    return [r for r in raw if isinstance(r, dict)]


def build_business_data(record: dict[str, Any]) -> dict[str, Any]:
    """The business facts handed to the model."""
    address = record.get("address") or ""
    zip_match = _ZIP_RE.search(address)
    reviews = [
        {
            "text": r.get("text") or "",
            "author": r.get("author_display_name") or r.get("authorDisplayName") or "Anonymous",
            "rating": r.get("rating") or 5,
        }
        for r in _load_reviews(record.get("reviews"))
    ]
    return {
        "business_name": record.get("business_name"),
        "business_type": record.get("business_type"),
        "phone": record.get("phone"),
        "address": address,
        "city": record.get("city"),
        "state": record.get("state"),
        "zip": zip_match.group(1) if zip_match else "",
        "rating": record.get("rating"),
        "rating_count": record.get("rating_count"),
        "hours": record.get("hours"),
        "reviews": reviews,
        "google_maps_uri": record.get("google_maps_uri"),
        "primary_type": record.get("business_type"),
    }


def build_user_prompt(record: dict[str, Any]) -> str:
    return COPY_PROMPT.format(business_data=json.dumps(build_business_data(record), indent=2))


def strip_json_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_copy(response_text: str) -> dict[str, Any]:
    cleaned = strip_json_fences(response_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Copy JSON parse error: %s\nResponse preview: %s", e, cleaned[:200])
        raise CopyGenerationError(f"Model response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CopyGenerationError("Model response is not a JSON object")
    return data


def flatten_copy(copy: dict[str, Any]) -> CopyPatch:
    """Nested copy sections -> flat ``copy_*`` record fields.

    Trust badges are joined with `` | ``; services and benefits stay lists.
    """
    try:
        hero = copy["hero"]
        services = copy["servicesSection"]
        why = copy["whyChooseUs"]
        area = copy["serviceArea"]
        emergency = copy["emergencyCta"]
        contact = copy["contactSection"]
        seo = copy["seo"]
        theme = copy["theme"]
    except KeyError as e:
        raise CopyGenerationError(f"Generated copy is missing section {e}") from e

    return CopyPatch(
        copy_hero_headline=hero.get("headline"),
        copy_hero_subheadline=hero.get("subheadline"),
        copy_hero_primary_cta=hero.get("primaryCtaText"),
        copy_hero_secondary_cta=hero.get("secondaryCtaText"),
        copy_hero_trust_badges=_BADGE_SEPARATOR.join(hero.get("trustBadges") or []),
        copy_services_tagline=services.get("tagline"),
        copy_services_headline=services.get("headline"),
        copy_services_subheadline=services.get("subheadline"),
        copy_services_items=services.get("services") or [],
        copy_why_tagline=why.get("tagline"),
        copy_why_headline=why.get("headline"),
        copy_why_benefits=why.get("benefits") or [],
        copy_area_headline=area.get("headline"),
        copy_area_hours_headline=area.get("hoursHeadline"),
        copy_area_hours_subtext=area.get("hoursSubtext"),
        copy_area_phone_headline=area.get("phoneHeadline"),
        copy_emergency_headline=emergency.get("headline"),
        copy_emergency_subheadline=emergency.get("subheadline"),
        copy_emergency_cta=emergency.get("ctaText"),
        copy_contact_tagline=contact.get("tagline"),
        copy_contact_trust_badges=_BADGE_SEPARATOR.join(contact.get("trustBadges") or []),
        copy_contact_serving_note=contact.get("servingNote"),
        copy_seo_title=seo.get("title"),
        copy_seo_description=seo.get("description"),
        copy_seo_keywords=seo.get("keywords"),
        copy_seo_schema_type=seo.get("schemaType"),
        copy_theme_primary=theme.get("primary"),
        copy_theme_primary_dark=theme.get("primaryDark"),
        copy_theme_accent=theme.get("accent"),
        copy_theme_accent_hover=theme.get("accentHover"),
        copy_updated_at=datetime.now(timezone.utc).isoformat(),
    )


def llm_for_config(config: Config) -> LLMCall:
    """Bind the configured keys and models to ``llm_complete``."""

    async def call(system: str, prompt: str) -> str:
        return await llm_complete(
            prompt=prompt,
            system=system,
            api_key_anthropic=config.anthropic_api_key,
            api_key_openai=config.openai_api_key,
            model_anthropic=config.copy_model,
            model_openai=config.openai_copy_model,
            max_tokens=config.copy_max_tokens,
        )

    return call


async def generate_copy(record: dict[str, Any], llm: LLMCall) -> CopyPatch:
    """Generate and flatten landing page copy for one business.

    Raises ``CopyGenerationError`` when the response cannot be used.
    """
    response_text = await llm(SYSTEM_PROMPT, build_user_prompt(record))
    return flatten_copy(parse_copy(response_text))
