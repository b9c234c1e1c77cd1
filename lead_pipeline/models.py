"""Pydantic data models for the lead-enrichment pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DataTier = Literal["pro", "enterprise", "enterprise_atmosphere"]
SignalType = Literal["acquired", "sold", "merger", "new_ownership", "rebranded"]
ScrapeStatus = Literal["complete", "partial", "failed"]
FetchMethod = Literal["http", "browser"]


# ---------------------------------------------------------------------------
# Pipeline position
# ---------------------------------------------------------------------------

class Stage(str, Enum):
    SEARCH = "search"
    DETAILS = "details"
    ENRICH = "enrich"
    PHOTOS = "photos"
    SCRAPE = "scrape"
    COPY = "copy"


class PipelinePosition(str, Enum):
    """Where a record sits in the pipeline, derived from its completion flags."""
    NEW = "new"
    SEARCHED = "searched"
    DETAILED = "detailed"
    REVIEWED = "reviewed"
    PHOTOGRAPHED = "photographed"
    ENRICHED = "enriched"  # reviews and photos both done
    SCRAPED = "scraped"
    COPY_GENERATED = "copy_generated"

    @classmethod
    def of(cls, record: dict[str, Any]) -> PipelinePosition:
        if record.get("copy_generated"):
            return cls.COPY_GENERATED
        if record.get("web_scraped"):
            return cls.SCRAPED
        reviewed = bool(record.get("reviews_fetched"))
        photographed = bool(record.get("photos_fetched"))
        if reviewed and photographed:
            return cls.ENRICHED
        if reviewed:
            return cls.REVIEWED
        if photographed:
            return cls.PHOTOGRAPHED
        if record.get("details_fetched"):
            return cls.DETAILED
        if record.get("searched"):
            return cls.SEARCHED
        return cls.NEW


# ---------------------------------------------------------------------------
# Job input
# ---------------------------------------------------------------------------

class FilterRule(BaseModel):
    """A single predicate over a named record field."""
    field: str
    operator: Literal["EXISTS", "NOT_EXISTS", "EQUALS", "NOT_EQUALS"]
    value: str | None = None

    @field_validator("operator", mode="before")
    @classmethod
    def upper_operator(cls, v):
        return str(v).upper() if v is not None else v

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v):
        if isinstance(v, bool):
            return "true" if v else "false"
        if v is not None:
            return str(v)
        return v


class SearchQuery(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text_query: str
    included_type: str | None = None


class JobInput(BaseModel):
    """Job descriptor handed to every stage worker by the orchestrator."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_id: str | None = None
    place_ids: list[str] | None = None
    filter_rules: list[FilterRule] = Field(default_factory=list)
    concurrency: int | None = None
    skip_if_done: bool = True

    # Search
    searches_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("searchesKey", "searchesS3Key", "searches_key"),
    )
    max_results_per_search: int = 60
    data_tier: DataTier = "enterprise"
    skip_cached_searches: bool = False

    # Enrich / photos
    skip_with_website: bool = True
    max_photos_per_business: int = 5

    # Scrape
    max_pages_per_site: int = 10
    force_rescrape: bool = False
    fast_mode: bool = False
    batch_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("batchKey", "batchS3Key", "batch_key"),
    )
    batch_index: int | None = None


# ---------------------------------------------------------------------------
# Nested record structures
# ---------------------------------------------------------------------------

class Review(BaseModel):
    text: str = ""
    author_name: str = "Anonymous"
    author_display_name: str = "Anonymous"
    author_uri: str = ""
    author_photo_uri: str | None = None
    rating: float | None = None
    relative_time: str | None = None
    publish_time: str | None = None


class PhotoAttribution(BaseModel):
    display_name: str | None = None
    uri: str | None = None
    photo_uri: str | None = None


class Photo(BaseModel):
    url: str
    name: str
    width: int | None = None
    height: int | None = None
    attributions: list[PhotoAttribution] = Field(default_factory=list)


class SocialLinks(BaseModel):
    linkedin: str | None = None
    facebook: str | None = None
    instagram: str | None = None
    twitter: str | None = None


class TeamMember(BaseModel):
    name: str
    title: str
    source_url: str = ""


class AcquisitionSignal(BaseModel):
    text: str
    signal_type: SignalType
    date_mentioned: str | None = None
    source_url: str = ""


class HistorySnippet(BaseModel):
    text: str
    source_url: str = ""


class NewHireMention(BaseModel):
    text: str
    source_url: str = ""


# ---------------------------------------------------------------------------
# Scraping models
# ---------------------------------------------------------------------------

class ScrapedPage(BaseModel):
    """Raw unit stored per crawled page."""
    url: str
    title: str = ""
    html: str = ""
    text_content: str = ""
    links: list[str] = Field(default_factory=list)
    status_code: int = 0
    scraped_at: str = ""
    fetch_method: FetchMethod = "http"
    schema_org: dict[str, Any] | None = None


class ExtractedData(BaseModel):
    """Facts extracted from one business's crawled pages."""
    emails: list[str] = Field(default_factory=list)
    phones: list[str] = Field(default_factory=list)
    contact_page_url: str | None = None
    social: SocialLinks = Field(default_factory=SocialLinks)

    team_members: list[TeamMember] = Field(default_factory=list)
    has_team_page: bool = False
    headcount_estimate: int | None = None
    headcount_source: str | None = None
    new_hire_mentions: list[NewHireMention] = Field(default_factory=list)

    acquisition_signals: list[AcquisitionSignal] = Field(default_factory=list)
    has_acquisition_signal: bool = False
    acquisition_summary: str | None = None

    founded_year: int | None = None
    founded_source: str | None = None
    years_in_business: int | None = None
    history_snippets: list[HistorySnippet] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Business record and per-stage patches
# ---------------------------------------------------------------------------

class BusinessRecord(BaseModel):
    """The shared record, keyed by place id. Unknown fields are preserved."""
    model_config = ConfigDict(extra="allow")

    place_id: str
    business_name: str = "Unknown"
    business_type: str = "unknown"
    primary_type: str | None = None
    primary_type_display_name: str | None = None
    types: list[str] | None = None
    search_query: str | None = None
    data_tier: DataTier | None = None

    address: str = ""
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    google_maps_uri: str | None = None
    business_status: str | None = None
    friendly_slug: str | None = None

    phone: str | None = None
    international_phone: str | None = None
    website_uri: str | None = None
    has_website: bool | None = None
    rating: float | None = None
    rating_count: int | None = None
    hours: str | None = None

    reviews: list[Review] | None = None
    editorial_summary: str | None = None

    # Completion flags: set once, never reset
    searched: bool | None = None
    details_fetched: bool | None = None
    reviews_fetched: bool | None = None
    photos_fetched: bool | None = None
    web_scraped: bool | None = None
    copy_generated: bool | None = None

    pipeline_status: str | None = None
    web_scrape_status: ScrapeStatus | None = None

    @property
    def position(self) -> PipelinePosition:
        return PipelinePosition.of(self.model_dump())


class RecordPatch(BaseModel):
    """Base for typed per-stage updates. Only non-null fields are written."""

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class DetailsPatch(RecordPatch):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    street: str | None = None
    zip_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    google_maps_uri: str | None = None
    primary_type: str | None = None
    phone: str | None = None
    international_phone: str | None = None
    website_uri: str | None = None
    rating: float | None = None
    rating_count: int | None = None
    price_level: str | None = None
    price_range_start: str | None = None
    price_range_end: str | None = None
    hours: str | None = None
    hours_json: dict[str, Any] | None = None
    current_hours_json: dict[str, Any] | None = None
    secondary_hours_json: list[dict[str, Any]] | None = None
    is_open_now: bool | None = None
    business_name: str | None = None
    friendly_slug: str | None = None
    has_website: bool | None = None
    details_fetched: bool | None = True
    details_fetched_at: str | None = None
    pipeline_status: str | None = "details"


class ReviewsPatch(RecordPatch):
    reviews: list[Review] | None = None
    editorial_summary: str | None = None
    review_count: int | None = None
    reviews_fetched: bool | None = True
    reviews_fetched_at: str | None = None


class PhotosPatch(RecordPatch):
    photo_urls: list[str] | None = None
    photos_data: list[Photo] | None = None
    photo_count: int | None = None
    photos_fetched: bool | None = True
    photos_fetched_at: str | None = None
    pipeline_status: str | None = "photos"


class ScrapePatch(RecordPatch):
    web_scraped: bool | None = True
    web_scraped_at: str | None = None
    web_raw_key: str | None = None
    web_extracted_key: str | None = None
    web_pages_count: int | None = None
    web_scrape_method: FetchMethod | None = None
    web_total_bytes: int | None = None
    web_scrape_duration_ms: int | None = None
    web_scrape_errors: int | None = None
    web_scrape_status: ScrapeStatus | None = None

    web_emails: list[str] | None = None
    web_phones: list[str] | None = None
    web_contact_page: str | None = None
    web_social_linkedin: str | None = None
    web_social_facebook: str | None = None
    web_social_instagram: str | None = None
    web_social_twitter: str | None = None

    web_team_members: list[TeamMember] | None = None
    web_team_count: int | None = None
    web_headcount_estimate: int | None = None
    web_headcount_source: str | None = None
    web_new_hires: list[NewHireMention] | None = None
    web_has_team_page: bool | None = None

    web_acquisition_signals: list[AcquisitionSignal] | None = None
    web_has_acquisition_signal: bool | None = None
    web_ownership_note: str | None = None

    web_founded_year: int | None = None
    web_founded_source: str | None = None
    web_years_in_business: int | None = None
    web_history_snippets: list[HistorySnippet] | None = None

    pipeline_status: str | None = "scraped"


class CopyPatch(RecordPatch):
    copy_hero_headline: str | None = None
    copy_hero_subheadline: str | None = None
    copy_hero_primary_cta: str | None = None
    copy_hero_secondary_cta: str | None = None
    copy_hero_trust_badges: str | None = None
    copy_services_tagline: str | None = None
    copy_services_headline: str | None = None
    copy_services_subheadline: str | None = None
    copy_services_items: list[dict[str, Any]] | None = None
    copy_why_tagline: str | None = None
    copy_why_headline: str | None = None
    copy_why_benefits: list[dict[str, Any]] | None = None
    copy_area_headline: str | None = None
    copy_area_hours_headline: str | None = None
    copy_area_hours_subtext: str | None = None
    copy_area_phone_headline: str | None = None
    copy_emergency_headline: str | None = None
    copy_emergency_subheadline: str | None = None
    copy_emergency_cta: str | None = None
    copy_contact_tagline: str | None = None
    copy_contact_trust_badges: str | None = None
    copy_contact_serving_note: str | None = None
    copy_seo_title: str | None = None
    copy_seo_description: str | None = None
    copy_seo_keywords: str | None = None
    copy_seo_schema_type: str | None = None
    copy_theme_primary: str | None = None
    copy_theme_primary_dark: str | None = None
    copy_theme_accent: str | None = None
    copy_theme_accent_hover: str | None = None
    copy_generated: bool | None = True
    copy_updated_at: str | None = None


# ---------------------------------------------------------------------------
# Job metrics
# ---------------------------------------------------------------------------

class StageMetrics(BaseModel):
    processed: int = 0
    failed: int = 0
    filtered: int = 0


class SearchMetrics(StageMetrics):
    searches_run: int = 0
    searches_skipped: int = 0
    duplicates_skipped: int = 0


class DetailsMetrics(StageMetrics):
    with_website: int = 0
    without_website: int = 0


class EnrichMetrics(StageMetrics):
    with_reviews: int = 0
    without_reviews: int = 0


class PhotosMetrics(StageMetrics):
    total_photos: int = 0


class ScrapeMetrics(StageMetrics):
    http_count: int = 0
    browser_count: int = 0
    total_pages: int = 0
    total_bytes: int = 0
    early_exits: int = 0

    def add(self, other: ScrapeMetrics) -> None:
        for name in type(self).model_fields:
            setattr(self, name, getattr(self, name) + getattr(other, name))
