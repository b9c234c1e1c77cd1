"""Combine the individual extractors over every crawled page of a site."""

from __future__ import annotations

import logging
from datetime import datetime

from lead_pipeline.extract.acquisition import extract_acquisition_signals, summarize_signals
from lead_pipeline.extract.contact import (
    extract_emails,
    extract_phones,
    find_contact_page_url,
    normalize_phone,
)
from lead_pipeline.extract.history import extract_founded_year, extract_history_snippets
from lead_pipeline.extract.social import extract_social_links, merge_social, social_from_same_as
from lead_pipeline.extract.team import (
    dedupe_team_members,
    extract_headcount,
    extract_new_hires,
    extract_team_members,
    is_team_page,
)
from lead_pipeline.models import (
    AcquisitionSignal,
    ExtractedData,
    HistorySnippet,
    NewHireMention,
    ScrapedPage,
    SocialLinks,
    TeamMember,
)
from lead_pipeline.scrape.html import extract_schema_org, extract_text_lines

logger = logging.getLogger(__name__)

PRIORITY_KEYWORDS = ("about", "contact", "team", "staff", "leadership")
SCHEMA_SOURCE = "Schema.org JSON-LD"

MAX_NEW_HIRES = 10
MAX_SIGNALS = 10
MAX_SNIPPETS = 5


def _page_priority(page: ScrapedPage) -> int:
    url = page.url.lower()
    for rank, keyword in enumerate(PRIORITY_KEYWORDS):
        if keyword in url:
            return rank
    return len(PRIORITY_KEYWORDS)


def extract_all_data(
    pages: list[ScrapedPage],
    known_phones: list[str] | None = None,
    current_year: int | None = None,
) -> ExtractedData:
    """Merge per-page extraction into one ``ExtractedData``.

    Pages are visited about/contact/team/staff/leadership first. The first
    page carrying relevant Schema.org JSON-LD supplies the high-confidence
    facts, overriding anything a regex found on an earlier page. Regex
    passes fill singular facts only while they are still empty and
    accumulate the list-valued ones.
    """
    year_now = current_year or datetime.now().year
    known_phones = known_phones or []
    known = {normalize_phone(p) for p in known_phones if p}

    emails: list[str] = []
    phones: list[str] = []
    social = SocialLinks()
    team: list[TeamMember] = []
    new_hires: list[NewHireMention] = []
    signals: list[AcquisitionSignal] = []
    snippets: list[HistorySnippet] = []
    founded_year: int | None = None
    founded_source: str | None = None
    headcount: int | None = None
    headcount_source: str | None = None
    schema: dict | None = None

    def add_unique(target: list[str], values: list[str]) -> None:
        for value in values:
            if value not in target:
                target.append(value)

    for page in sorted(pages, key=_page_priority):
        text, html = page.text_content, page.html

        if schema is None:
            schema = page.schema_org or extract_schema_org(html, current_year=year_now)
            if schema:
                if schema.get("email"):
                    add_unique(emails, [schema["email"].strip().lower()])
                if schema.get("telephone"):
                    phone = normalize_phone(schema["telephone"])
                    if len(phone) == 10 and phone not in known:
                        add_unique(phones, [phone])
                if schema.get("founding_year"):
                    founded_year, founded_source = schema["founding_year"], SCHEMA_SOURCE
                if schema.get("number_of_employees"):
                    headcount, headcount_source = schema["number_of_employees"], SCHEMA_SOURCE
                if schema.get("same_as"):
                    social = merge_social(social_from_same_as(schema["same_as"]), social)
                if schema.get("founder"):
                    team.append(TeamMember(name=schema["founder"], title="Founder", source_url=page.url))

        add_unique(emails, extract_emails(text, html))
        add_unique(phones, extract_phones(text, known_phones))
        social = merge_social(social, extract_social_links(html))

        if founded_year is None:
            founded_year, founded_source = extract_founded_year(text, current_year=year_now)
        if headcount is None:
            headcount, headcount_source = extract_headcount(text)

        team.extend(extract_team_members(text, page.url, lines=extract_text_lines(html)))
        new_hires.extend(extract_new_hires(text, page.url))
        signals.extend(extract_acquisition_signals(text, page.url))
        snippets.extend(extract_history_snippets(text, page.url))

    team = dedupe_team_members(team)
    result = ExtractedData(
        emails=emails,
        phones=phones,
        contact_page_url=find_contact_page_url([p.url for p in pages]),
        social=social,
        team_members=team,
        has_team_page=any(is_team_page(p.url) for p in pages),
        headcount_estimate=headcount,
        headcount_source=headcount_source,
        new_hire_mentions=new_hires[:MAX_NEW_HIRES],
        acquisition_signals=signals[:MAX_SIGNALS],
        has_acquisition_signal=bool(signals),
        acquisition_summary=summarize_signals(signals),
        founded_year=founded_year,
        founded_source=founded_source,
        years_in_business=year_now - founded_year if founded_year else None,
        history_snippets=snippets[:MAX_SNIPPETS],
    )

    logger.info(
        "Extracted %d emails, %d phones, %d team members, founded=%s, headcount=%s%s",
        len(result.emails), len(result.phones), len(result.team_members),
        result.founded_year or "-", result.headcount_estimate or "-",
        " (schema.org)" if schema else "",
    )
    if result.acquisition_summary:
        logger.info("Ownership signal: %s", result.acquisition_summary)
    return result
