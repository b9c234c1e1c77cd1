"""Tests for the contact, team, history and Schema.org-aware extractors."""

from __future__ import annotations

import json

from lead_pipeline.extract.contact import (
    decode_cloudflare_email,
    extract_emails,
    extract_phones,
    is_fake_phone,
    normalize_phone,
)
from lead_pipeline.extract.extractor import SCHEMA_SOURCE, extract_all_data
from lead_pipeline.extract.history import extract_founded_year
from lead_pipeline.extract.names import is_valid_person_name, normalize_name
from lead_pipeline.extract.social import extract_social_links
from lead_pipeline.extract.team import extract_headcount, extract_team_members
from lead_pipeline.models import ScrapedPage
from lead_pipeline.scrape.html import extract_text


def _cf_encode(email: str, key: int = 0x42) -> str:
    return f"{key:02x}" + "".join(f"{ord(c) ^ key:02x}" for c in email)


def _page(url: str, body: str, head: str = "") -> ScrapedPage:
    html = f"<html><head>{head}</head><body>{body}</body></html>"
    return ScrapedPage(url=url, html=html, text_content=extract_text(html))


def _jsonld(data: dict) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


class TestEmails:
    def test_text_emails_deduped_and_filtered(self):
        text = "Email info@acme-plumbing.com or INFO@acme-plumbing.com. Not test@example.com or logo@2x.png"
        assert extract_emails(text) == ["info@acme-plumbing.com"]

    def test_mailto_links(self):
        html = '<a href="mailto:sales@acme.com?subject=Quote">Email us</a>'
        assert extract_emails("", html) == ["sales@acme.com"]

    def test_cloudflare_obfuscated_email(self):
        encoded = _cf_encode("owner@acme.com")
        assert decode_cloudflare_email(encoded) == "owner@acme.com"
        html = f'<span class="__cf_email__" data-cfemail="{encoded}">[email&#160;protected]</span>'
        assert extract_emails("", html) == ["owner@acme.com"]

    def test_bad_cloudflare_payload(self):
        assert decode_cloudflare_email("zz") is None
        assert decode_cloudflare_email("4243") is None

    def test_platform_addresses_are_blocked(self):
        assert extract_emails("errors go to abc123@sentry.wixpress.com") == []


class TestPhones:
    def test_known_and_fake_numbers_excluded(self):
        text = "Call (303) 555-0100 or 720.555.0199. Fax 1-303-555-0100. Test 555-555-5555."
        assert extract_phones(text, known_phones=["(303) 555-0100"]) == ["7205550199"]

    def test_normalize_strips_country_code(self):
        assert normalize_phone("+1 (303) 555-0100") == "3035550100"

    def test_fake_patterns(self):
        assert is_fake_phone("1234567890")
        assert is_fake_phone("2222222222")
        assert is_fake_phone("0305550100")
        assert not is_fake_phone("3035550100")


class TestNames:
    def test_city_and_state_are_not_people(self):
        assert not is_valid_person_name("Denver Colorado")

    def test_common_names_pass(self):
        assert is_valid_person_name("John Smith")
        assert is_valid_person_name("Sarah O'Connor")
        assert is_valid_person_name("Michael J. Fox")

    def test_single_word_and_unknown_first_name_rejected(self):
        assert not is_valid_person_name("John")
        assert not is_valid_person_name("Plumbing Experts")

    def test_normalize_name(self):
        assert normalize_name("joe o'brien") == "Joe O'Brien"
        assert normalize_name("MARY MCDONALD") == "Mary McDonald"


class TestTeamMembers:
    def test_name_title_pairs(self):
        text = "Meet John Smith, Owner of Acme. Sarah Jones, General Manager, runs the office."
        members = extract_team_members(text, "https://acme.example/about")
        assert [(m.name, m.title) for m in members] == [
            ("John Smith", "Owner"),
            ("Sarah Jones", "General Manager"),
        ]

    def test_place_names_rejected(self):
        """"Denver Colorado Plumbing Service" is a business line, not a person."""
        text = "Denver Colorado Plumbing Service"
        assert extract_team_members(text, "https://acme.example/our-team", lines=[text, "Denver Colorado"]) == []

    def test_bare_names_only_on_team_pages(self):
        lines = ["Our People", "David Miller", "Maria Garcia"]
        on_team_page = extract_team_members("", "https://acme.example/our-team", lines=lines)
        assert [(m.name, m.title) for m in on_team_page] == [
            ("David Miller", "Team Member"),
            ("Maria Garcia", "Team Member"),
        ]
        assert extract_team_members("", "https://acme.example/services", lines=lines) == []


class TestHeadcountAndHistory:
    def test_headcount_phrasings(self):
        count, source = extract_headcount("Our team of 12 technicians serves Denver. We employ 12 people.")
        assert count == 12
        assert source

    def test_headcount_range_uses_upper_bound(self):
        count, _ = extract_headcount("We are a firm of 10-15 employees.")
        assert count == 15

    def test_founded_year_phrasings(self):
        assert extract_founded_year("Proudly serving Denver since 1987.", current_year=2026) == (1987, "since 1987")
        year, _ = extract_founded_year("With 25 years in business we know pipes.", current_year=2026)
        assert year == 2001

    def test_future_years_ignored(self):
        assert extract_founded_year("Established 2999", current_year=2026) == (None, None)


class TestSocial:
    def test_first_link_per_platform(self):
        html = (
            '<a href="https://www.facebook.com/acmeplumbing">fb</a>'
            '<a href="https://facebook.com/other">fb2</a>'
            '<a href="https://www.linkedin.com/company/acme-plumbing">li</a>'
        )
        social = extract_social_links(html)
        assert social.facebook == "https://www.facebook.com/acmeplumbing"
        assert social.linkedin == "https://www.linkedin.com/company/acme-plumbing"
        assert social.instagram is None


class TestExtractAllData:
    def test_schema_founding_year_beats_regex_from_earlier_page(self):
        about = _page("https://acme.example/about", "<p>Founded in 1995 by the Smith family.</p>")
        home = _page(
            "https://acme.example/",
            "<p>Welcome</p>",
            head=_jsonld({"@context": "https://schema.org", "@type": "Plumber", "foundingDate": "1987-05-01"}),
        )
        data = extract_all_data([home, about], current_year=2026)
        assert data.founded_year == 1987
        assert data.founded_source == SCHEMA_SOURCE
        assert data.years_in_business == 39

    def test_schema_headcount_and_founder(self):
        page = _page(
            "https://acme.example/",
            "<p>Our team of 8 technicians.</p>",
            head=_jsonld({
                "@type": "LocalBusiness",
                "numberOfEmployees": {"@type": "QuantitativeValue", "value": 25},
                "founder": {"@type": "Person", "name": "Jane Doe"},
            }),
        )
        data = extract_all_data([page], current_year=2026)
        assert data.headcount_estimate == 25
        assert data.headcount_source == SCHEMA_SOURCE
        assert ("Jane Doe", "Founder") in [(m.name, m.title) for m in data.team_members]

    def test_known_phone_excluded_even_from_schema(self):
        page = _page(
            "https://acme.example/contact",
            "<p>Call (303) 555-0100</p>",
            head=_jsonld({"@type": "Plumber", "telephone": "+1-303-555-0100", "email": "Hello@Acme.com"}),
        )
        data = extract_all_data([page], known_phones=["(303) 555-0100"])
        assert data.phones == []
        assert data.emails == ["hello@acme.com"]
        assert data.contact_page_url == "https://acme.example/contact"

    def test_schema_same_as_beats_regex_links(self):
        page = _page(
            "https://acme.example/",
            '<a href="https://www.facebook.com/acme-old">Old page</a>'
            + _jsonld({
                "@type": "Organization",
                "sameAs": ["https://www.facebook.com/AcmeOfficial", "https://twitter.com/acme"],
            }),
        )
        data = extract_all_data([page])
        assert data.social.facebook == "https://www.facebook.com/AcmeOfficial"
        assert data.social.twitter == "https://twitter.com/acme"

    def test_lists_merge_across_pages(self):
        pages = [
            _page("https://acme.example/", "<p>Email info@acme.com. Acme was acquired by Big Corp in 2019.</p>"),
            _page("https://acme.example/our-team", "<p>John Smith, Owner</p><p>Email jobs@acme.com</p>"),
        ]
        data = extract_all_data(pages, current_year=2026)
        assert set(data.emails) == {"info@acme.com", "jobs@acme.com"}
        assert data.has_team_page
        assert [m.name for m in data.team_members] == ["John Smith"]
        assert data.has_acquisition_signal
        assert data.acquisition_signals[0].signal_type == "acquired"
        assert data.acquisition_signals[0].date_mentioned == "2019"

    def test_no_pages(self):
        data = extract_all_data([])
        assert data.emails == []
        assert data.founded_year is None
        assert not data.has_team_page
