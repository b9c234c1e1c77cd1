"""Tests for landing page copy prompts, parsing and flattening."""

from __future__ import annotations

import json

import pytest

from lead_pipeline.analysis.copy import (
    build_business_data,
    build_user_prompt,
    flatten_copy,
    generate_copy,
    parse_copy,
    strip_json_fences,
)
from lead_pipeline.analysis.prompts import SYSTEM_PROMPT
from lead_pipeline.errors import CopyGenerationError
from tests.helpers import SAMPLE_COPY

RECORD = {
    "place_id": "abc",
    "business_name": "Acme Plumbing",
    "business_type": "plumber",
    "phone": "(303) 555-0100",
    "address": "123 Main St, Denver, CO 80202-1234, USA",
    "city": "Denver",
    "state": "CO",
    "rating": 4.8,
    "rating_count": 120,
    "reviews": [
        {"text": "Fixed our leak", "author_display_name": "Jane D.", "rating": 4},
        {"text": "Great", "authorDisplayName": "Bob S."},
        {"text": "Fine"},
    ],
}


class TestBusinessData:
    def test_fields(self):
        data = build_business_data(RECORD)
        assert data["zip"] == "80202-1234"
        assert data["primary_type"] == "plumber"
        assert data["reviews"] == [
            {"text": "Fixed our leak", "author": "Jane D.", "rating": 4},
            {"text": "Great", "author": "Bob S.", "rating": 5},
            {"text": "Fine", "author": "Anonymous", "rating": 5},
        ]

    def test_reviews_stored_as_json_string(self):
        record = {**RECORD, "reviews": json.dumps([{"text": "Solid", "rating": 3}])}
        assert build_business_data(record)["reviews"] == [{"text": "Solid", "author": "Anonymous", "rating": 3}]

    def test_missing_address_and_bad_reviews(self):
        data = build_business_data({"business_name": "X", "reviews": "not json"})
        assert data["zip"] == ""
        assert data["reviews"] == []

    def test_prompt_embeds_business_data(self):
        prompt = build_user_prompt(RECORD)
        assert '"business_name": "Acme Plumbing"' in prompt
        assert '"hero": {' in prompt
        assert "{business_data}" not in prompt


class TestParsing:
    @pytest.mark.parametrize("raw", [
        '```json\n{"a": 1}\n```',
        '```\n{"a": 1}\n```',
        '  {"a": 1}  ',
    ])
    def test_strip_fences(self, raw):
        assert strip_json_fences(raw) == '{"a": 1}'

    def test_invalid_json(self):
        with pytest.raises(CopyGenerationError):
            parse_copy("Sure! Here is your copy: {")

    def test_non_object(self):
        with pytest.raises(CopyGenerationError):
            parse_copy("[1, 2]")


class TestFlatten:
    def test_flattened_fields(self):
        patch = flatten_copy(SAMPLE_COPY)
        assert patch.copy_hero_headline == "Denver's Trusted Plumbers"
        assert patch.copy_hero_trust_badges == "Licensed | Insured | Local"
        assert patch.copy_contact_trust_badges == "5 Stars | Family Owned"
        assert patch.copy_services_items == [{"icon": "Wrench", "title": "Repairs", "description": "Leaks fixed fast"}]
        assert patch.copy_why_benefits[0]["title"] == "On Time"
        assert patch.copy_seo_schema_type == "Plumber"
        assert patch.copy_theme_accent_hover == "#d97706"
        assert patch.copy_generated is True
        assert patch.copy_updated_at

    def test_missing_section(self):
        partial = {k: v for k, v in SAMPLE_COPY.items() if k != "seo"}
        with pytest.raises(CopyGenerationError, match="seo"):
            flatten_copy(partial)


class TestGenerateCopy:
    async def test_passes_system_prompt_and_parses_fenced_reply(self):
        calls = []

        async def llm(system, prompt):
            calls.append((system, prompt))
            return "```json\n" + json.dumps(SAMPLE_COPY) + "\n```"

        patch = await generate_copy(RECORD, llm)
        assert patch.copy_seo_title == "Acme Plumbing"
        [(system, prompt)] = calls
        assert system == SYSTEM_PROMPT
        assert "Acme Plumbing" in prompt
