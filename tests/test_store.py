"""Tests for filter rules, the business record store, job metrics and the object store."""

from __future__ import annotations

import pytest

from lead_pipeline.models import (
    DetailsPatch,
    FilterRule,
    PipelinePosition,
    ScrapeMetrics,
    SearchMetrics,
)
from lead_pipeline.store.filters import flag_is, flag_is_not, matches, rule_matches


RECORDS = [
    {"place_id": "1", "has_website": True, "rating": 4.5, "city": "Denver"},
    {"place_id": "2", "has_website": False, "rating": 3},
    {"place_id": "3", "has_website": None, "city": ""},
    {"place_id": "4"},
]


class TestFilterRules:
    @pytest.mark.parametrize("operator, complement", [
        ("EXISTS", "NOT_EXISTS"),
        ("EQUALS", "NOT_EQUALS"),
    ])
    @pytest.mark.parametrize("field, value", [
        ("has_website", "true"),
        ("has_website", "false"),
        ("rating", "4.5"),
        ("city", "Denver"),
        ("city", ""),
    ])
    def test_negated_operator_is_exact_complement(self, operator, complement, field, value):
        rule = FilterRule(field=field, operator=operator, value=value)
        negated = FilterRule(field=field, operator=complement, value=value)
        for record in RECORDS:
            assert rule_matches(record, rule) != rule_matches(record, negated)

    def test_exists_treats_null_as_missing(self):
        rule = FilterRule(field="has_website", operator="EXISTS")
        assert [r["place_id"] for r in RECORDS if rule_matches(r, rule)] == ["1", "2"]

    def test_equals_compares_json_string_form(self):
        assert rule_matches(RECORDS[0], FilterRule(field="rating", operator="EQUALS", value="4.5"))
        assert rule_matches(RECORDS[1], FilterRule(field="rating", operator="EQUALS", value=3))
        assert rule_matches(RECORDS[0], flag_is("has_website"))
        assert not rule_matches(RECORDS[1], flag_is("has_website"))

    def test_not_equals_matches_missing_fields(self):
        assert rule_matches(RECORDS[3], flag_is_not("has_website"))
        assert rule_matches(RECORDS[2], flag_is_not("has_website"))

    def test_rules_are_anded(self):
        rules = [flag_is_not("has_website"), FilterRule(field="rating", operator="EXISTS")]
        assert [r["place_id"] for r in RECORDS if matches(r, rules)] == ["2"]

    def test_empty_rule_list_matches_everything(self):
        assert all(matches(r, []) for r in RECORDS)

    def test_operator_and_value_are_normalized(self):
        rule = FilterRule.model_validate({"field": "x", "operator": "equals", "value": True})
        assert rule.operator == "EQUALS"
        assert rule.value == "true"


class TestBusinessStore:
    def test_update_fields_creates_and_merges(self, store):
        store.update_fields("p1", {"business_name": "Acme", "rating": 4.2})
        store.update_fields("p1", {"phone": "3035550100"})
        record = store.get("p1")
        assert record == {"place_id": "p1", "business_name": "Acme", "rating": 4.2, "phone": "3035550100"}

    def test_apply_patch_writes_only_non_null_fields(self, store):
        store.update_fields("p1", {"website_uri": "https://acme.example", "city": "Denver"})
        store.apply_patch("p1", DetailsPatch(phone="3035550100", has_website=True))
        record = store.get("p1")
        assert record["website_uri"] == "https://acme.example"
        assert record["city"] == "Denver"
        assert record["details_fetched"] is True
        assert record["pipeline_status"] == "details"

    def test_batch_write_never_clears_completion_flags(self, store):
        """Re-running an earlier stage leaves later stages' results intact."""
        store.batch_write([{"place_id": "p1", "searched": True, "business_name": "Acme"}])
        store.update_fields("p1", {"web_scraped": True, "web_emails": ["a@acme.com"]})

        store.batch_write([{
            "place_id": "p1", "searched": True, "business_name": "Acme Inc",
            "web_scraped": False, "details_fetched": None,
        }])

        record = store.get("p1")
        assert record["web_scraped"] is True
        assert record["web_emails"] == ["a@acme.com"]
        assert record["business_name"] == "Acme Inc"
        assert "details_fetched" not in record

    def test_update_fields_cannot_unset_flags(self, store):
        store.update_fields("p1", {"copy_generated": True})
        store.update_fields("p1", {"copy_generated": False})
        assert store.get("p1")["copy_generated"] is True

    def test_idempotent_rerun_writes_same_state(self, store):
        patch = DetailsPatch(phone="3035550100", has_website=False, details_fetched_at="2026-01-01T00:00:00")
        store.apply_patch("p1", patch)
        first = store.get("p1")
        store.apply_patch("p1", patch)
        assert store.get("p1") == first

    def test_get_many_keeps_order_and_skips_missing(self, store):
        store.batch_write([{"place_id": pid} for pid in ("a", "b", "c")])
        assert [r["place_id"] for r in store.get_many(["c", "x", "a", "c"])] == ["c", "a"]

    def test_scan_with_rules(self, store):
        store.batch_write([
            {"place_id": "a", "has_website": True},
            {"place_id": "b", "has_website": False},
            {"place_id": "c"},
        ])
        found = store.scan([flag_is_not("has_website")])
        assert sorted(r["place_id"] for r in found) == ["b", "c"]
        assert store.count() == 3

    def test_mark_scrape_failed(self, store):
        store.batch_write([{"place_id": "a", "website_uri": "https://a.example"}])
        store.mark_scrape_failed("a")
        record = store.get("a")
        assert record["web_scraped"] is True
        assert record["web_scrape_status"] == "failed"

    def test_count_by_position(self, store):
        store.batch_write([
            {"place_id": "a", "searched": True},
            {"place_id": "b", "searched": True, "details_fetched": True},
            {"place_id": "c", "searched": True, "details_fetched": True,
             "reviews_fetched": True, "photos_fetched": True},
            {"place_id": "d", "searched": True, "web_scraped": True, "copy_generated": True},
        ])
        counts = store.count_by_position()
        assert counts[PipelinePosition.SEARCHED] == 1
        assert counts[PipelinePosition.DETAILED] == 1
        assert counts[PipelinePosition.ENRICHED] == 1
        assert counts[PipelinePosition.COPY_GENERATED] == 1
        assert counts[PipelinePosition.NEW] == 0


class TestJobStore:
    def test_stage_metrics_merge_without_touching_others(self, jobs):
        jobs.record_metrics("job-1", "search", SearchMetrics(processed=4, searches_run=2))
        jobs.record_metrics("job-1", "scrape", ScrapeMetrics(processed=3, total_pages=9))
        jobs.record_metrics("job-1", "search", SearchMetrics(processed=5))

        metrics = jobs.get_job("job-1")["metrics"]
        assert metrics["search"]["processed"] == 5
        assert metrics["search"]["searches_run"] == 0
        assert metrics["scrape"]["total_pages"] == 9

    def test_unknown_job(self, jobs):
        assert jobs.get_job("nope") is None

    def test_storage_errors_are_swallowed(self, db, jobs):
        db.close()
        db.conn = None
        assert jobs.set_metric("job-1", "search", 1) is False


class TestObjectStore:
    def test_gzip_round_trip_and_listing(self, objects):
        size = objects.put_json("scraped-data/p1/1/raw.json.gz", {"pages": ["x" * 1000]})
        objects.put_json("jobs/j/batches/batch-0000.json", ["p1"])
        assert size < 1000
        assert objects.get_json("scraped-data/p1/1/raw.json.gz") == {"pages": ["x" * 1000]}
        assert objects.list("jobs/") == ["jobs/j/batches/batch-0000.json"]
        assert objects.exists("jobs/j/batches/batch-0000.json")

    def test_missing_key(self, objects):
        assert objects.get_json("nope.json") is None

    def test_keys_cannot_escape_root(self, objects):
        with pytest.raises(ValueError):
            objects.put_json("../outside.json", {})
