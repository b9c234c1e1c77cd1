"""Tests for the search-result cache."""

from __future__ import annotations

from lead_pipeline.cache.store import SearchCache, query_hash
from lead_pipeline.models import SearchQuery
from tests.helpers import FakeClock

DAY = 86_400


class TestQueryHash:
    def test_normalized(self):
        a = SearchQuery(text_query="  Plumbers in Denver CO ", included_type="Plumber")
        b = SearchQuery(text_query="plumbers in denver co", included_type="plumber")
        assert query_hash(a) == query_hash(b)

    def test_included_type_is_part_of_the_key(self):
        a = SearchQuery(text_query="plumbers in denver")
        b = SearchQuery(text_query="plumbers in denver", included_type="plumber")
        assert query_hash(a) != query_hash(b)

    def test_accepts_camel_case_input(self):
        query = SearchQuery.model_validate({"textQuery": "hvac boise", "includedType": "hvac"})
        assert query.text_query == "hvac boise"
        assert query.included_type == "hvac"


class TestSearchCache:
    def test_miss_before_write(self, db):
        cache = SearchCache(db, clock=FakeClock())
        assert cache.check(SearchQuery(text_query="plumbers")) is None

    def test_hit_within_ttl_miss_after(self, db):
        """A query written 29 days ago is a hit; 31 days ago it is a miss."""
        clock = FakeClock(start=1_700_000_000)
        cache = SearchCache(db, ttl_days=30, clock=clock)
        query = SearchQuery(text_query="plumbers in denver")
        cache.write(query, result_count=20)

        clock.advance(29 * DAY)
        assert cache.check(query) is not None

        clock.advance(2 * DAY)
        assert cache.check(query) is None

    def test_check_returns_last_run_timestamp(self, db):
        clock = FakeClock(start=1_700_000_000)
        cache = SearchCache(db, clock=clock)
        query = SearchQuery(text_query="roofers")
        cache.write(query, 5)
        assert cache.check(query).startswith("2023-11-14T22:13:20")

    def test_rewrite_extends_expiry(self, db):
        clock = FakeClock(start=1_700_000_000)
        cache = SearchCache(db, ttl_days=30, clock=clock)
        query = SearchQuery(text_query="roofers")
        cache.write(query, 5)
        clock.advance(20 * DAY)
        cache.write(query, 7)
        clock.advance(20 * DAY)
        assert cache.check(query) is not None

    def test_purge_and_stats(self, db):
        clock = FakeClock(start=1_700_000_000)
        cache = SearchCache(db, ttl_days=30, clock=clock)
        cache.write(SearchQuery(text_query="old"), 1)
        clock.advance(31 * DAY)
        cache.write(SearchQuery(text_query="new"), 1)

        stats = cache.stats()
        assert stats["total"] == 2
        assert stats["live"] == 1
        assert stats["expired"] == 1

        assert cache.purge_expired() == 1
        assert cache.stats()["total"] == 1

    def test_storage_failure_is_a_miss(self, db):
        cache = SearchCache(db, clock=FakeClock())
        db.execute("DROP TABLE search_cache")
        query = SearchQuery(text_query="plumbers")
        cache.write(query, 3)
        assert cache.check(query) is None
