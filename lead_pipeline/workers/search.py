"""Search stage: run text searches and store every newly discovered business."""

from __future__ import annotations

import logging
import time
from typing import Any

from lead_pipeline.cache.store import SearchCache
from lead_pipeline.errors import ConfigurationError, IncompleteSearchError
from lead_pipeline.models import JobInput, SearchMetrics, SearchQuery, Stage
from lead_pipeline.places.client import PlacesClient
from lead_pipeline.places.transform import to_search_record
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.objects import ObjectStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.base import StageWorker

logger = logging.getLogger(__name__)

WRITE_CHUNK = 25

TIER_FLAGS = {
    "pro": "searched",
    "enterprise": "searched, details_fetched",
    "enterprise_atmosphere": "searched, details_fetched, reviews_fetched",
}


class SearchWorker(StageWorker):
    """Runs the job's query list one query at a time.

    Place ids are deduplicated across all queries of the run, so overlapping
    result sets are stored once.
    """

    stage = Stage.SEARCH
    metrics_cls = SearchMetrics

    def __init__(
        self,
        store: BusinessStore,
        objects: ObjectStore,
        places: PlacesClient,
        cache: SearchCache | None = None,
        jobs: JobStore | None = None,
    ):
        super().__init__(store, jobs)
        self.objects = objects
        self.places = places
        self.cache = cache

    def load_searches(self, job: JobInput) -> list[SearchQuery]:
        if not job.searches_key:
            raise ConfigurationError("No searches key provided in job input")
        payload = self.objects.get_json(job.searches_key)
        if payload is None:
            raise ConfigurationError(f"Searches object not found: {job.searches_key}")
        searches = [SearchQuery.model_validate(s) for s in payload.get("searches") or []]
        if not searches:
            raise ConfigurationError(f"No searches found in {job.searches_key}")
        logger.info("Loaded %d searches from %s", len(searches), job.searches_key)
        return searches

    def write_records(self, records: list[dict[str, Any]]) -> int:
        written = 0
        for i in range(0, len(records), WRITE_CHUNK):
            written += self.store.batch_write(records[i:i + WRITE_CHUNK])
        return written

    async def search_one(
        self,
        query: SearchQuery,
        job: JobInput,
        seen: set[str],
        metrics: SearchMetrics,
    ) -> None:
        if job.skip_cached_searches and self.cache is not None:
            cached_at = self.cache.check(query)
            if cached_at:
                logger.info("  SKIPPED - cached from %s", cached_at)
                metrics.searches_skipped += 1
                return

        # includedType is only part of the cache key; sending it filters out valid leads
        try:
            places = await self.places.search_text(
                query.text_query, tier=job.data_tier, max_results=job.max_results_per_search,
            )
        except IncompleteSearchError as e:
            logger.warning("  Search stopped early, keeping %d places", len(e.places))
            self.save_places(e.places, query, job, seen, metrics)
            raise
        metrics.searches_run += 1
        if self.cache is not None:
            self.cache.write(query, len(places))
        self.save_places(places, query, job, seen, metrics)

    def save_places(
        self,
        places: list[dict[str, Any]],
        query: SearchQuery,
        job: JobInput,
        seen: set[str],
        metrics: SearchMetrics,
    ) -> None:
        new_places = []
        for place in places:
            place_id = place.get("id")
            if not place_id:
                continue
            if place_id in seen:
                metrics.duplicates_skipped += 1
                continue
            seen.add(place_id)
            new_places.append(place)
        logger.info("  Found %d places, %d new (after dedup)", len(places), len(new_places))

        if new_places:
            records = [to_search_record(p, query, job.data_tier) for p in new_places]
            saved = self.write_records(records)
            metrics.processed += saved
            logger.info("  Saved %d businesses (total: %d)", saved, metrics.processed)

    async def run(self, job: JobInput) -> SearchMetrics:
        metrics = SearchMetrics()
        started = time.monotonic()
        searches = self.load_searches(job)
        logger.info(
            "Search: %d queries, tier %s (sets %s), max %d results each, skip cached: %s",
            len(searches), job.data_tier, TIER_FLAGS[job.data_tier],
            job.max_results_per_search, job.skip_cached_searches,
        )

        seen: set[str] = set()
        for i, query in enumerate(searches, 1):
            logger.info("[%d/%d] Searching: %r", i, len(searches), query.text_query)
            try:
                await self.search_one(query, job, seen, metrics)
            except Exception as e:
                metrics.failed += 1
                logger.error("Search %r failed: %s", query.text_query, e)

        logger.info(
            "search complete in %.1fs: %d saved, %d queries run, %d skipped (cached), "
            "%d duplicates, %d failed",
            time.monotonic() - started, metrics.processed, metrics.searches_run,
            metrics.searches_skipped, metrics.duplicates_skipped, metrics.failed,
        )
        self.record_metrics(job, metrics)
        return metrics
