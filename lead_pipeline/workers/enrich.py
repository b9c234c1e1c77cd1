"""Enrich stage: reviews and editorial summary for detailed businesses."""

from __future__ import annotations

import logging
from typing import Any

from lead_pipeline.models import EnrichMetrics, FilterRule, JobInput, Stage
from lead_pipeline.places.client import PlacesClient
from lead_pipeline.places.transform import to_reviews_patch
from lead_pipeline.store.filters import flag_is, flag_is_not
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.base import StageWorker

logger = logging.getLogger(__name__)


class EnrichWorker(StageWorker):
    """Fetches up to five reviews per business.

    Businesses that already have a website are skipped unless the job
    clears ``skip_with_website``.
    """

    stage = Stage.ENRICH
    metrics_cls = EnrichMetrics

    def __init__(self, store: BusinessStore, places: PlacesClient, jobs: JobStore | None = None, **kwargs):
        super().__init__(store, jobs, **kwargs)
        self.places = places

    def base_rules(self, job: JobInput) -> list[FilterRule]:
        rules = [flag_is("details_fetched")]
        if job.skip_if_done:
            rules.append(flag_is_not("reviews_fetched"))
        if job.skip_with_website:
            rules.append(flag_is_not("has_website"))
        return rules

    async def process(self, record: dict[str, Any], metrics: EnrichMetrics) -> None:
        place_id = record["place_id"]
        payload = await self.places.get_reviews(place_id)
        patch = to_reviews_patch(payload)
        self.store.apply_patch(place_id, patch)

        if patch.review_count:
            metrics.with_reviews += 1
        else:
            metrics.without_reviews += 1
        logger.info("  %s: %d reviews", record.get("business_name"), patch.review_count)
