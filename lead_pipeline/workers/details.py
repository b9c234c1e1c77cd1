"""Details stage: contact, rating, price and hours fields for searched businesses."""

from __future__ import annotations

import logging
from typing import Any

from lead_pipeline.models import DetailsMetrics, FilterRule, JobInput, Stage
from lead_pipeline.places.client import PlacesClient
from lead_pipeline.places.transform import to_details_patch
from lead_pipeline.store.filters import flag_is, flag_is_not
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.base import StageWorker

logger = logging.getLogger(__name__)


class DetailsWorker(StageWorker):
    stage = Stage.DETAILS
    metrics_cls = DetailsMetrics

    def __init__(self, store: BusinessStore, places: PlacesClient, jobs: JobStore | None = None, **kwargs):
        super().__init__(store, jobs, **kwargs)
        self.places = places

    def base_rules(self, job: JobInput) -> list[FilterRule]:
        rules = [flag_is("searched")]
        if job.skip_if_done:
            rules.append(flag_is_not("details_fetched"))
        return rules

    async def process(self, record: dict[str, Any], metrics: DetailsMetrics) -> None:
        place_id = record["place_id"]
        details = await self.places.get_details(place_id)
        patch = to_details_patch(details, place_id)
        self.store.apply_patch(place_id, patch)

        if patch.has_website:
            metrics.with_website += 1
            logger.info("  Updated %s (has website)", record.get("business_name"))
        else:
            metrics.without_website += 1
            logger.info("  Updated %s (no website, copy candidate)", record.get("business_name"))
