"""Photos stage: signed photo URLs and attributions."""

from __future__ import annotations

import logging
from typing import Any

from lead_pipeline.models import FilterRule, JobInput, PhotosMetrics, Stage
from lead_pipeline.places.client import PlacesClient
from lead_pipeline.places.transform import to_photos_patch
from lead_pipeline.store.filters import flag_is, flag_is_not
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.base import StageWorker

logger = logging.getLogger(__name__)


class PhotosWorker(StageWorker):
    stage = Stage.PHOTOS
    metrics_cls = PhotosMetrics

    def __init__(self, store: BusinessStore, places: PlacesClient, jobs: JobStore | None = None, **kwargs):
        super().__init__(store, jobs, **kwargs)
        self.places = places

    def base_rules(self, job: JobInput) -> list[FilterRule]:
        rules = [flag_is("details_fetched")]
        if job.skip_if_done:
            rules.append(flag_is_not("photos_fetched"))
        return rules

    async def process(self, record: dict[str, Any], metrics: PhotosMetrics) -> None:
        place_id = record["place_id"]
        payload = await self.places.get_photos(place_id)
        patch = to_photos_patch(payload, self.job.max_photos_per_business, self.places.photo_url)
        self.store.apply_patch(place_id, patch)

        metrics.total_photos += patch.photo_count or 0
        logger.info("  %s: %d photos", record.get("business_name"), patch.photo_count)
