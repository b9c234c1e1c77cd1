"""Copy stage: generated landing page copy for businesses without a website."""

from __future__ import annotations

import logging
from typing import Any

from lead_pipeline.analysis.copy import LLMCall, generate_copy
from lead_pipeline.models import FilterRule, JobInput, Stage, StageMetrics
from lead_pipeline.store.filters import flag_is, flag_is_not
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.base import StageWorker

logger = logging.getLogger(__name__)


class CopyWorker(StageWorker):
    """Only detailed businesses without a website are selected, even by explicit id."""

    stage = Stage.COPY
    metrics_cls = StageMetrics

    def __init__(self, store: BusinessStore, llm: LLMCall, jobs: JobStore | None = None, **kwargs):
        super().__init__(store, jobs, **kwargs)
        self.llm = llm

    def base_rules(self, job: JobInput) -> list[FilterRule]:
        rules = [flag_is("details_fetched"), flag_is_not("has_website")]
        if job.skip_if_done:
            rules.append(flag_is_not("copy_generated"))
        return rules

    async def process(self, record: dict[str, Any], metrics: StageMetrics) -> None:
        logger.info("Generating copy for: %s (%s)", record.get("business_name"), record["place_id"])
        patch = await generate_copy(record, self.llm)
        self.store.apply_patch(record["place_id"], patch)
        logger.info("  Updated %s", record.get("business_name"))
