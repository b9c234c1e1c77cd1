"""Shared skeleton of every pipeline stage: select, process in batches, report."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from lead_pipeline.models import FilterRule, JobInput, Stage, StageMetrics
from lead_pipeline.store.filters import matches
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.records import BusinessStore

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


class StageWorker:
    """One pipeline stage over the shared business records.

    Subclasses set ``stage`` and ``metrics_cls``, describe their
    prerequisites in ``base_rules()`` and handle one record in
    ``process()``. A record whose ``process()`` raises is logged and
    counted as failed; the rest of the batch carries on.
    """

    stage: Stage
    metrics_cls: type[StageMetrics] = StageMetrics

    def __init__(
        self,
        store: BusinessStore,
        jobs: JobStore | None = None,
        default_concurrency: int = DEFAULT_CONCURRENCY,
    ):
        self.store = store
        self.jobs = jobs
        self.default_concurrency = default_concurrency
        self.job: JobInput | None = None

    # -- selection ---------------------------------------------------------

    def base_rules(self, job: JobInput) -> list[FilterRule]:
        """Prerequisite and not-yet-done rules for this stage."""
        return []

    def select_candidates(self, job: JobInput, metrics: StageMetrics) -> list[dict[str, Any]]:
        """Records this run should process.

        Explicit ``place_ids`` are intersected with the stage rules, otherwise
        the whole store is scanned. The job's filter rules are ANDed on top;
        records they exclude are counted in ``metrics.filtered``.
        """
        rules = self.base_rules(job)
        if job.place_ids is not None:
            records = [r for r in self.store.get_many(job.place_ids) if matches(r, rules)]
        else:
            records = self.store.scan(rules)

        if job.filter_rules:
            kept = [r for r in records if matches(r, job.filter_rules)]
            metrics.filtered += len(records) - len(kept)
            records = kept
        return records

    # -- processing --------------------------------------------------------

    def concurrency_for(self, job: JobInput) -> int:
        return max(job.concurrency or self.default_concurrency, 1)

    async def start(self, job: JobInput) -> None:
        """Acquire run-wide resources before the first batch."""

    async def finish(self, job: JobInput, metrics: StageMetrics) -> None:
        """Release run-wide resources after the last batch."""

    async def process(self, record: dict[str, Any], metrics: StageMetrics) -> None:
        raise NotImplementedError

    async def _process_safe(self, record: dict[str, Any], metrics: StageMetrics) -> None:
        place_id = record.get("place_id")
        try:
            await self.process(record, metrics)
        except Exception as e:
            metrics.failed += 1
            logger.error(
                "%s failed for %s (%s): %s",
                self.stage.value, record.get("business_name", "?"), place_id, e,
            )
            return
        metrics.processed += 1

    async def run(self, job: JobInput) -> StageMetrics:
        """Process every candidate, ``concurrency`` records at a time.

        Each batch is awaited in full before the next one starts.
        """
        self.job = job
        metrics = self.metrics_cls()
        started = time.monotonic()
        candidates = self.select_candidates(job, metrics)
        concurrency = self.concurrency_for(job)
        logger.info(
            "%s: %d candidates (concurrency %d, skip_if_done=%s)",
            self.stage.value, len(candidates), concurrency, job.skip_if_done,
        )

        if candidates:
            await self.start(job)
            try:
                for i in range(0, len(candidates), concurrency):
                    batch = candidates[i:i + concurrency]
                    await asyncio.gather(*(self._process_safe(r, metrics) for r in batch))
                    logger.info(
                        "Progress: %d/%d", min(i + concurrency, len(candidates)), len(candidates),
                    )
            finally:
                await self.finish(job, metrics)
        else:
            logger.info("No records need %s. Nothing to do.", self.stage.value)

        logger.info(
            "%s complete in %.1fs: %d processed, %d failed, %d filtered",
            self.stage.value, time.monotonic() - started,
            metrics.processed, metrics.failed, metrics.filtered,
        )
        self.record_metrics(job, metrics)
        return metrics

    def record_metrics(self, job: JobInput, metrics: StageMetrics) -> None:
        if job.job_id and self.jobs is not None:
            self.jobs.record_metrics(job.job_id, self.stage.value, metrics)
