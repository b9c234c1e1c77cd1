"""Fan-out of a large scrape job into fixed-size batches, and fan-in of their metrics."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from lead_pipeline.errors import ConfigurationError
from lead_pipeline.models import JobInput, ScrapeMetrics
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.objects import ObjectStore
from lead_pipeline.workers.scrape import ScrapeWorker

logger = logging.getLogger(__name__)

BATCH_SIZE = 250


class BatchReference(BaseModel):
    batch_key: str
    batch_index: int
    item_count: int
    job_id: str


class PrepareResult(BaseModel):
    manifest_key: str
    total_businesses: int = 0
    total_batches: int = 0
    job_id: str
    batches: list[BatchReference] = Field(default_factory=list)


class AggregateResult(BaseModel):
    job_id: str
    metrics: ScrapeMetrics
    total_batches: int = 0
    successful_batches: int = 0
    failed_batches: int = 0


def manifest_key(job_id: str) -> str:
    return f"jobs/{job_id}/batch-manifest.json"


def batch_key(job_id: str, index: int) -> str:
    return f"jobs/{job_id}/batches/batch-{index:04d}.json"


def prepare_scrape_batches(
    worker: ScrapeWorker,
    job: JobInput,
    batch_size: int = BATCH_SIZE,
) -> PrepareResult:
    """Split the scrape candidates of ``job`` into id lists of ``batch_size``.

    Each batch can then be run as its own scrape job with ``batch_key`` and
    ``batch_index`` set. The manifest is written even when there is nothing
    to scrape.
    """
    if not job.job_id:
        raise ConfigurationError("job_id is required to prepare scrape batches")

    place_ids = [r["place_id"] for r in worker.select_candidates(job, ScrapeMetrics())]
    logger.info("Found %d businesses to scrape", len(place_ids))

    batches = []
    for index, start in enumerate(range(0, len(place_ids), batch_size)):
        items = place_ids[start:start + batch_size]
        key = batch_key(job.job_id, index)
        worker.objects.put_json(key, items)
        batches.append(BatchReference(
            batch_key=key, batch_index=index, item_count=len(items), job_id=job.job_id,
        ))

    key = manifest_key(job.job_id)
    worker.objects.put_json(key, [b.model_dump() for b in batches])
    logger.info("Wrote %d batch files and manifest %s", len(batches), key)
    return PrepareResult(
        manifest_key=key,
        total_businesses=len(place_ids),
        total_batches=len(batches),
        job_id=job.job_id,
        batches=batches,
    )


def aggregate_scrape_results(objects: ObjectStore, jobs: JobStore, job_id: str) -> AggregateResult:
    """Sum the per-batch scrape metrics under ``jobs/{job_id}/scrape-results/``.

    A result object that cannot be read or is not a metrics object counts
    as a failed batch. The total is recorded as the job's scrape metrics.
    """
    total = ScrapeMetrics()
    result = AggregateResult(job_id=job_id, metrics=total)

    keys = objects.list(f"jobs/{job_id}/scrape-results/")
    logger.info("Found %d scrape result files for job %s", len(keys), job_id)
    for key in keys:
        result.total_batches += 1
        try:
            data = objects.get_json(key)
            if not isinstance(data, dict) or not isinstance(data.get("processed"), int):
                raise ValueError("not a scrape metrics object")
            total.add(ScrapeMetrics.model_validate(data))
        except Exception as e:
            logger.error("Failed to read result file %s: %s", key, e)
            result.failed_batches += 1
            continue
        result.successful_batches += 1

    logger.info(
        "Batches: %d succeeded, %d failed, %d total",
        result.successful_batches, result.failed_batches, result.total_batches,
    )
    jobs.record_metrics(job_id, "scrape", total)
    jobs.set_metric(job_id, "scrape_batches", result.total_batches)
    jobs.set_metric(job_id, "scrape_batches_succeeded", result.successful_batches)
    jobs.set_metric(job_id, "scrape_batches_failed", result.failed_batches)
    return result
