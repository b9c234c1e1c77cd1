"""Scrape stage: crawl business websites, extract facts, archive raw pages."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from lead_pipeline.errors import ConfigurationError, PipelineError
from lead_pipeline.extract.extractor import extract_all_data
from lead_pipeline.models import (
    ExtractedData,
    FilterRule,
    JobInput,
    ScrapeMetrics,
    ScrapePatch,
    ScrapeStatus,
    Stage,
)
from lead_pipeline.scrape.crawler import CrawlResult, SiteCrawler
from lead_pipeline.scrape.fetcher import BrowserPool, HttpFetcher
from lead_pipeline.scrape.resources import calculate_optimal_concurrency
from lead_pipeline.scrape.trackers import DomainTracker, FailureTracker
from lead_pipeline.store.filters import flag_is_not
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.objects import ObjectStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.base import StageWorker

logger = logging.getLogger(__name__)

MAX_BROWSER_PAGES = 5


def scrape_status(pages: int, errors: int) -> ScrapeStatus:
    if errors == 0:
        return "complete"
    return "partial" if pages > 0 else "failed"


def results_key(job_id: str, batch_index: int) -> str:
    return f"jobs/{job_id}/scrape-results/batch-{batch_index:04d}.json"


def extracted_payload(record: dict[str, Any], extracted: ExtractedData) -> dict[str, Any]:
    data = extracted.model_dump(mode="json")
    return {
        "place_id": record["place_id"],
        "website_uri": record["website_uri"],
        "extracted_at": datetime.now(timezone.utc).isoformat(),
        "contacts": {
            "emails": data["emails"],
            "phones": data["phones"],
            "contact_page_url": data["contact_page_url"],
            "social": data["social"],
        },
        "team": {
            "members": data["team_members"],
            "headcount_estimate": data["headcount_estimate"],
            "headcount_source": data["headcount_source"],
            "new_hire_mentions": data["new_hire_mentions"],
        },
        "acquisition": {
            "signals": data["acquisition_signals"],
            "has_signal": data["has_acquisition_signal"],
            "summary": data["acquisition_summary"],
        },
        "history": {
            "founded_year": data["founded_year"],
            "founded_source": data["founded_source"],
            "years_in_business": data["years_in_business"],
            "snippets": data["history_snippets"],
        },
    }


def to_scrape_patch(
    result: CrawlResult,
    extracted: ExtractedData,
    raw_key: str,
    extracted_key: str,
    duration_ms: int,
) -> ScrapePatch:
    pages = len(result.pages)
    errors = len(result.errors)
    return ScrapePatch(
        web_scraped_at=datetime.now(timezone.utc).isoformat(),
        web_raw_key=raw_key,
        web_extracted_key=extracted_key,
        web_pages_count=pages,
        web_scrape_method=result.method,
        web_total_bytes=sum(len(p.html) for p in result.pages),
        web_scrape_duration_ms=duration_ms,
        web_scrape_errors=errors,
        web_scrape_status=scrape_status(pages, errors),
        web_emails=extracted.emails,
        web_phones=extracted.phones,
        web_contact_page=extracted.contact_page_url,
        web_social_linkedin=extracted.social.linkedin,
        web_social_facebook=extracted.social.facebook,
        web_social_instagram=extracted.social.instagram,
        web_social_twitter=extracted.social.twitter,
        web_team_members=extracted.team_members or None,
        web_team_count=len(extracted.team_members),
        web_headcount_estimate=extracted.headcount_estimate,
        web_headcount_source=extracted.headcount_source,
        web_new_hires=extracted.new_hire_mentions or None,
        web_has_team_page=extracted.has_team_page or bool(extracted.team_members),
        web_acquisition_signals=extracted.acquisition_signals or None,
        web_has_acquisition_signal=extracted.has_acquisition_signal,
        web_ownership_note=extracted.acquisition_summary,
        web_founded_year=extracted.founded_year,
        web_founded_source=extracted.founded_source,
        web_years_in_business=extracted.years_in_business,
        web_history_snippets=extracted.history_snippets or None,
    )


class ScrapeWorker(StageWorker):
    """Crawls every candidate's website and stores what it finds.

    Each site gets two archived objects (raw pages and extracted facts)
    and a flat set of ``web_*`` fields on its record. Unless the job runs
    in fast mode, a shared headless browser renders pages plain HTTP
    cannot.
    """

    stage = Stage.SCRAPE
    metrics_cls = ScrapeMetrics

    def __init__(
        self,
        store: BusinessStore,
        objects: ObjectStore,
        jobs: JobStore | None = None,
        memory_mib: int = 4096,
        cpu_units: int = 1024,
        browser_executable_path: str | None = None,
        http_factory: Callable[[], HttpFetcher] = HttpFetcher,
        browser_factory: Callable[[int], BrowserPool] | None = None,
        **kwargs,
    ):
        super().__init__(store, jobs, **kwargs)
        self.objects = objects
        self.memory_mib = memory_mib
        self.cpu_units = cpu_units
        self.http_factory = http_factory
        self.browser_factory = browser_factory or (
            lambda size: BrowserPool(max_pages=size, executable_path=browser_executable_path or None)
        )
        self.crawler: SiteCrawler | None = None
        self._http: HttpFetcher | None = None
        self._browser: BrowserPool | None = None
        self._started = 0.0

    def base_rules(self, job: JobInput) -> list[FilterRule]:
        rules = [FilterRule(field="website_uri", operator="EXISTS")]
        if job.skip_if_done and not job.force_rescrape:
            rules.append(flag_is_not("web_scraped"))
        return rules

    def load_batch(self, batch_key: str) -> list[str]:
        ids = self.objects.get_json(batch_key)
        if ids is None:
            raise ConfigurationError(f"Batch object not found: {batch_key}")
        logger.info("Loaded %d place ids from %s", len(ids), batch_key)
        return [str(i) for i in ids]

    def select_candidates(self, job: JobInput, metrics: ScrapeMetrics) -> list[dict[str, Any]]:
        if job.batch_key:
            job = job.model_copy(update={"place_ids": self.load_batch(job.batch_key)})
        return super().select_candidates(job, metrics)

    def concurrency_for(self, job: JobInput) -> int:
        if job.concurrency:
            return max(job.concurrency, 1)
        return calculate_optimal_concurrency(job.fast_mode, self.memory_mib, self.cpu_units)

    async def start(self, job: JobInput) -> None:
        self._started = time.monotonic()
        self._http = self.http_factory()
        self._browser = None
        if job.fast_mode:
            logger.info("Fast mode enabled, plain HTTP only")
        else:
            pool_size = min(self.concurrency_for(job), MAX_BROWSER_PAGES)
            browser = self.browser_factory(pool_size)
            try:
                await browser.start()
                self._browser = browser
            except Exception as e:
                logger.warning("Failed to launch browser, using plain HTTP only: %s", e)
        self.crawler = SiteCrawler(
            self._http,
            self._browser,
            domain_tracker=DomainTracker(),
            failure_tracker=FailureTracker(),
        )

    async def finish(self, job: JobInput, metrics: ScrapeMetrics) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._http is not None:
            await self._http.aclose()
            self._http = None

        elapsed = time.monotonic() - self._started
        logger.info(
            "Scrape summary: %d sites ok, %d early exits, %d pages (http %d, browser %d), %.2f MB in %.1fs",
            metrics.processed, metrics.early_exits, metrics.total_pages,
            metrics.http_count, metrics.browser_count, metrics.total_bytes / 1024 / 1024, elapsed,
        )
        if self.crawler is not None:
            self.crawler.failure_tracker.log_summary()
            self.crawler.domain_tracker.log_summary()

    async def process(self, record: dict[str, Any], metrics: ScrapeMetrics) -> None:
        place_id = record["place_id"]
        website = record["website_uri"]
        logger.info("Scraping: %s (%s)", record.get("business_name"), website)

        started = time.monotonic()
        result = await self.crawler.crawl(website, max_pages=self.job.max_pages_per_site)
        if result.early_exit:
            metrics.early_exits += 1
        if not result.pages:
            self.store.mark_scrape_failed(place_id)
            raise PipelineError(f"No pages scraped from {website}")
        duration_ms = int((time.monotonic() - started) * 1000)

        known_phones = [str(record[f]) for f in ("phone", "international_phone") if record.get(f)]
        extracted = extract_all_data(result.pages, known_phones)

        base_key = f"scraped-data/{place_id}/{int(time.time() * 1000)}"
        raw_key = f"{base_key}/raw.json.gz"
        extracted_key = f"{base_key}/extracted.json.gz"
        self.objects.put_json(raw_key, {
            "place_id": place_id,
            "website_uri": website,
            "scraped_at": datetime.now(timezone.utc).isoformat(),
            "scrape_method": result.method,
            "duration_ms": duration_ms,
            "pages": [p.model_dump(mode="json") for p in result.pages],
        })
        self.objects.put_json(extracted_key, extracted_payload(record, extracted))

        patch = to_scrape_patch(result, extracted, raw_key, extracted_key, duration_ms)
        self.store.apply_patch(place_id, patch)

        metrics.total_pages += len(result.pages)
        metrics.total_bytes += patch.web_total_bytes
        metrics.http_count += result.http_count
        metrics.browser_count += result.browser_count
        logger.info(
            "  Scraped %d pages%s (http %d, browser %d), %d emails, %d team members",
            len(result.pages), " [early]" if result.early_exit else "",
            result.http_count, result.browser_count,
            len(extracted.emails), len(extracted.team_members),
        )

    async def run(self, job: JobInput) -> ScrapeMetrics:
        metrics = await super().run(job)
        if job.job_id and job.batch_index is not None:
            self.objects.put_json(results_key(job.job_id, job.batch_index), metrics.model_dump())
        return metrics
