"""CLI entry point: one sub-command per pipeline stage."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from lead_pipeline.analysis.copy import llm_for_config
from lead_pipeline.cache.store import SearchCache
from lead_pipeline.config import Config, load_config
from lead_pipeline.credentials.pool import CredentialPool
from lead_pipeline.db.database import Database, open_database
from lead_pipeline.errors import ConfigurationError
from lead_pipeline.models import JobInput
from lead_pipeline.places.client import PlacesClient
from lead_pipeline.store.jobs import JobStore
from lead_pipeline.store.objects import ObjectStore
from lead_pipeline.store.records import BusinessStore
from lead_pipeline.workers.batches import aggregate_scrape_results, prepare_scrape_batches
from lead_pipeline.workers.copy import CopyWorker
from lead_pipeline.workers.details import DetailsWorker
from lead_pipeline.workers.enrich import EnrichWorker
from lead_pipeline.workers.photos import PhotosWorker
from lead_pipeline.workers.scrape import ScrapeWorker
from lead_pipeline.workers.search import SearchWorker

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

job_input_option = click.option(
    "--job-input", "-j",
    envvar="JOB_INPUT",
    default=None,
    help="Job input as a JSON string or @path/to/file.json (default: $JOB_INPUT)",
)


def parse_job_input(raw: str | None) -> JobInput:
    """Parse the job descriptor; exits with status 1 when it is unusable."""
    if not raw:
        return JobInput()
    try:
        if raw.startswith("@"):
            raw = Path(raw[1:]).read_text(encoding="utf-8")
        return JobInput.model_validate(json.loads(raw))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        err_console.print(f"[red]Invalid job input: {e}[/red]")
        sys.exit(1)


class Stores:
    def __init__(self, config: Config):
        self.db: Database = open_database(config.db_path)
        self.businesses = BusinessStore(self.db)
        self.jobs = JobStore(self.db)
        self.objects = ObjectStore(config.object_store_dir)

    def close(self) -> None:
        self.db.close()


def print_metrics(title: str, metrics: BaseModel) -> None:
    table = Table(title=title)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for name, value in metrics.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


def _fail(e: Exception) -> None:
    err_console.print(f"[red]Configuration error: {e}[/red]")
    sys.exit(1)


async def _run_places_stage(worker_cls, config: Config, stores: Stores, job: JobInput):
    places = PlacesClient(CredentialPool.from_config(config))
    try:
        worker = worker_cls(
            stores.businesses, places, jobs=stores.jobs,
            default_concurrency=config.default_concurrency,
        )
        return await worker.run(job)
    finally:
        await places.aclose()


def _places_command(worker_cls, job_input: str | None):
    job = parse_job_input(job_input)
    config = load_config(require_places=True)
    stores = Stores(config)
    try:
        metrics = asyncio.run(_run_places_stage(worker_cls, config, stores, job))
    except ConfigurationError as e:
        _fail(e)
    finally:
        stores.close()
    print_metrics(f"{worker_cls.stage.value} metrics", metrics)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose debug logging")
def cli(verbose: bool) -> None:
    """Lead-enrichment pipeline: search, enrich, scrape and write copy for local businesses."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@cli.command()
@job_input_option
def search(job_input: str | None) -> None:
    """Run the job's text searches and store new businesses."""
    job = parse_job_input(job_input)
    config = load_config(require_places=True)
    stores = Stores(config)

    async def run():
        places = PlacesClient(CredentialPool.from_config(config))
        try:
            worker = SearchWorker(
                stores.businesses, stores.objects, places,
                cache=SearchCache(stores.db, ttl_days=config.search_cache_ttl_days),
                jobs=stores.jobs,
            )
            return await worker.run(job)
        finally:
            await places.aclose()

    try:
        metrics = asyncio.run(run())
    except ConfigurationError as e:
        _fail(e)
    finally:
        stores.close()
    print_metrics("search metrics", metrics)


@cli.command()
@job_input_option
def details(job_input: str | None) -> None:
    """Fetch contact, rating and hours details for searched businesses."""
    _places_command(DetailsWorker, job_input)


@cli.command()
@job_input_option
def enrich(job_input: str | None) -> None:
    """Fetch reviews for detailed businesses."""
    _places_command(EnrichWorker, job_input)


@cli.command()
@job_input_option
def photos(job_input: str | None) -> None:
    """Fetch photo URLs for detailed businesses."""
    _places_command(PhotosWorker, job_input)


def _scrape_worker(config: Config, stores: Stores) -> ScrapeWorker:
    return ScrapeWorker(
        stores.businesses, stores.objects, jobs=stores.jobs,
        memory_mib=config.task_memory_mib,
        cpu_units=config.task_cpu_units,
        browser_executable_path=config.browser_executable_path or None,
    )


@cli.command()
@job_input_option
def scrape(job_input: str | None) -> None:
    """Crawl business websites and extract contacts, team and history."""
    job = parse_job_input(job_input)
    config = load_config()
    stores = Stores(config)
    try:
        metrics = asyncio.run(_scrape_worker(config, stores).run(job))
    except ConfigurationError as e:
        _fail(e)
    finally:
        stores.close()
    print_metrics("scrape metrics", metrics)


@cli.command()
@job_input_option
def copy(job_input: str | None) -> None:
    """Generate landing page copy for businesses without a website."""
    job = parse_job_input(job_input)
    config = load_config(require_llm=True)
    stores = Stores(config)
    try:
        worker = CopyWorker(
            stores.businesses, llm_for_config(config), jobs=stores.jobs,
            default_concurrency=config.default_concurrency,
        )
        metrics = asyncio.run(worker.run(job))
    except ConfigurationError as e:
        _fail(e)
    finally:
        stores.close()
    print_metrics("copy metrics", metrics)


@cli.command("prepare-scrape")
@job_input_option
def prepare_scrape(job_input: str | None) -> None:
    """Split scrape candidates into batch files plus a manifest."""
    job = parse_job_input(job_input)
    config = load_config()
    stores = Stores(config)
    try:
        result = prepare_scrape_batches(_scrape_worker(config, stores), job)
    except ConfigurationError as e:
        _fail(e)
    finally:
        stores.close()
    console.print(
        f"[green]{result.total_businesses} businesses in {result.total_batches} batches[/green] "
        f"(manifest: {result.manifest_key})"
    )


@cli.command("aggregate-scrape")
@click.argument("job_id")
def aggregate_scrape(job_id: str) -> None:
    """Sum per-batch scrape results into the job's scrape metrics."""
    config = load_config()
    stores = Stores(config)
    try:
        result = aggregate_scrape_results(stores.objects, stores.jobs, job_id)
    finally:
        stores.close()
    print_metrics(f"scrape metrics for {job_id}", result.metrics)
    console.print(
        f"Batches: {result.successful_batches} succeeded, "
        f"{result.failed_batches} failed, {result.total_batches} total"
    )


@cli.command("cache-stats")
@click.option("--purge", is_flag=True, help="Delete expired entries first")
def cache_stats(purge: bool) -> None:
    """Show search cache statistics."""
    config = load_config()
    stores = Stores(config)
    try:
        cache = SearchCache(stores.db, ttl_days=config.search_cache_ttl_days)
        if purge:
            console.print(f"Purged {cache.purge_expired()} expired entries")
        stats = cache.stats()
    finally:
        stores.close()

    table = Table(title="Search cache")
    table.add_column("Stat")
    table.add_column("Value", justify="right")
    for name, value in stats.items():
        table.add_row(name, str(value if value is not None else "-"))
    console.print(table)


@cli.command()
def status() -> None:
    """Count stored businesses by pipeline position."""
    config = load_config()
    stores = Stores(config)
    try:
        counts = stores.businesses.count_by_position()
    finally:
        stores.close()

    table = Table(title=f"Businesses ({sum(counts.values())} total)")
    table.add_column("Position")
    table.add_column("Count", justify="right")
    for position, count in counts.items():
        table.add_row(position.value, str(count))
    console.print(table)


if __name__ == "__main__":
    cli()
