"""Breadth-first, same-domain crawl of one business website."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from lead_pipeline.extract import patterns
from lead_pipeline.models import FetchMethod, ScrapedPage
from lead_pipeline.scrape.fetcher import (
    BrowserPool,
    HttpFetcher,
    ScrapeError,
    is_cloudflare_challenge,
    needs_cloudflare_bypass,
)
from lead_pipeline.scrape.html import (
    extract_links,
    extract_schema_org,
    extract_text,
    extract_title,
    needs_browser,
)
from lead_pipeline.scrape.trackers import DomainTracker, FailureTracker
from lead_pipeline.scrape.urls import is_same_domain, normalize_url, should_skip_url, sort_by_priority

logger = logging.getLogger(__name__)

LINK_FOLLOW_MIN_TEXT = 500
EARLY_EXIT_MIN_PAGES = 3
MAX_CONSECUTIVE_FAILURES = 5
SUCCESS_DELAY = 0.05
FAILURE_DELAY = 0.2
MAX_DELAY = 2.0


class CrawlResult(BaseModel):
    pages: list[ScrapedPage] = Field(default_factory=list)
    method: FetchMethod = "http"
    http_count: int = 0
    browser_count: int = 0
    errors: list[ScrapeError] = Field(default_factory=list)
    early_exit: bool = False

    @property
    def total_bytes(self) -> int:
        return sum(len(p.html.encode("utf-8")) for p in self.pages)


def has_enough_data(pages: list[ScrapedPage]) -> bool:
    """At least three pages crawled and an email address seen on one of them."""
    if len(pages) < EARLY_EXIT_MIN_PAGES:
        return False
    return any(patterns.EMAIL.search(p.text_content) for p in pages)


class SiteCrawler:
    """Crawls a site over plain HTTP, falling back to the browser pool.

    With ``browser=None`` (fast mode) pages are only ever fetched over HTTP.
    The trackers are shared across every site of a run.
    """

    def __init__(
        self,
        http: HttpFetcher,
        browser: BrowserPool | None = None,
        domain_tracker: DomainTracker | None = None,
        failure_tracker: FailureTracker | None = None,
        early_exit: bool = True,
        sleep=asyncio.sleep,
    ):
        self.http = http
        self.browser = browser
        self.domain_tracker = domain_tracker or DomainTracker()
        self.failure_tracker = failure_tracker or FailureTracker()
        self.early_exit = early_exit
        self._sleep = sleep

    async def _render(self, url: str) -> str | None:
        try:
            return await self.browser.render(url)
        except Exception as e:
            logger.warning("Browser error %s: %s", url, e)
            return None

    async def fetch_page(self, url: str) -> tuple[ScrapedPage | None, ScrapeError | None]:
        """Fetch one page, escalating to the browser when HTTP falls short.

        The browser is tried after a non-DNS fetch failure, for 403/503 and
        Cloudflare challenge responses, and for pages that look like an
        unrendered single-page app.
        """
        method: FetchMethod = "http"
        response, error = await self.http.fetch(url)

        if error is not None:
            if error.type == "dns" or self.browser is None:
                logger.debug("[%s] %s", error.label, url)
                return None, error
            logger.debug("[%s] %s - trying browser", error.label, url)
            html = await self._render(url)
            if html is None:
                return None, error
            if is_cloudflare_challenge(html):
                logger.debug("Cloudflare challenge not resolved for %s", url)
                return None, ScrapeError(type="cloudflare", message="Challenge not resolved")
            status_code, method = 200, "browser"
        else:
            html, status_code = response.body, response.status_code
            if self.browser is not None and needs_cloudflare_bypass(status_code, html):
                logger.debug("[cloudflare] %s - using browser", url)
                rendered = await self._render(url)
                if rendered is not None and not is_cloudflare_challenge(rendered):
                    html, status_code, method = rendered, 200, "browser"
            if status_code >= 400:
                logger.debug("[%d] %s", status_code, url)
                return None, ScrapeError(type="http", status_code=status_code, message=f"HTTP {status_code}")

        if method == "http" and self.browser is not None and needs_browser(html):
            logger.debug("[js] %s - rendering in browser", url)
            rendered = await self._render(url)
            if rendered is not None:
                html, method = rendered, "browser"

        text = extract_text(html)
        links = extract_links(html, url)
        logger.debug("[%s] %s - %d chars, %d links", method, url, len(text), len(links))
        return ScrapedPage(
            url=url,
            title=extract_title(html),
            html=html,
            text_content=text,
            links=links,
            status_code=status_code,
            scraped_at=datetime.now(timezone.utc).isoformat(),
            fetch_method=method,
            schema_org=extract_schema_org(html),
        ), None

    async def crawl(self, root_url: str, max_pages: int = 10) -> CrawlResult:
        result = CrawlResult()
        root = normalize_url(root_url)
        if root is None:
            logger.warning("Invalid website URL: %s", root_url)
            return result

        frontier: deque[str] = deque([root])
        queued = {root}
        visited: set[str] = set()
        consecutive_failures = 0

        while frontier and len(result.pages) < max_pages:
            url = frontier.popleft()
            if url in visited or not is_same_domain(url, root) or should_skip_url(url):
                continue
            visited.add(url)

            page, error = await self.fetch_page(url)
            if page is not None:
                consecutive_failures = 0
                result.pages.append(page)
                self.domain_tracker.record_success(url)
                if page.fetch_method == "browser":
                    result.browser_count += 1
                else:
                    result.http_count += 1

                if len(page.text_content) > LINK_FOLLOW_MIN_TEXT:
                    candidates = []
                    for link in page.links:
                        normalized = normalize_url(link)
                        if (
                            normalized
                            and normalized not in queued
                            and is_same_domain(normalized, root)
                            and not should_skip_url(normalized)
                        ):
                            candidates.append(normalized)
                    for link in sort_by_priority(candidates):
                        if link not in queued:
                            queued.add(link)
                            frontier.append(link)

                if self.early_exit and has_enough_data(result.pages):
                    logger.debug("Early exit after %d pages for %s", len(result.pages), root)
                    result.early_exit = True
                    break
            else:
                consecutive_failures += 1
                if error is not None:
                    result.errors.append(error)
                    self.failure_tracker.record(error)
                    self.domain_tracker.record_failure(url, error)

            if consecutive_failures:
                delay = min(FAILURE_DELAY * (consecutive_failures + 1), MAX_DELAY)
            else:
                delay = SUCCESS_DELAY
            await self._sleep(delay)

            if consecutive_failures >= MAX_CONSECUTIVE_FAILURES:
                logger.info("Giving up on %s after %d consecutive failures", root, consecutive_failures)
                break

        result.method = "browser" if result.browser_count > result.http_count else "http"
        return result
