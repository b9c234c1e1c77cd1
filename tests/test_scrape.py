"""Tests for URL handling, HTML helpers, fetching and the site crawler."""

from __future__ import annotations

import json

import httpx
import pytest

from lead_pipeline.scrape.crawler import SiteCrawler, has_enough_data
from lead_pipeline.scrape.fetcher import (
    BrowserPool,
    HttpFetcher,
    ScrapeError,
    classify_error,
    needs_cloudflare_bypass,
)
from lead_pipeline.scrape.html import extract_links, extract_schema_org, extract_text, needs_browser
from lead_pipeline.scrape.resources import calculate_optimal_concurrency
from lead_pipeline.scrape.trackers import DomainTracker, FailureTracker
from lead_pipeline.scrape.urls import is_same_domain, normalize_url, should_skip_url, sort_by_priority
from tests.helpers import FakeBrowser, FakeClock, FakeHttp, no_sleep

ROOT = "https://acme.example/"
FILLER = "Acme Plumbing has served Denver homeowners with honest repairs. " * 10


def rich_page(body: str = "", links: tuple[str, ...] = ()) -> str:
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    return f"<html><head><title>Acme</title></head><body><p>{FILLER}</p>{body}{anchors}</body></html>"


SPA_SHELL = (
    '<html><body><div id="root"></div><p>'
    + "Welcome to Acme Plumbing. " * 8
    + "</p></body></html>"
)


class TestUrls:
    def test_normalize(self):
        assert normalize_url("HTTPS://WWW.Acme.com/About?utm_source=x&id=2#team") == "https://www.acme.com/About?id=2"
        assert normalize_url("https://acme.com") == "https://acme.com/"
        assert normalize_url("mailto:info@acme.com") is None
        assert normalize_url("not a url") is None

    @pytest.mark.parametrize("url,expected", [
        ("https://acme.com/menu?print", "https://acme.com/menu?print"),
        ("https://acme.com/find?q=drain%20repair", "https://acme.com/find?q=drain%20repair"),
        ("https://acme.com/?utm_medium=cpc&a=1&utm_campaign=spring&b=", "https://acme.com/?a=1&b="),
        ("https://acme.com/?utm_source=google", "https://acme.com/"),
    ])
    def test_normalize_keeps_query_text(self, url, expected):
        assert normalize_url(url) == expected

    def test_same_domain_ignores_www(self):
        assert is_same_domain("https://www.acme.com/about", "https://acme.com/")
        assert not is_same_domain("https://acme.com.evil.io/", "https://acme.com/")

    @pytest.mark.parametrize("url,skipped", [
        ("https://acme.com/about", False),
        ("https://acme.com/wp-admin/options.php", True),
        ("https://acme.com/images/logo.png", True),
        ("https://acme.com/brochure.pdf", True),
        ("https://acme.com/tag/plumbing", True),
        ("https://acme.com/cart", True),
    ])
    def test_skip_patterns(self, url, skipped):
        assert should_skip_url(url) is skipped

    def test_priority_order(self):
        urls = [
            "https://a.com/services", "https://a.com/blog",
            "https://a.com/contact", "https://a.com/about",
        ]
        assert sort_by_priority(urls) == [
            "https://a.com/about", "https://a.com/contact",
            "https://a.com/blog", "https://a.com/services",
        ]


class TestHtml:
    def test_text_drops_scripts(self):
        html = "<html><body><script>var x = 1;</script><p>Hello   <b>world</b></p></body></html>"
        assert extract_text(html) == "Hello world"

    def test_links_resolved_and_filtered(self):
        html = (
            '<a href="/about">A</a><a href="mailto:x@acme.example">m</a>'
            '<a href="#top">t</a><a href="https://acme.example/about">dup</a>'
        )
        assert extract_links(html, ROOT) == ["https://acme.example/about"]

    def test_spa_shell_needs_browser(self):
        assert needs_browser(SPA_SHELL)
        assert needs_browser("<html><body><p>Short page</p></body></html>")
        assert not needs_browser(rich_page())

    def test_schema_graph_and_malformed_blocks(self):
        html = (
            '<script type="application/ld+json">{not json</script>'
            '<script type="application/ld+json">'
            + json.dumps({"@graph": [
                {"@type": "WebSite", "name": "Acme site"},
                {"@type": "Plumber", "telephone": "303-555-0100", "foundingDate": "1987"},
            ]})
            + "</script>"
        )
        schema = extract_schema_org(html, current_year=2026)
        assert schema == {"telephone": "303-555-0100", "founding_date": "1987", "founding_year": 1987}

    def test_schema_ignores_unrelated_types(self):
        html = '<script type="application/ld+json">' + json.dumps({"@type": "Article", "name": "x"}) + "</script>"
        assert extract_schema_org(html) is None


class TestFetcher:
    @pytest.mark.parametrize("exc,error_type,code", [
        (httpx.ConnectError("[Errno -2] Name or service not known"), "dns", "ENOTFOUND"),
        (httpx.ConnectError("[Errno 111] Connection refused"), "connection", "ECONNREFUSED"),
        (httpx.ReadTimeout("read timed out"), "timeout", "ETIMEDOUT"),
        (httpx.RemoteProtocolError("peer closed connection"), "connection", "ECONNRESET"),
        (ValueError("boom"), "unknown", None),
    ])
    def test_classify_error(self, exc, error_type, code):
        error = classify_error(exc)
        assert error.type == error_type
        assert error.code == code

    def test_cloudflare_bypass_statuses(self):
        assert needs_cloudflare_bypass(403, "Forbidden")
        assert needs_cloudflare_bypass(503, "")
        assert needs_cloudflare_bypass(200, "<title>Just a moment...</title>")
        assert not needs_cloudflare_bypass(200, rich_page())

    async def test_timeouts_retried_with_backoff(self):
        clock = FakeClock()
        attempts = []

        def handler(request):
            attempts.append(request.url)
            if len(attempts) < 3:
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(200, text="ok")

        fetcher = HttpFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), sleep=clock.sleep)
        response, error = await fetcher.fetch(ROOT)
        await fetcher.aclose()

        assert error is None
        assert response.body == "ok"
        assert len(attempts) == 3
        assert clock.sleeps == [1.0, 2.0]

    async def test_dns_failures_not_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request.url)
            raise httpx.ConnectError("Name or service not known", request=request)

        fetcher = HttpFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), sleep=no_sleep)
        response, error = await fetcher.fetch(ROOT)
        await fetcher.aclose()

        assert response is None
        assert error.type == "dns"
        assert len(attempts) == 1

    async def test_http_error_statuses_are_responses(self):
        fetcher = HttpFetcher(
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(503, text="down"))),
            sleep=no_sleep,
        )
        response, error = await fetcher.fetch(ROOT)
        await fetcher.aclose()
        assert error is None
        assert response.status_code == 503

    async def test_browser_pool_slot_kept_when_page_creation_fails(self):
        class FlakyContext:
            def __init__(self):
                self.calls = 0

            async def new_page(self):
                self.calls += 1
                if self.calls == 1:
                    raise RuntimeError("target closed")
                return f"page-{self.calls}"

        pool = BrowserPool(max_pages=1)
        pool._context = FlakyContext()

        with pytest.raises(RuntimeError):
            await pool.acquire()
        page = await pool.acquire()
        assert page == "page-2"
        pool.release(page)
        assert await pool.acquire() == "page-2"


class TestCrawler:
    async def test_breadth_first_same_domain_priority_order(self):
        http = FakeHttp({
            ROOT: rich_page(links=(
                "/blog", "/contact", "/wp-admin/", "https://other.example/about", "/logo.png", "/about",
            )),
            "https://acme.example/about": "<p>About us</p>",
            "https://acme.example/contact": "<p>Contact</p>",
            "https://acme.example/blog": "<p>Blog</p>",
        })
        crawler = SiteCrawler(http, early_exit=False, sleep=no_sleep)
        result = await crawler.crawl("https://acme.example")

        assert [p.url for p in result.pages] == [
            ROOT,
            "https://acme.example/about",
            "https://acme.example/contact",
            "https://acme.example/blog",
        ]
        assert result.http_count == 4
        assert result.method == "http"
        assert result.errors == []

    async def test_max_pages(self):
        http = FakeHttp({
            ROOT: rich_page(links=("/about", "/contact")),
            "https://acme.example/about": "<p>About</p>",
            "https://acme.example/contact": "<p>Contact</p>",
        })
        result = await SiteCrawler(http, early_exit=False, sleep=no_sleep).crawl(ROOT, max_pages=2)
        assert len(result.pages) == 2

    async def test_early_exit_once_three_pages_and_an_email(self):
        http = FakeHttp({
            ROOT: rich_page(body="<p>Email info@acme.example</p>", links=("/about", "/contact", "/team")),
            "https://acme.example/about": rich_page(),
            "https://acme.example/contact": rich_page(),
            "https://acme.example/team": rich_page(),
        })
        result = await SiteCrawler(http, sleep=no_sleep).crawl(ROOT)
        assert result.early_exit
        assert len(result.pages) == 3
        assert has_enough_data(result.pages)

    async def test_spa_shell_rendered_in_browser(self):
        http = FakeHttp({ROOT: SPA_SHELL})
        browser = FakeBrowser({ROOT: rich_page()})
        result = await SiteCrawler(http, browser, sleep=no_sleep).crawl(ROOT)

        assert browser.calls == [ROOT]
        assert result.pages[0].fetch_method == "browser"
        assert FILLER.strip()[:40] in result.pages[0].text_content
        assert result.browser_count == 1
        assert result.method == "browser"

    async def test_fast_mode_keeps_spa_shell(self):
        http = FakeHttp({ROOT: SPA_SHELL})
        result = await SiteCrawler(http, None, sleep=no_sleep).crawl(ROOT)

        assert len(result.pages) == 1
        assert result.pages[0].fetch_method == "http"
        assert result.pages[0].text_content.startswith("Welcome to Acme Plumbing.")

    async def test_dns_error_never_goes_to_browser(self):
        http = FakeHttp(errors={ROOT: ScrapeError(type="dns", code="ENOTFOUND", message="Domain not found")})
        browser = FakeBrowser({ROOT: rich_page()})
        failures = FailureTracker()
        result = await SiteCrawler(http, browser, failure_tracker=failures, sleep=no_sleep).crawl(ROOT)

        assert browser.calls == []
        assert result.pages == []
        assert [e.type for e in result.errors] == ["dns"]
        assert failures.breakdown().by_code == {"ENOTFOUND": 1}

    async def test_timeout_falls_back_to_browser(self):
        http = FakeHttp(errors={ROOT: ScrapeError(type="timeout", code="ETIMEDOUT")})
        browser = FakeBrowser({ROOT: rich_page()})
        result = await SiteCrawler(http, browser, sleep=no_sleep).crawl(ROOT)

        assert browser.calls == [ROOT]
        assert result.pages[0].fetch_method == "browser"
        assert result.pages[0].status_code == 200

    async def test_forbidden_bypassed_with_browser(self):
        http = FakeHttp({ROOT: "Forbidden"}, statuses={ROOT: 403})
        browser = FakeBrowser({ROOT: rich_page()})
        result = await SiteCrawler(http, browser, sleep=no_sleep).crawl(ROOT)

        assert result.pages[0].fetch_method == "browser"
        assert result.errors == []

    async def test_unresolved_challenge_is_an_error(self):
        http = FakeHttp(errors={ROOT: ScrapeError(type="timeout")})
        browser = FakeBrowser({ROOT: "<title>Just a moment...</title>"})
        result = await SiteCrawler(http, browser, sleep=no_sleep).crawl(ROOT)

        assert result.pages == []
        assert result.errors[0].type == "cloudflare"

    async def test_http_error_without_browser(self):
        domains = DomainTracker()
        result = await SiteCrawler(FakeHttp(), domain_tracker=domains, sleep=no_sleep).crawl(ROOT)

        assert result.pages == []
        assert result.errors[0].status_code == 404
        [stat] = domains.stats()
        assert (stat.domain, stat.attempted, stat.failed) == ("acme.example", 1, 1)

    async def test_invalid_root(self):
        result = await SiteCrawler(FakeHttp(), sleep=no_sleep).crawl("not a url")
        assert result.pages == []
        assert result.errors == []


class TestResources:
    @pytest.mark.parametrize("fast_mode,memory,cpu,expected", [
        (True, 4096, 1024, 30),
        (True, 4096, 4096, 50),
        (True, 512, 1024, 1),
        (False, 4096, 1024, 4),
        (False, 1024, 1024, 3),
        (False, 8192, 4096, 16),
    ])
    def test_concurrency(self, fast_mode, memory, cpu, expected):
        assert calculate_optimal_concurrency(fast_mode, memory, cpu) == expected


class TestTrackers:
    def test_domain_stats_merge_www(self):
        tracker = DomainTracker()
        tracker.record_success("https://www.acme.example/a")
        tracker.record_failure("https://acme.example/b", ScrapeError(type="timeout"))
        [stat] = tracker.stats()
        assert stat.domain == "acme.example"
        assert (stat.attempted, stat.succeeded, stat.failed) == (2, 1, 1)
        assert stat.errors == {"timeout": 1}
        assert stat.success_rate == 0.5

    def test_failure_breakdown(self):
        tracker = FailureTracker()
        tracker.record(ScrapeError(type="http", status_code=404))
        tracker.record(ScrapeError(type="http", status_code=404))
        tracker.record(ScrapeError(type="dns", code="ENOTFOUND"))
        breakdown = tracker.breakdown()
        assert breakdown.total == 3
        assert breakdown.by_type == {"http": 2, "dns": 1}
        assert breakdown.by_code == {"HTTP_404": 2, "ENOTFOUND": 1}
