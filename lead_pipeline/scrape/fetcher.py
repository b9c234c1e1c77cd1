"""Page fetching: plain HTTP with retries, and a pooled headless browser."""

from __future__ import annotations

import asyncio
import logging
import random
import socket
from typing import Literal

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ErrorType = Literal["timeout", "dns", "connection", "cloudflare", "http", "unknown"]

MAX_RETRIES = 2
BASE_TIMEOUT = 10.0
TIMEOUT_STEP = 5.0
MAX_BACKOFF = 4.0

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
BROWSER_VIEWPORT = {"width": 1920, "height": 1080}
NAVIGATION_TIMEOUT_MS = 30_000
CHALLENGE_POLLS = 10
CHALLENGE_POLL_SECONDS = 3.0

# Rotate through realistic user agents for plain HTTP fetches
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:126.0) Gecko/20100101 Firefox/126.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.5 Safari/605.1.15",
]

CLOUDFLARE_MARKERS = (
    "Just a moment",
    "cf-browser-verification",
    "cf_chl_opt",
    "challenge-platform",
    "__cf_chl_f_tk",
    "Enable JavaScript and cookies",
    "Checking your browser",
    "cf-spinner",
)

_DNS_MESSAGES = (
    "name or service not known",
    "temporary failure in name resolution",
    "nodename nor servname",
    "no address associated",
    "getaddrinfo failed",
)


class ScrapeError(BaseModel):
    type: ErrorType
    code: str | None = None
    status_code: int | None = None
    message: str = ""

    @property
    def label(self) -> str:
        return f"{self.type}:{self.code}" if self.code else self.type


class FetchResponse(BaseModel):
    body: str
    status_code: int


def _get_headers() -> dict[str, str]:
    return {
        "User-Agent": random.choice(USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }


def _is_dns_failure(exc: BaseException) -> bool:
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, socket.gaierror):
            return True
        current = current.__cause__ or current.__context__
    message = str(exc).lower()
    return any(m in message for m in _DNS_MESSAGES)


def classify_error(exc: BaseException) -> ScrapeError:
    """Map a fetch exception onto the error categories used for tracking."""
    message = str(exc) or type(exc).__name__

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return ScrapeError(type="http", status_code=status, message=f"HTTP {status}")
    if isinstance(exc, httpx.ConnectError):
        if _is_dns_failure(exc):
            return ScrapeError(type="dns", code="ENOTFOUND", message="Domain not found")
        if "refused" in message.lower():
            return ScrapeError(type="connection", code="ECONNREFUSED", message="Connection refused")
        return ScrapeError(type="connection", message=message[:100])
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)) or "timeout" in message.lower():
        return ScrapeError(type="timeout", code="ETIMEDOUT", message="Request timeout")
    if isinstance(exc, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
        return ScrapeError(type="connection", code="ECONNRESET", message="Connection reset")
    if "403" in message or "Cloudflare" in message:
        return ScrapeError(type="cloudflare", message="Cloudflare protection")
    return ScrapeError(type="unknown", message=message[:100])


def is_retriable(error: ScrapeError) -> bool:
    return error.type in ("timeout", "connection")


def is_cloudflare_challenge(html: str) -> bool:
    return any(marker in html for marker in CLOUDFLARE_MARKERS)


def needs_cloudflare_bypass(status_code: int, html: str) -> bool:
    return status_code in (403, 503) or is_cloudflare_challenge(html)


class HttpFetcher:
    """Plain GET with per-attempt timeouts and exponential backoff.

    Attempt ``n`` (0-based) times out after ``10 + 5n`` seconds; only
    timeouts and connection errors are retried, after ``min(2**n, 4)``
    seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        max_retries: int = MAX_RETRIES,
        sleep=asyncio.sleep,
    ):
        self._client = client or httpx.AsyncClient(
            follow_redirects=True, max_redirects=5, verify=False,
        )
        self.max_retries = max_retries
        self._sleep = sleep

    async def fetch(self, url: str) -> tuple[FetchResponse | None, ScrapeError | None]:
        last_error: ScrapeError | None = None
        for attempt in range(self.max_retries + 1):
            timeout = BASE_TIMEOUT + attempt * TIMEOUT_STEP
            try:
                response = await self._client.get(url, headers=_get_headers(), timeout=timeout)
                return FetchResponse(body=response.text, status_code=response.status_code), None
            except httpx.HTTPError as exc:
                last_error = classify_error(exc)

            if not is_retriable(last_error):
                break
            if attempt < self.max_retries:
                backoff = min(2.0 ** attempt, MAX_BACKOFF)
                logger.debug("Retry %d/%d %s after %.0fs", attempt + 1, self.max_retries, url, backoff)
                await self._sleep(backoff)
        return None, last_error

    async def aclose(self) -> None:
        await self._client.aclose()


class BrowserPool:
    """Bounded pool of reusable headless Chromium pages.

    Pages are created lazily up to ``max_pages``; further callers wait for
    one to be released.
    """

    def __init__(self, max_pages: int = 5, executable_path: str | None = None):
        self.max_pages = max_pages
        self.executable_path = executable_path
        self._available: asyncio.Queue = asyncio.Queue()
        self._created = 0
        self._lock = asyncio.Lock()
        self._playwright = None
        self._browser = None
        self._context = None

    async def start(self) -> None:
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=True,
            executable_path=self.executable_path,
            args=[
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
                "--no-sandbox",
            ],
        )
        self._context = await self._browser.new_context(
            user_agent=BROWSER_USER_AGENT, viewport=BROWSER_VIEWPORT,
        )
        logger.info("Browser pool started (max %d pages)", self.max_pages)

    async def acquire(self):
        async with self._lock:
            if self._available.empty() and self._created < self.max_pages:
                page = await self._context.new_page()
                self._created += 1
                return page
        return await self._available.get()

    def release(self, page) -> None:
        self._available.put_nowait(page)

    async def render(self, url: str) -> str:
        """Load ``url`` until the network is idle and return the rendered HTML.

        A Cloudflare interstitial is polled up to 10 times, 3s apart; the
        last content is returned either way.
        """
        page = await self.acquire()
        try:
            await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
            for attempt in range(CHALLENGE_POLLS):
                if not is_cloudflare_challenge(await page.content()):
                    break
                logger.debug("Waiting for Cloudflare challenge (%d/%d) %s", attempt + 1, CHALLENGE_POLLS, url)
                await asyncio.sleep(CHALLENGE_POLL_SECONDS)
            return await page.content()
        finally:
            self.release(page)

    async def close(self) -> None:
        while not self._available.empty():
            page = self._available.get_nowait()
            try:
                await page.close()
            except Exception as e:
                logger.warning("Error closing browser page: %s", e)
        self._created = 0
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser pool closed")
