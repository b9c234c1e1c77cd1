"""Run-wide bookkeeping of fetch outcomes per domain and per failure type."""

from __future__ import annotations

import logging
from collections import Counter
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from lead_pipeline.scrape.fetcher import ScrapeError

logger = logging.getLogger(__name__)


class DomainStats(BaseModel):
    domain: str
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: dict[str, int] = Field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.attempted if self.attempted else 1.0


class FailureBreakdown(BaseModel):
    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    by_code: dict[str, int] = Field(default_factory=dict)


def _domain(url: str) -> str:
    try:
        host = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"
    return host[4:] if host.startswith("www.") else host


class DomainTracker:
    def __init__(self):
        self._stats: dict[str, DomainStats] = {}

    def _get(self, url: str) -> DomainStats:
        domain = _domain(url)
        if domain not in self._stats:
            self._stats[domain] = DomainStats(domain=domain)
        return self._stats[domain]

    def record_success(self, url: str) -> None:
        stat = self._get(url)
        stat.attempted += 1
        stat.succeeded += 1

    def record_failure(self, url: str, error: ScrapeError) -> None:
        stat = self._get(url)
        stat.attempted += 1
        stat.failed += 1
        stat.errors[error.type] = stat.errors.get(error.type, 0) + 1

    def stats(self) -> list[DomainStats]:
        return list(self._stats.values())

    def log_summary(self, limit: int = 5) -> None:
        if not self._stats:
            return
        stats = self.stats()
        succeeded = sum(1 for s in stats if s.succeeded)
        logger.info("Domains: %d crawled, %d with at least one page", len(stats), succeeded)
        worst = sorted((s for s in stats if s.failed), key=lambda s: (s.success_rate, -s.failed))
        for stat in worst[:limit]:
            logger.info(
                "  %s: %d/%d ok (%s)", stat.domain, stat.succeeded, stat.attempted,
                ", ".join(f"{k}={v}" for k, v in stat.errors.items()),
            )


class FailureTracker:
    def __init__(self):
        self._failures: list[ScrapeError] = []

    def record(self, error: ScrapeError) -> None:
        self._failures.append(error)

    def breakdown(self) -> FailureBreakdown:
        by_type: Counter[str] = Counter()
        by_code: Counter[str] = Counter()
        for error in self._failures:
            by_type[error.type] += 1
            if error.code:
                by_code[error.code] += 1
            if error.status_code:
                by_code[f"HTTP_{error.status_code}"] += 1
        return FailureBreakdown(total=len(self._failures), by_type=dict(by_type), by_code=dict(by_code))

    def log_summary(self) -> None:
        breakdown = self.breakdown()
        if breakdown.total == 0:
            return
        logger.info("Failure breakdown: %d total failures", breakdown.total)
        for error_type, count in sorted(breakdown.by_type.items(), key=lambda kv: -kv[1]):
            logger.info("  %s: %d", error_type, count)
        for code, count in sorted(breakdown.by_code.items(), key=lambda kv: -kv[1])[:5]:
            logger.info("  %s: %d", code, count)
