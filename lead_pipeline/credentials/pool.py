"""Rotating API credential pool with one token bucket per credential."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from pydantic import BaseModel

from lead_pipeline.config import Config
from lead_pipeline.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Shortest sleep between acquisition attempts when every bucket is empty
_MIN_WAIT_SECONDS = 0.010


class Credential(BaseModel):
    name: str
    key: str


class _Bucket(BaseModel):
    credential: Credential
    tokens: float
    last_refill: float
    dispatched: int = 0


class CredentialPool:
    """Hands out API keys round-robin without exceeding any key's rate.

    Each credential owns a token bucket holding at most ``rate_per_second``
    tokens, refilled continuously from elapsed clock time. ``acquire()``
    starts scanning just after the last dispatched credential and returns the
    first one holding a whole token; when every bucket is dry it sleeps until
    the soonest refill and tries again. It never fails, it only delays.

    ``clock`` and ``sleep`` are injectable so tests can drive the pool with a
    fake clock.
    """

    def __init__(
        self,
        credentials: list[Credential],
        rate_per_second: float = 8.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if not credentials:
            raise ConfigurationError("No active Google API keys configured")
        if rate_per_second <= 0:
            raise ConfigurationError("Rate limit per key must be positive")

        self.rate = rate_per_second
        self._clock = clock
        self._sleep = sleep
        now = clock()
        self._buckets = [
            _Bucket(credential=c, tokens=rate_per_second, last_refill=now)
            for c in credentials
        ]
        self._last_index = -1
        self._url_index = 0

        logger.info(
            "Credential pool: %d keys (%s), %.1f req/sec each, %.1f req/sec total",
            len(credentials),
            ", ".join(c.name for c in credentials),
            rate_per_second,
            rate_per_second * len(credentials),
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> CredentialPool:
        credentials = [Credential(name=name, key=key) for name, key in config.google_api_keys.items()]
        return cls(credentials, rate_per_second=config.places_rate_limit_per_key, **kwargs)

    def __len__(self) -> int:
        return len(self._buckets)

    def _refill(self, bucket: _Bucket, now: float) -> None:
        elapsed = max(0.0, now - bucket.last_refill)
        bucket.tokens = min(self.rate, bucket.tokens + elapsed * self.rate)
        bucket.last_refill = now

    def _try_acquire(self) -> str | None:
        """One non-blocking pass over all buckets. No awaits in here."""
        now = self._clock()
        for bucket in self._buckets:
            self._refill(bucket, now)

        count = len(self._buckets)
        for offset in range(count):
            index = (self._last_index + 1 + offset) % count
            bucket = self._buckets[index]
            if bucket.tokens >= 1:
                bucket.tokens -= 1
                bucket.dispatched += 1
                self._last_index = index
                logger.debug(
                    "Using key %s (%.1f tokens remaining)",
                    bucket.credential.name, bucket.tokens,
                )
                return bucket.credential.key
        return None

    def _soonest_wait(self) -> float:
        soonest = min((1 - b.tokens) / self.rate for b in self._buckets)
        return max(_MIN_WAIT_SECONDS, soonest)

    async def acquire(self) -> str:
        """Return a key with spare capacity, waiting for a refill if needed."""
        while True:
            key = self._try_acquire()
            if key is not None:
                return key
            wait = self._soonest_wait()
            logger.debug("All keys exhausted, waiting %.0fms", wait * 1000)
            await self._sleep(wait)

    def next_key(self) -> str:
        """Plain round-robin key, not rate limited (used to sign media URLs)."""
        bucket = self._buckets[self._url_index % len(self._buckets)]
        self._url_index += 1
        return bucket.credential.key

    def stats(self) -> dict[str, int]:
        """Number of acquisitions served per credential name."""
        return {b.credential.name: b.dispatched for b in self._buckets}
