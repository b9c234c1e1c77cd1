"""SQLite cache of executed Places text searches."""

from __future__ import annotations

import hashlib
import logging
import time
from datetime import datetime, timezone
from typing import Callable

from lead_pipeline.db.database import Database
from lead_pipeline.models import SearchQuery

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 30
_SECONDS_PER_DAY = 86_400


def query_hash(query: SearchQuery) -> str:
    """Stable key for a search: md5 of ``text_query|included_type``, normalized."""
    text = query.text_query.strip().lower()
    included = (query.included_type or "").strip().lower()
    return hashlib.md5(f"{text}|{included}".encode("utf-8")).hexdigest()


class SearchCache:
    """Remembers when each query last ran.

    Entries expire ``ttl_days`` after they were written. Cache failures
    are logged and treated as a miss; they never stop a search.
    """

    def __init__(
        self,
        db: Database,
        ttl_days: int = DEFAULT_TTL_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.db = db
        self.ttl_seconds = ttl_days * _SECONDS_PER_DAY
        self._clock = clock

    def check(self, query: SearchQuery) -> str | None:
        """ISO timestamp of the last unexpired run of ``query``, else ``None``."""
        try:
            row = self.db.fetchone(
                "SELECT last_run_at FROM search_cache WHERE query_hash = ? AND expires_at > ?",
                (query_hash(query), self._clock()),
            )
        except Exception as e:
            logger.warning("Search cache read failed: %s", e)
            return None
        return row["last_run_at"] if row else None

    def write(self, query: SearchQuery, result_count: int) -> None:
        now = self._clock()
        try:
            self.db.execute(
                "INSERT OR REPLACE INTO search_cache "
                "(query_hash, text_query, included_type, result_count, last_run_at, expires_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    query_hash(query),
                    query.text_query,
                    query.included_type,
                    result_count,
                    datetime.fromtimestamp(now, timezone.utc).isoformat(),
                    now + self.ttl_seconds,
                ),
            )
            self.db.commit()
        except Exception as e:
            logger.warning("Search cache write failed: %s", e)

    def purge_expired(self) -> int:
        try:
            removed = self.db.update("DELETE FROM search_cache WHERE expires_at <= ?", (self._clock(),))
        except Exception as e:
            logger.warning("Search cache purge failed: %s", e)
            return 0
        if removed:
            logger.info("Purged %d expired search cache entries", removed)
        return removed

    def stats(self) -> dict:
        now = self._clock()
        row = self.db.fetchone(
            "SELECT COUNT(*) AS total, "
            "SUM(CASE WHEN expires_at > ? THEN 1 ELSE 0 END) AS live, "
            "MIN(last_run_at) AS oldest, MAX(last_run_at) AS newest "
            "FROM search_cache",
            (now,),
        )
        return {
            "total": row["total"],
            "live": row["live"] or 0,
            "expired": row["total"] - (row["live"] or 0),
            "oldest": row["oldest"],
            "newest": row["newest"],
        }
