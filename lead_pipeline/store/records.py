"""Business record store: one JSON document per place id in SQLite."""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from lead_pipeline.db.database import Database
from lead_pipeline.models import FilterRule, PipelinePosition, RecordPatch
from lead_pipeline.store.filters import matches

logger = logging.getLogger(__name__)

COMPLETION_FLAGS = frozenset({
    "searched", "details_fetched", "reviews_fetched",
    "photos_fetched", "web_scraped", "copy_generated",
})

_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"


def _json_path(field: str) -> str:
    return '$."' + field.replace('"', '') + '"'


def _writable(record: dict[str, Any]) -> dict[str, Any]:
    """Drop nulls, and completion flags that are not set."""
    return {
        k: v for k, v in record.items()
        if v is not None and not (k in COMPLETION_FLAGS and v is not True)
    }


class BusinessStore:
    """Shared business records.

    Field-level updates go through SQLite ``json_set`` so stages writing
    disjoint fields of the same record never overwrite each other.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _load(row) -> dict[str, Any]:
        record = json.loads(row["data"])
        record.setdefault("place_id", row["place_id"])
        return record

    def get(self, place_id: str) -> dict[str, Any] | None:
        row = self.db.fetchone(
            "SELECT place_id, data FROM businesses WHERE place_id = ?", (place_id,),
        )
        return self._load(row) if row else None

    def get_many(self, place_ids: list[str]) -> list[dict[str, Any]]:
        """Existing records for ``place_ids``, in the order given."""
        records = []
        for place_id in dict.fromkeys(place_ids):
            record = self.get(place_id)
            if record is None:
                logger.debug("No record for %s", place_id)
                continue
            records.append(record)
        return records

    def scan(self, rules: list[FilterRule] | None = None) -> list[dict[str, Any]]:
        rows = self.db.fetchall("SELECT place_id, data FROM businesses ORDER BY created_at, place_id")
        records = [self._load(row) for row in rows]
        if rules:
            records = [r for r in records if matches(r, rules)]
        return records

    def count(self) -> int:
        row = self.db.fetchone("SELECT COUNT(*) AS cnt FROM businesses")
        return row["cnt"]

    def count_by_position(self) -> dict[PipelinePosition, int]:
        counts = Counter(PipelinePosition.of(r) for r in self.scan())
        return {position: counts.get(position, 0) for position in PipelinePosition}

    def update_fields(self, place_id: str, fields: dict[str, Any]) -> None:
        """Set the given non-null fields, creating the record if needed."""
        fields = _writable(fields)
        if not fields:
            return
        paths = ", ".join("?, json(?)" for _ in fields)
        params: list[Any] = []
        for name, value in fields.items():
            params.extend([_json_path(name), json.dumps(value)])

        self.db.execute(
            "INSERT OR IGNORE INTO businesses (place_id, data) VALUES (?, json_object('place_id', ?))",
            (place_id, place_id),
        )
        self.db.execute(
            f"UPDATE businesses SET data = json_set(data, {paths}), updated_at = {_NOW_SQL} "
            "WHERE place_id = ?",
            (*params, place_id),
        )
        self.db.commit()

    def apply_patch(self, place_id: str, patch: RecordPatch) -> None:
        self.update_fields(place_id, patch.to_fields())

    def batch_write(self, records: list[dict[str, Any]]) -> int:
        """Upsert records, merging into any existing document.

        Fields absent from an incoming record are left untouched, so a
        re-run never clears what later stages wrote.
        """
        rows = []
        for record in records:
            data = _writable(record)
            rows.append((data["place_id"], json.dumps(data)))
        if not rows:
            return 0
        self.db.executemany(
            "INSERT INTO businesses (place_id, data) VALUES (?, json(?)) "
            "ON CONFLICT(place_id) DO UPDATE SET "
            f"data = json_patch(businesses.data, excluded.data), updated_at = {_NOW_SQL}",
            rows,
        )
        self.db.commit()
        logger.debug("Batch wrote %d records", len(rows))
        return len(rows)

    def mark_scrape_failed(self, place_id: str) -> None:
        """Record a scrape that produced no pages so it is not retried by default."""
        self.update_fields(place_id, {
            "web_scraped": True,
            "web_scrape_status": "failed",
            "web_scraped_at": datetime.now(timezone.utc).isoformat(),
        })
