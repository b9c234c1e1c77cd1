"""Job documents and per-stage metrics."""

from __future__ import annotations

import json
import logging
from typing import Any

from lead_pipeline.db.database import Database
from lead_pipeline.models import StageMetrics

logger = logging.getLogger(__name__)

_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"


class JobStore:
    def __init__(self, db: Database):
        self.db = db

    def get_job(self, job_id: str) -> dict[str, Any] | None:
        row = self.db.fetchone("SELECT data FROM jobs WHERE job_id = ?", (job_id,))
        return json.loads(row["data"]) if row else None

    def set_metric(self, job_id: str, name: str, value: Any) -> bool:
        """Set ``metrics.<name>`` on the job, leaving every other entry intact.

        Metrics are advisory: storage errors are logged, never raised.
        """
        try:
            self.db.execute(
                "INSERT OR IGNORE INTO jobs (job_id, data) VALUES (?, json_object('job_id', ?, 'metrics', json('{}')))",
                (job_id, job_id),
            )
            self.db.execute(
                "UPDATE jobs SET data = json_set("
                "CASE WHEN json_type(data, '$.metrics') = 'object' THEN data "
                "ELSE json_set(data, '$.metrics', json('{}')) END, "
                f"?, json(?)), updated_at = {_NOW_SQL} WHERE job_id = ?",
                ('$.metrics."' + name.replace('"', '') + '"', json.dumps(value), job_id),
            )
            self.db.commit()
        except Exception as e:
            logger.warning("Failed to record %s metrics for job %s: %s", name, job_id, e)
            return False
        return True

    def record_metrics(self, job_id: str, stage: str, metrics: StageMetrics) -> None:
        if self.set_metric(job_id, stage, metrics.model_dump()):
            logger.info("Recorded %s metrics for job %s", stage, job_id)
