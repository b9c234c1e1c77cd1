"""Bulk object store: JSON blobs under a root directory, keyed by path."""

from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ObjectStore:
    """Keys are ``/``-separated relative paths; ``.json.gz`` keys are gzip-compressed."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key.lstrip("/")).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Object key escapes the store root: {key}")
        return path

    def put_json(self, key: str, data: Any) -> int:
        """Write ``data`` under ``key``; returns the stored size in bytes."""
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        if key.endswith(".gz"):
            body = gzip.compress(body, compresslevel=9)
        path.write_bytes(body)
        logger.debug("Stored %s (%d bytes)", key, len(body))
        return len(body)

    def get_json(self, key: str) -> Any | None:
        """Decoded object, or ``None`` when the key does not exist."""
        path = self._path(key)
        if not path.is_file():
            return None
        body = path.read_bytes()
        if key.endswith(".gz"):
            body = gzip.decompress(body)
        return json.loads(body.decode("utf-8"))

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def list(self, prefix: str = "") -> list[str]:
        """Keys starting with ``prefix``, sorted."""
        if not self.root.exists():
            return []
        keys = (p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file())
        return sorted(k for k in keys if k.startswith(prefix))
