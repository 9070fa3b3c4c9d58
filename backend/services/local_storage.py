"""Filesystem-backed object storage for local development."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from services.errors import StorageError

logger = logging.getLogger(__name__)


class LocalObjectStorage:
    """Writes objects to ``<root>/<bucket>/<key>`` and serves them from ``base_url``."""

    def __init__(self, root: str | Path, base_url: str) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")

    def upload(self, bucket_name: str, key: str, data: bytes, content_type: str | None = None) -> str:
        target = self._root / bucket_name / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("[local_storage] Write failed %s: %s", target, exc)
            raise StorageError(f"Upload to {bucket_name} failed") from exc
        logger.info("[local_storage] Stored %d bytes at %s", len(data), target)
        return key

    def get_public_url(self, bucket_name: str, key: str) -> str:
        if not (self._root / bucket_name / key).is_file():
            raise StorageError(f"Could not resolve a URL for {key}")
        return f"{self._base_url}/{quote(bucket_name)}/{quote(key)}"
