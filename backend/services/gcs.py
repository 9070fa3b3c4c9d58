"""Google Cloud Storage backend for voice samples and story documents."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from services.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_VOICE_BUCKET = "voices"
DEFAULT_DOCUMENT_BUCKET = "documents"


class GcsObjectStorage:
    """
    Blocking GCS client; AssetUploader runs these calls off the event loop.

    Public URLs come from ``blob.public_url`` unless ``signed_url_seconds`` is
    set, in which case a v4 signed GET URL valid for that many seconds is issued
    (for buckets that are not publicly readable).
    """

    def __init__(self, *, project: str | None = None, signed_url_seconds: int = 0) -> None:
        self._project = project
        self._signed_url_seconds = signed_url_seconds
        self._client = None

    def _get_client(self):
        if self._client is None:
            from google.cloud import storage

            self._client = storage.Client(project=self._project) if self._project else storage.Client()
        return self._client

    def upload(self, bucket_name: str, key: str, data: bytes, content_type: str | None = None) -> str:
        """
        Upload raw bytes to ``bucket_name/key`` and return the storage-relative path.

        :raises StorageError: on any client or API failure
        """
        try:
            blob = self._get_client().bucket(bucket_name).blob(key)
            blob.upload_from_string(data, content_type=content_type or "application/octet-stream")
        except Exception as exc:  # noqa: BLE001
            logger.error("[gcs] Upload failed bucket=%s key=%s: %s", bucket_name, key, exc)
            raise StorageError(f"Upload to {bucket_name} failed") from exc
        logger.info("[gcs] Uploaded %d bytes to %s/%s", len(data), bucket_name, key)
        return key

    def get_public_url(self, bucket_name: str, key: str) -> str:
        try:
            blob = self._get_client().bucket(bucket_name).blob(key)
            if self._signed_url_seconds > 0:
                expiration = datetime.now(timezone.utc) + timedelta(seconds=self._signed_url_seconds)
                url = blob.generate_signed_url(expiration=expiration, method="GET", version="v4")
            else:
                url = blob.public_url
        except Exception as exc:  # noqa: BLE001
            logger.error("[gcs] URL resolution failed bucket=%s key=%s: %s", bucket_name, key, exc)
            raise StorageError(f"Could not resolve a URL for {key}") from exc
        if not url:
            raise StorageError(f"Could not resolve a URL for {key}")
        return url
