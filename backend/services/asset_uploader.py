"""Validation and upload of user-supplied voice samples and story documents."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Callable, Protocol

from models import AssetKind, IncomingFile, RemoteRef, StagedAsset, Validity
from services.connectivity import ConnectivityMonitor
from services.errors import InvalidAsset, StorageError

logger = logging.getLogger(__name__)

MB = 1024 * 1024
VOICE_MAX_BYTES = 10 * MB
DOCUMENT_MAX_BYTES = 1 * MB

_SIZE_LIMITS = {
    AssetKind.VOICE: VOICE_MAX_BYTES,
    AssetKind.TEXT: DOCUMENT_MAX_BYTES,
    AssetKind.DOCUMENT: DOCUMENT_MAX_BYTES,
}
_EXACT_TYPES = {
    AssetKind.TEXT: "text/plain",
    AssetKind.DOCUMENT: "application/pdf",
}
_FOLDERS = {
    AssetKind.VOICE: "voices",
    AssetKind.TEXT: "documents",
    AssetKind.DOCUMENT: "documents",
}


class ObjectStorage(Protocol):
    def upload(self, bucket_name: str, key: str, data: bytes, content_type: str | None = None) -> str: ...

    def get_public_url(self, bucket_name: str, key: str) -> str: ...


def safe_filename(filename: str) -> str:
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    return re.sub(r"[^A-Za-z0-9_.-]", "_", name) or "upload"


def uploaded_ref(asset: StagedAsset) -> RemoteRef:
    if asset.remote_ref is None:
        raise StorageError(f"{asset.raw.filename} has not been uploaded")
    return asset.remote_ref


def _base_type(content_type: str) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return content_type.split(";", 1)[0].strip().lower()


def _rejection(kind: AssetKind, content_type: str, size: int) -> str | None:
    base = _base_type(content_type)
    if kind is AssetKind.VOICE:
        if not base.startswith("audio/"):
            return "Please upload an audio file (MP3, WAV, etc.)"
    elif base != _EXACT_TYPES[kind]:
        if kind is AssetKind.TEXT:
            return "Please upload a text file (.txt)"
        return "Please upload a PDF document"
    if size == 0:
        return "The selected file is empty"
    limit = _SIZE_LIMITS[kind]
    if size > limit:
        return f"File is too large (max {limit // MB}MB)"
    return None


class AssetUploader:
    def __init__(
        self,
        storage: ObjectStorage,
        connectivity: ConnectivityMonitor,
        *,
        voice_bucket: str,
        document_bucket: str,
        user_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._connectivity = connectivity
        self._buckets = {
            AssetKind.VOICE: voice_bucket,
            AssetKind.TEXT: document_bucket,
            AssetKind.DOCUMENT: document_bucket,
        }
        self._user_id = user_id
        self._clock = clock

    def validate(self, file: IncomingFile, kind: AssetKind) -> StagedAsset:
        """Check type and size locally. Raises InvalidAsset; never touches the network."""
        reason = _rejection(kind, file.content_type, file.size)
        if reason is not None:
            logger.info(
                "[asset_uploader] Rejected %s %r (type=%s size=%d): %s",
                kind.value,
                file.filename,
                file.content_type,
                file.size,
                reason,
            )
            rejected = StagedAsset(kind=kind, raw=file, validity=Validity.REJECTED, rejection_reason=reason)
            raise InvalidAsset(reason, asset=rejected)
        return StagedAsset(kind=kind, raw=file, validity=Validity.VALID)

    def build_key(self, file: IncomingFile, kind: AssetKind) -> str:
        # Millisecond timestamp + filename; collisions are tolerated, not prevented.
        key = f"{_FOLDERS[kind]}/{int(self._clock() * 1000)}-{safe_filename(file.filename)}"
        if self._user_id:
            key = f"users/{self._user_id}/{key}"
        return key

    async def stage(self, file: IncomingFile, kind: AssetKind) -> StagedAsset:
        """
        Validate, upload and resolve a public URL for one asset.

        :raises InvalidAsset: the file failed local validation
        :raises NoConnectivity: the host is offline (checked before any upload)
        :raises StorageError: upload or URL resolution failed
        """
        asset = self.validate(file, kind)
        self._connectivity.require_online(f"upload {kind.value}")

        bucket = self._buckets[kind]
        key = self.build_key(file, kind)
        path = await asyncio.to_thread(self._storage.upload, bucket, key, file.data, _base_type(file.content_type))
        public_url = await asyncio.to_thread(self._storage.get_public_url, bucket, path)

        asset.remote_ref = RemoteRef(path=path, public_url=public_url)
        logger.info("[asset_uploader] Staged %s %r at %s/%s", kind.value, file.filename, bucket, path)
        return asset
