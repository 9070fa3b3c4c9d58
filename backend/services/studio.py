"""Wires the studio services together from Settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from models import EagerCreation, LazyCreation
from services.asset_uploader import AssetUploader, ObjectStorage
from services.config import Settings
from services.connectivity import ConnectivityMonitor
from services.input_stager import InputStager
from services.orchestrator import GenerationOrchestrator
from services.session_store import SessionStore, SessionTable
from services.studio_hub import StudioHub
from services.synthesis_client import SynthesisClient

logger = logging.getLogger(__name__)


@dataclass
class Studio:
    settings: Settings
    connectivity: ConnectivityMonitor
    hub: StudioHub
    store: SessionStore
    stager: InputStager
    orchestrator: GenerationOrchestrator


def build_storage(settings: Settings) -> ObjectStorage:
    if settings.storage_backend == "gcs":
        from services.gcs import GcsObjectStorage

        return GcsObjectStorage(project=settings.gcs_project, signed_url_seconds=settings.gcs_signed_url_seconds)
    from services.local_storage import LocalObjectStorage

    return LocalObjectStorage(settings.local_storage_dir, settings.local_storage_base_url)


def build_session_table(settings: Settings) -> SessionTable:
    if settings.repo_backend == "postgres":
        from services.postgres_store import PostgresSessionTable

        return PostgresSessionTable.from_url(settings.database_url)
    from services.store import sessions

    return sessions


def create_studio(
    settings: Settings,
    *,
    storage: ObjectStorage | None = None,
    table: SessionTable | None = None,
    synthesis: SynthesisClient | None = None,
) -> Studio:
    connectivity = ConnectivityMonitor()
    hub = StudioHub()
    uploader = AssetUploader(
        storage or build_storage(settings),
        connectivity,
        voice_bucket=settings.voice_bucket,
        document_bucket=settings.document_bucket,
        user_id=settings.user_id,
    )
    stager = InputStager(uploader)
    store = SessionStore(table if table is not None else build_session_table(settings))
    strategy = EagerCreation() if settings.session_creation == "eager" else LazyCreation()
    orchestrator = GenerationOrchestrator(
        stager,
        store,
        synthesis or SynthesisClient(settings.synthesis_url, timeout=settings.synthesis_timeout_seconds),
        connectivity,
        hub,
        strategy=strategy,
        user_id=settings.user_id,
    )

    def on_connectivity(event: str) -> None:
        hub.publish_nowait({"type": "connectivity", "online": event == "online"})
        if event == "offline":
            hub.notice("error", "no_connectivity", "You are offline. Uploads and generation are paused.")

    connectivity.subscribe(on_connectivity)
    logger.info(
        "[studio] Ready: creation=%s storage=%s repo=%s synthesis=%s",
        strategy.name,
        settings.storage_backend,
        settings.repo_backend,
        settings.synthesis_url or "(not configured)",
    )
    return Studio(
        settings=settings,
        connectivity=connectivity,
        hub=hub,
        store=store,
        stager=stager,
        orchestrator=orchestrator,
    )
