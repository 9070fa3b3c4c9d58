from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

from models import GenerationState, IncomingFile, LazyCreation
from services.asset_uploader import AssetUploader
from services.connectivity import ConnectivityMonitor
from services.errors import StorageError
from services.input_stager import InputStager
from services.orchestrator import GenerationOrchestrator
from services.session_store import SessionStore
from services.store import MemorySessionTable
from services.studio_hub import StudioHub

MB = 1024 * 1024


class FakeStorage:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_upload = False
        self.fail_url = False

    def upload(self, bucket_name: str, key: str, data: bytes, content_type: str | None = None) -> str:
        if self.fail_upload:
            raise StorageError(f"Upload to {bucket_name} failed")
        self.objects[(bucket_name, key)] = data
        return key

    def get_public_url(self, bucket_name: str, key: str) -> str:
        if self.fail_url:
            raise StorageError(f"Could not resolve a URL for {key}")
        return f"https://cdn.test/{bucket_name}/{key}"


class FlakyTable(MemorySessionTable):
    """Memory table that can be told to fail inserts or updates to a given status."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_insert = False
        # One-shot: the next insert blocks until this event is set.
        self.insert_gate: threading.Event | None = None
        self.insert_started = threading.Event()
        self.fail_status: set[str] = set()
        self.updates: list[tuple[int, dict[str, Any]]] = []

    def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        self.insert_started.set()
        gate, self.insert_gate = self.insert_gate, None
        if gate is not None:
            gate.wait(timeout=5)
        if self.fail_insert:
            raise RuntimeError("connection reset by peer")
        return super().insert(values)

    def update(self, session_id: int, values: dict[str, Any]) -> bool:
        if values.get("status") in self.fail_status:
            raise RuntimeError("connection reset by peer")
        self.updates.append((session_id, dict(values)))
        return super().update(session_id, values)


class FakeSynthesis:
    """
    Outcomes are consumed in order; each is an audio URL, an exception to
    raise, or an asyncio.Future to await first.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.outcomes: list[Any] = []

    async def synthesize(
        self,
        *,
        voice_url: str,
        text: str,
        session_id: int,
        document_url: str | None = None,
    ) -> str:
        self.calls.append(
            {"voice_url": voice_url, "text": text, "session_id": session_id, "document_url": document_url}
        )
        outcome: Any = self.outcomes.pop(0) if self.outcomes else "https://cdn/x.wav"
        if isinstance(outcome, asyncio.Future):
            outcome = await outcome
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def voice_file(name: str = "sample.wav", size: int = 2 * MB, content_type: str = "audio/wav") -> IncomingFile:
    return IncomingFile(filename=name, content_type=content_type, data=b"\x00" * size)


def pdf_file(name: str = "story.pdf", size: int = 2048) -> IncomingFile:
    return IncomingFile(filename=name, content_type="application/pdf", data=b"%PDF" + b"\x00" * (size - 4))


async def wait_for_state(orchestrator: GenerationOrchestrator, state: GenerationState, *, tries: int = 200) -> None:
    for _ in range(tries):
        if orchestrator.current_state is state:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"orchestrator never reached {state}, stuck in {orchestrator.current_state}")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    return ConnectivityMonitor()


@pytest.fixture
def hub() -> StudioHub:
    return StudioHub(history_size=100)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def table() -> FlakyTable:
    return FlakyTable()


@pytest.fixture
def synthesis() -> FakeSynthesis:
    return FakeSynthesis()


@pytest.fixture
def uploader(storage: FakeStorage, connectivity: ConnectivityMonitor) -> AssetUploader:
    return AssetUploader(
        storage,
        connectivity,
        voice_bucket="voices",
        document_bucket="documents",
        clock=lambda: 1718000000.0,
    )


@pytest.fixture
def stager(uploader: AssetUploader) -> InputStager:
    return InputStager(uploader)


@pytest.fixture
def store(table: FlakyTable) -> SessionStore:
    return SessionStore(table)


@pytest.fixture
def make_orchestrator(stager, store, synthesis, connectivity, hub):
    def _make(strategy=None, synthesis_client=None, **kwargs: Any) -> GenerationOrchestrator:
        return GenerationOrchestrator(
            stager,
            store,
            synthesis_client or synthesis,
            connectivity,
            hub,
            strategy=strategy or LazyCreation(),
            **kwargs,
        )

    return _make
