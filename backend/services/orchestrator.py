"""
Generation state machine: idle -> submitting -> awaiting_result -> completed | failed.

One attempt at a time. The session row is written before the synthesis call,
and the outcome is written back to the row before it reaches the client.
Replacing the voice sample abandons any in-flight attempt; late settlements of
an abandoned attempt are dropped by the stale-result guard.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any

from models import (
    IN_FLIGHT_STATES,
    CreationStrategy,
    EagerCreation,
    GenerationAttempt,
    GenerationRequest,
    GenerationState,
    IncomingFile,
    LazyCreation,
    SessionStatus,
    StagedAsset,
    StudioState,
)
from services.asset_uploader import uploaded_ref
from services.connectivity import ConnectivityMonitor
from services.errors import (
    AlreadyInProgress,
    InvalidAsset,
    NotReady,
    PersistenceError,
    SessionCreationFailed,
    StudioError,
    TransportError,
)
from services.input_stager import InputStager
from services.session_store import SessionStore
from services.studio_hub import StudioHub
from services.synthesis_client import SynthesisClient

logger = logging.getLogger(__name__)


def _post_submit_problem(request: GenerationRequest, max_chars: int) -> str | None:
    if not request.voice_path or not request.voice_url:
        return "The voice sample is no longer available"
    if len(request.story_text) > max_chars:
        return f"Story text is limited to {max_chars} characters"
    if not request.story_text.strip() and not request.document_url:
        return "Story text or a PDF document is required"
    return None


class GenerationOrchestrator:
    def __init__(
        self,
        stager: InputStager,
        store: SessionStore,
        synthesis: SynthesisClient,
        connectivity: ConnectivityMonitor,
        hub: StudioHub,
        *,
        strategy: CreationStrategy | None = None,
        user_id: str | None = None,
    ) -> None:
        self._stager = stager
        self._store = store
        self._synthesis = synthesis
        self._connectivity = connectivity
        self._hub = hub
        self._strategy = strategy or LazyCreation()
        self._user_id = user_id

        self._state = GenerationState.IDLE
        self._session_id: int | None = None
        self._generated_audio_url: str | None = None
        self._last_error: StudioError | None = None
        self._attempt: GenerationAttempt | None = None
        self._attempt_ids = itertools.count(1)
        self._voice_epoch = 0

    @property
    def current_state(self) -> GenerationState:
        return self._state

    @property
    def session_id(self) -> int | None:
        return self._session_id

    @property
    def strategy(self) -> CreationStrategy:
        return self._strategy

    @property
    def stager(self) -> InputStager:
        return self._stager

    def state(self) -> StudioState:
        readiness = self._stager.readiness()
        voice = self._stager.voice
        document = self._stager.document
        return StudioState(
            state=self._state,
            strategy=self._strategy.name,
            mode=self._stager.mode,
            voice_ready=readiness.voice_ready,
            text_ready=readiness.text_ready,
            story_chars=len(self._stager.story_text),
            online=self._connectivity.is_online,
            session_id=self._session_id,
            generated_audio_url=self._generated_audio_url,
            voice_filename=voice.raw.filename if voice else None,
            document_filename=document.raw.filename if document else None,
            last_error_code=self._last_error.code if self._last_error else None,
            last_error_message=self._last_error.message if self._last_error else None,
        )

    async def publish_state(self) -> None:
        await self._hub.publish({"type": "state", **self.state().as_payload()})

    async def _notice(self, level: str, error_or_code: StudioError | str, message: str | None = None) -> None:
        if isinstance(error_or_code, StudioError):
            code, text = error_or_code.code, message or error_or_code.message
        else:
            code, text = error_or_code, message or error_or_code
        await self._hub.publish({"type": "notice", "level": level, "code": code, "message": text})

    # -- voice replacement -------------------------------------------------

    async def replace_voice(self, file: IncomingFile) -> StagedAsset:
        """
        Stage a new voice sample. On success everything downstream resets to
        idle; under EagerCreation a session row is created right away.
        """
        asset = await self._stager.set_voice(file)
        self._voice_epoch += 1
        epoch = self._voice_epoch

        if self._attempt is not None and self._state in IN_FLIGHT_STATES:
            logger.info(
                "[orchestrator] Voice replaced; abandoning attempt %s (session=%s)",
                self._attempt.attempt_id,
                self._attempt.session_id,
            )
        self._attempt = None
        self._state = GenerationState.IDLE
        self._session_id = None
        self._generated_audio_url = None
        self._last_error = None

        if isinstance(self._strategy, EagerCreation):
            await self._create_uploaded_session(uploaded_ref(asset).path, epoch)
        await self._notice("success", "voice_staged", "Voice sample uploaded successfully!")
        await self.publish_state()
        return asset

    async def _create_uploaded_session(self, voice_path: str, epoch: int) -> None:
        try:
            self._connectivity.require_online("create session")
            session = await self._store.create(
                {
                    "voice_path": voice_path,
                    "status": SessionStatus.UPLOADED,
                    "user_id": self._user_id,
                }
            )
        except StudioError as exc:
            # Generation creates the row later if this one never lands.
            logger.warning("[orchestrator] Eager session creation failed: %s", exc)
            await self._notice("error", exc)
            return
        if epoch != self._voice_epoch or self._session_id is not None or self._attempt is not None:
            logger.info("[orchestrator] Dropping eager session %s; inputs moved on", session.id)
            return
        self._session_id = session.id
        logger.info("[orchestrator] Session %s created on upload", session.id)

    # -- generation --------------------------------------------------------

    def trigger(self) -> asyncio.Task:
        """
        Start one generation attempt and return its task. Must be called from
        the running event loop.

        :raises AlreadyInProgress: an attempt is submitting or awaiting its result
        :raises NotReady: voice or text input is missing
        :raises NoConnectivity: the host is offline
        """
        if self._state in IN_FLIGHT_STATES:
            logger.info("[orchestrator] Trigger ignored; attempt in flight for session=%s", self._session_id)
            error = AlreadyInProgress(self._session_id)
            self._hub.notice("info", error.code, error.message)
            raise error

        readiness = self._stager.readiness()
        if not readiness.ready:
            raise NotReady(readiness.voice_ready, readiness.text_ready)
        self._connectivity.require_online("generate")

        reuse_row = isinstance(self._strategy, EagerCreation)
        attempt = GenerationAttempt(
            attempt_id=next(self._attempt_ids),
            request=self._stager.snapshot(),
            session_id=self._session_id if reuse_row else None,
        )
        self._attempt = attempt
        self._state = GenerationState.SUBMITTING
        self._session_id = attempt.session_id
        self._generated_audio_url = None
        self._last_error = None
        logger.info(
            "[orchestrator] Attempt %s submitting (strategy=%s session=%s)",
            attempt.attempt_id,
            self._strategy.name,
            attempt.session_id,
        )
        attempt.task = asyncio.get_running_loop().create_task(self._run(attempt))
        return attempt.task

    async def generate(self) -> GenerationState:
        """Trigger and wait for this attempt's own outcome."""
        return await self.trigger()

    def _is_current(self, attempt: GenerationAttempt) -> bool:
        return self._attempt is attempt and self._session_id == attempt.session_id

    async def _run(self, attempt: GenerationAttempt) -> GenerationState:
        await self.publish_state()

        try:
            session_id = await self._write_processing(attempt)
        except StudioError as exc:
            if self._attempt is not attempt:
                logger.info("[orchestrator] Attempt %s abandoned before its session was written", attempt.attempt_id)
                return GenerationState.FAILED
            error = SessionCreationFailed(f"Could not start generation: {exc.message}")
            logger.error("[orchestrator] Attempt %s aborted before synthesis: %s", attempt.attempt_id, exc)
            self._state = GenerationState.FAILED
            self._last_error = error
            await self._notice("error", error)
            await self.publish_state()
            return GenerationState.FAILED

        if self._attempt is not attempt:
            logger.info(
                "[orchestrator] Attempt %s abandoned; session %s left as processing",
                attempt.attempt_id,
                session_id,
            )
            return GenerationState.FAILED
        attempt.session_id = session_id
        self._session_id = session_id

        problem = _post_submit_problem(attempt.request, self._stager.max_chars)
        if problem is not None:
            return await self._finish_failed(attempt, InvalidAsset(problem))

        self._state = GenerationState.AWAITING_RESULT
        await self.publish_state()
        request = attempt.request
        try:
            self._connectivity.require_online("synthesis")
            audio_url = await self._synthesis.synthesize(
                voice_url=request.voice_url or "",
                text=request.story_text,
                session_id=session_id,
                document_url=request.document_url,
            )
        except StudioError as exc:
            return await self._finish_failed(attempt, exc)
        except Exception as exc:  # noqa: BLE001
            logger.error("[orchestrator] Unexpected synthesis failure session=%s", session_id, exc_info=True)
            return await self._finish_failed(attempt, TransportError(f"Synthesis failed: {type(exc).__name__}"))

        return await self._finish_completed(attempt, session_id, audio_url)

    async def _write_processing(self, attempt: GenerationAttempt) -> int:
        self._connectivity.require_online("save session")
        request = attempt.request
        fields: dict[str, Any] = {
            "status": SessionStatus.PROCESSING,
            "voice_path": request.voice_path,
            "document_path": request.document_path,
            "story_text": request.story_text,
        }
        if attempt.session_id is not None:
            # Retried row goes back through processing; a prior result must not survive.
            await self._store.update(attempt.session_id, {**fields, "generated_audio_path": None})
            return attempt.session_id
        session = await self._store.create({**fields, "user_id": self._user_id})
        if session.id is None:
            raise PersistenceError("The session store did not assign an id")
        return session.id

    async def _finish_completed(
        self, attempt: GenerationAttempt, session_id: int, audio_url: str
    ) -> GenerationState:
        if not self._is_current(attempt):
            logger.info("[orchestrator] Dropping late result for abandoned session %s", session_id)
            return GenerationState.COMPLETED

        persisted = True
        try:
            self._connectivity.require_online("save result")
            await self._store.update(
                session_id,
                {"status": SessionStatus.COMPLETED, "generated_audio_path": audio_url},
            )
        except StudioError as exc:
            persisted = False
            logger.error("[orchestrator] Session %s completed but not saved: %s", session_id, exc)

        if not self._is_current(attempt):
            logger.info("[orchestrator] Session %s superseded while saving its result", session_id)
            return GenerationState.COMPLETED
        self._state = GenerationState.COMPLETED
        self._generated_audio_url = audio_url
        logger.info("[orchestrator] Attempt %s completed session=%s", attempt.attempt_id, session_id)
        if not persisted:
            await self._notice(
                "error",
                PersistenceError.code,
                "Audio generated, but the session could not be saved",
            )
        await self._notice("success", "generation_completed", "Audio generated successfully!")
        await self.publish_state()
        return GenerationState.COMPLETED

    async def _finish_failed(self, attempt: GenerationAttempt, error: StudioError) -> GenerationState:
        session_id = attempt.session_id
        if not self._is_current(attempt):
            logger.info("[orchestrator] Dropping late failure for abandoned session %s: %s", session_id, error)
            return GenerationState.FAILED

        logger.warning("[orchestrator] Attempt %s failed session=%s: %s", attempt.attempt_id, session_id, error)
        status_saved = True
        if session_id is not None:
            try:
                self._connectivity.require_online("save result")
                await self._store.update(session_id, {"status": SessionStatus.FAILED})
            except StudioError as exc:
                status_saved = False
                logger.error("[orchestrator] Could not mark session %s failed: %s", session_id, exc)

        if not self._is_current(attempt):
            return GenerationState.FAILED
        self._state = GenerationState.FAILED
        self._last_error = error
        await self._notice("error", error)
        if not status_saved:
            await self._notice("error", PersistenceError.code, "The failure could not be recorded for this session")
        await self.publish_state()
        return GenerationState.FAILED
