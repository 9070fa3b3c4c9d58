"""
Client-side inputs for the next generation: the voice sample and either typed
story text or an uploaded PDF. Only one text mode is active at a time.
"""

from __future__ import annotations

import logging

from models import AssetKind, GenerationRequest, IncomingFile, InputMode, Readiness, StagedAsset
from services.asset_uploader import AssetUploader
from services.errors import ConfirmationRequired, InputModeError, InvalidAsset, LimitExceeded

logger = logging.getLogger(__name__)

MAX_STORY_CHARS = 1500


class InputStager:
    def __init__(self, uploader: AssetUploader, *, max_chars: int = MAX_STORY_CHARS) -> None:
        self._uploader = uploader
        self._max_chars = max_chars
        self._mode = InputMode.TYPED
        self._story_text = ""
        self._voice: StagedAsset | None = None
        self._document: StagedAsset | None = None

    @property
    def mode(self) -> InputMode:
        return self._mode

    @property
    def story_text(self) -> str:
        return self._story_text

    @property
    def voice(self) -> StagedAsset | None:
        return self._voice

    @property
    def document(self) -> StagedAsset | None:
        return self._document

    @property
    def max_chars(self) -> int:
        return self._max_chars

    def set_text(self, text: str) -> None:
        """
        Store typed story text.

        Text over the limit is rejected with LimitExceeded and the stored text
        stays as it was; the exception carries the value cut at the boundary.
        """
        if self._mode is not InputMode.TYPED:
            raise InputModeError("Switch to typed input before editing story text")
        if len(text) > self._max_chars:
            raise LimitExceeded(self._max_chars, len(text), text[: self._max_chars])
        self._story_text = text

    def load_text_file(self, file: IncomingFile, *, confirm: bool = False) -> None:
        """
        Fill the typed text from a .txt file and land in typed mode. The file
        itself is not uploaded. Replacing a staged PDF needs ``confirm=True``.
        """
        self._uploader.validate(file, AssetKind.TEXT)
        try:
            content = file.data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise InvalidAsset("Text files must be UTF-8 encoded") from exc
        if len(content) > self._max_chars:
            raise LimitExceeded(self._max_chars, len(content), content[: self._max_chars])
        self.switch_mode(InputMode.TYPED, confirm=confirm)
        self.set_text(content)
        logger.info("[input_stager] Loaded %d chars from %r", len(content), file.filename)

    def has_unsaved(self, mode: InputMode) -> bool:
        if mode is InputMode.TYPED:
            return bool(self._story_text.strip())
        return self._document is not None

    def switch_mode(self, new_mode: InputMode, *, confirm: bool = False) -> None:
        """
        Change the active text mode. Leaving a mode that holds content needs
        ``confirm=True``; without it nothing changes.
        """
        if new_mode is self._mode:
            return
        leaving = self._mode
        if self.has_unsaved(leaving) and not confirm:
            raise ConfirmationRequired(leaving.value)
        if leaving is InputMode.TYPED:
            self._story_text = ""
        else:
            self._document = None
        self._mode = new_mode
        logger.info("[input_stager] Mode %s -> %s", leaving.value, new_mode.value)

    async def set_voice(self, file: IncomingFile) -> StagedAsset:
        """Stage a voice sample; the previous one is kept if staging fails."""
        asset = await self._uploader.stage(file, AssetKind.VOICE)
        self._voice = asset
        return asset

    async def set_document(self, file: IncomingFile) -> StagedAsset:
        if self._mode is not InputMode.DOCUMENT:
            raise InputModeError("Switch to document input before uploading a PDF")
        asset = await self._uploader.stage(file, AssetKind.DOCUMENT)
        self._document = asset
        return asset

    def clear_document(self) -> None:
        self._document = None

    def readiness(self) -> Readiness:
        voice_ready = self._voice is not None and self._voice.is_uploaded
        text_ok = bool(self._story_text.strip()) and len(self._story_text) <= self._max_chars
        document_ok = self._document is not None and self._document.is_uploaded
        return Readiness(voice_ready=voice_ready, text_ready=text_ok or document_ok)

    def snapshot(self) -> GenerationRequest:
        voice_ref = self._voice.remote_ref if self._voice else None
        document_ref = self._document.remote_ref if self._document else None
        return GenerationRequest(
            voice_path=voice_ref.path if voice_ref else None,
            voice_url=voice_ref.public_url if voice_ref else None,
            story_text=self._story_text,
            document_path=document_ref.path if document_ref else None,
            document_url=document_ref.public_url if document_ref else None,
        )

    def reset(self) -> None:
        self._mode = InputMode.TYPED
        self._story_text = ""
        self._voice = None
        self._document = None
