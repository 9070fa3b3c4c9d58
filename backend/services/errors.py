"""Typed failures raised by the studio services.

Storage and transport clients translate their SDK exceptions into these
classes so callers branch on type, never on message text.
"""

from __future__ import annotations

from typing import Any


class StudioError(Exception):
    code = "studio_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidAsset(StudioError):
    code = "invalid_asset"

    def __init__(self, reason: str, *, asset: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.asset = asset


class LimitExceeded(StudioError):
    code = "limit_exceeded"

    def __init__(self, limit: int, length: int, truncated: str) -> None:
        super().__init__(f"Story text is limited to {limit} characters (got {length})")
        self.limit = limit
        self.length = length
        self.truncated = truncated


class NoConnectivity(StudioError):
    code = "no_connectivity"

    def __init__(self, operation: str = "") -> None:
        detail = f" ({operation})" if operation else ""
        super().__init__(f"You appear to be offline{detail}. Check your connection and try again.")
        self.operation = operation


class StorageError(StudioError):
    code = "storage_error"


class PersistenceError(StudioError):
    code = "persistence_error"


class TransportError(StudioError):
    code = "transport_error"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(StudioError):
    code = "malformed_response"


class AlreadyInProgress(StudioError):
    code = "already_in_progress"

    def __init__(self, session_id: int | None = None) -> None:
        super().__init__("A generation is already in progress")
        self.session_id = session_id


class NotReady(StudioError):
    code = "not_ready"

    def __init__(self, voice_ready: bool, text_ready: bool) -> None:
        super().__init__("Please upload a voice sample and provide story text")
        self.voice_ready = voice_ready
        self.text_ready = text_ready


class SessionCreationFailed(StudioError):
    code = "session_creation_failed"


class ConfirmationRequired(StudioError):
    code = "confirmation_required"

    def __init__(self, leaving: str) -> None:
        super().__init__(f"Switching away from {leaving} input discards unsaved content")
        self.leaving = leaving


class InputModeError(StudioError):
    code = "input_mode"
