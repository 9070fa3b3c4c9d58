import asyncio
from dataclasses import asdict, dataclass, field
from enum import Enum


class GenerationState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AWAITING_RESULT = "awaiting_result"
    COMPLETED = "completed"
    FAILED = "failed"


IN_FLIGHT_STATES = frozenset({GenerationState.SUBMITTING, GenerationState.AWAITING_RESULT})


class InputMode(str, Enum):
    TYPED = "typed"
    DOCUMENT = "document"


@dataclass(frozen=True)
class EagerCreation:
    """Create the session row as soon as the voice sample is staged."""

    name: str = "eager"


@dataclass(frozen=True)
class LazyCreation:
    """Create the session row when generation is triggered."""

    name: str = "lazy"


CreationStrategy = EagerCreation | LazyCreation


@dataclass(frozen=True)
class Readiness:
    voice_ready: bool
    text_ready: bool

    @property
    def ready(self) -> bool:
        return self.voice_ready and self.text_ready


@dataclass(frozen=True)
class GenerationRequest:
    """Inputs captured from the stager at trigger time."""

    voice_path: str | None
    voice_url: str | None
    story_text: str
    document_path: str | None = None
    document_url: str | None = None


@dataclass(frozen=True)
class StudioState:
    """What the client renders from; the persisted row is never read back for this."""

    state: GenerationState
    strategy: str
    mode: InputMode
    voice_ready: bool
    text_ready: bool
    story_chars: int
    online: bool
    session_id: int | None = None
    generated_audio_url: str | None = None
    voice_filename: str | None = None
    document_filename: str | None = None
    last_error_code: str | None = None
    last_error_message: str | None = None

    def as_payload(self) -> dict:
        payload = asdict(self)
        payload["state"] = self.state.value
        payload["mode"] = self.mode.value
        return payload


@dataclass
class GenerationAttempt:
    attempt_id: int
    request: GenerationRequest
    session_id: int | None = None
    task: asyncio.Task | None = field(default=None, repr=False)
