from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class SessionStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.FAILED})

# Patchable columns of the sessions table, keyed by Session attribute name.
SESSION_COLUMNS = {
    "voice_path": "voice_path",
    "document_path": "pdf_path",
    "story_text": "story_text",
    "status": "status",
    "generated_audio_path": "generated_audio_path",
    "user_id": "user_id",
}


@dataclass
class Session:
    id: int | None = None                  # assigned by the store on create
    voice_path: str | None = None          # storage-relative, voices bucket
    document_path: str | None = None       # storage-relative, documents bucket
    story_text: str = ""
    status: SessionStatus = SessionStatus.UPLOADED
    generated_audio_path: str | None = None
    user_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
