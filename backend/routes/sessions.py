"""Session REST API. Read-only view of persisted session rows for status polling."""

import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from models import SessionStatus

router = APIRouter(tags=["sessions"])
logger = logging.getLogger(__name__)


class SessionReadResponse(BaseModel):
    """Session status for polling. GET /api/sessions/{id}."""

    session_id: int
    status: SessionStatus
    voice_path: str | None = None
    pdf_path: str | None = None
    story_text: str = ""
    generated_audio_path: str | None = None


@router.get(
    "/sessions/{session_id}",
    response_model=SessionReadResponse,
    status_code=200,
)
async def get_session(request: Request, session_id: int) -> SessionReadResponse:
    logger.info("[sessions] GET /api/sessions/%s called", session_id)
    session = await request.app.state.studio.store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionReadResponse(
        session_id=session_id,
        status=session.status,
        voice_path=session.voice_path,
        pdf_path=session.document_path,
        story_text=session.story_text,
        generated_audio_path=session.generated_audio_path,
    )
