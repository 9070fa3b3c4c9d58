"""Studio REST API: stage inputs, switch modes, trigger generation, poll state."""

import logging

from fastapi import APIRouter, File, Request, UploadFile
from pydantic import BaseModel

from models import GenerationState, IncomingFile, InputMode, StudioState
from services.asset_uploader import uploaded_ref
from services.studio import Studio

router = APIRouter(prefix="/studio", tags=["studio"])
logger = logging.getLogger(__name__)


class StudioStateResponse(BaseModel):
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


class TextRequest(BaseModel):
    text: str


class ModeRequest(BaseModel):
    mode: InputMode
    confirm: bool = False


class ConnectivityRequest(BaseModel):
    online: bool


class UploadResponse(BaseModel):
    kind: str
    filename: str
    path: str
    public_url: str
    state: StudioStateResponse


def _studio(request: Request) -> Studio:
    return request.app.state.studio


def _state_response(state: StudioState) -> StudioStateResponse:
    return StudioStateResponse(**state.as_payload())


async def _read_upload(upload: UploadFile) -> IncomingFile:
    data = await upload.read()
    return IncomingFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


@router.get("", response_model=StudioStateResponse)
def get_studio_state(request: Request) -> StudioStateResponse:
    return _state_response(_studio(request).orchestrator.state())


@router.post("/voice", response_model=UploadResponse, status_code=201)
async def upload_voice(request: Request, file: UploadFile = File(...)) -> UploadResponse:
    """Stage a voice sample; replaces the current one and resets generation to idle."""
    studio = _studio(request)
    incoming = await _read_upload(file)
    logger.info("[studio] POST /studio/voice filename=%r size=%d", incoming.filename, incoming.size)
    asset = await studio.orchestrator.replace_voice(incoming)
    ref = uploaded_ref(asset)
    return UploadResponse(
        kind=asset.kind.value,
        filename=incoming.filename,
        path=ref.path,
        public_url=ref.public_url,
        state=_state_response(studio.orchestrator.state()),
    )


@router.put("/text", response_model=StudioStateResponse)
async def put_text(request: Request, body: TextRequest) -> StudioStateResponse:
    studio = _studio(request)
    studio.stager.set_text(body.text)
    await studio.orchestrator.publish_state()
    return _state_response(studio.orchestrator.state())


@router.post("/text-file", response_model=StudioStateResponse)
async def upload_text_file(request: Request, file: UploadFile = File(...), confirm: bool = False) -> StudioStateResponse:
    """Load story text from a .txt file into the typed text."""
    studio = _studio(request)
    incoming = await _read_upload(file)
    logger.info("[studio] POST /studio/text-file filename=%r size=%d", incoming.filename, incoming.size)
    studio.stager.load_text_file(incoming, confirm=confirm)
    await studio.orchestrator.publish_state()
    return _state_response(studio.orchestrator.state())


@router.post("/document", response_model=UploadResponse, status_code=201)
async def upload_document(request: Request, file: UploadFile = File(...)) -> UploadResponse:
    studio = _studio(request)
    incoming = await _read_upload(file)
    logger.info("[studio] POST /studio/document filename=%r size=%d", incoming.filename, incoming.size)
    asset = await studio.stager.set_document(incoming)
    ref = uploaded_ref(asset)
    await studio.orchestrator.publish_state()
    return UploadResponse(
        kind=asset.kind.value,
        filename=incoming.filename,
        path=ref.path,
        public_url=ref.public_url,
        state=_state_response(studio.orchestrator.state()),
    )


@router.delete("/document", response_model=StudioStateResponse)
async def delete_document(request: Request) -> StudioStateResponse:
    studio = _studio(request)
    studio.stager.clear_document()
    await studio.orchestrator.publish_state()
    return _state_response(studio.orchestrator.state())


@router.post("/mode", response_model=StudioStateResponse)
async def switch_mode(request: Request, body: ModeRequest) -> StudioStateResponse:
    """Switch between typed text and PDF input. Discarding content needs confirm=true."""
    studio = _studio(request)
    studio.stager.switch_mode(body.mode, confirm=body.confirm)
    await studio.orchestrator.publish_state()
    return _state_response(studio.orchestrator.state())


@router.post("/connectivity", response_model=StudioStateResponse)
async def report_connectivity(request: Request, body: ConnectivityRequest) -> StudioStateResponse:
    """Host-reported network state."""
    studio = _studio(request)
    studio.connectivity.set_online(body.online)
    return _state_response(studio.orchestrator.state())


@router.post("/generate", response_model=StudioStateResponse, status_code=202)
async def generate(request: Request) -> StudioStateResponse:
    """
    Start a generation attempt. Returns immediately; follow progress with
    GET /api/studio or the studio events WebSocket.
    """
    studio = _studio(request)
    studio.orchestrator.trigger()
    logger.info("[studio] POST /studio/generate accepted session=%s", studio.orchestrator.session_id)
    return _state_response(studio.orchestrator.state())
