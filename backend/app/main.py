import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from routes import sessions, studio, studio_ws
from services.config import Settings, load_settings
from services.errors import (
    AlreadyInProgress,
    ConfirmationRequired,
    InputModeError,
    InvalidAsset,
    LimitExceeded,
    NoConnectivity,
    NotReady,
    PersistenceError,
    StorageError,
    StudioError,
)
from services.studio import Studio, create_studio

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[StudioError], int]] = [
    (InvalidAsset, 422),
    (LimitExceeded, 422),
    (InputModeError, 422),
    (ConfirmationRequired, 409),
    (AlreadyInProgress, 409),
    (NotReady, 400),
    (NoConnectivity, 503),
    (StorageError, 502),
    (PersistenceError, 502),
]


def status_for(exc: StudioError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    body: dict[str, object] = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, LimitExceeded):
        body["limit"] = exc.limit
        body["truncated"] = exc.truncated
    status_code = status_for(exc)
    logger.info("[api] %s %s -> %d %s", request.method, request.url.path, status_code, exc.code)
    return JSONResponse(status_code=status_code, content=body)


def create_app(settings: Settings | None = None, studio_instance: Studio | None = None) -> FastAPI:
    settings = settings or (studio_instance.settings if studio_instance else load_settings())
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    app = FastAPI(title="Voice Story Studio API", version="0.1.0")
    app.state.studio = studio_instance or create_studio(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StudioError, studio_error_handler)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(studio.router, prefix="/api")
    app.include_router(sessions.router, prefix="/api")
    app.include_router(studio_ws.router, prefix="/api")

    if settings.storage_backend == "local":
        media_dir = Path(settings.local_storage_dir)
        media_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/media", StaticFiles(directory=media_dir), name="media")
    return app
