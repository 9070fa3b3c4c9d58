"""Settings read from the environment (and backend/.env when present)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from services.gcs import DEFAULT_DOCUMENT_BUCKET, DEFAULT_VOICE_BUCKET
from services.synthesis_client import DEFAULT_TIMEOUT_SECONDS

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

SESSION_CREATION_CHOICES = ("eager", "lazy")
STORAGE_BACKENDS = ("gcs", "local")
REPO_BACKENDS = ("memory", "postgres")


@dataclass(frozen=True)
class Settings:
    session_creation: str = "lazy"
    storage_backend: str = "local"
    voice_bucket: str = DEFAULT_VOICE_BUCKET
    document_bucket: str = DEFAULT_DOCUMENT_BUCKET
    gcs_project: str | None = None
    gcs_signed_url_seconds: int = 0
    local_storage_dir: str = "media"
    local_storage_base_url: str = "http://localhost:8000/media"
    repo_backend: str = "memory"
    database_url: str = ""
    synthesis_url: str = ""
    synthesis_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_id: str | None = None
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = _env(name, default).lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {list(choices)}, got {value!r}")
    return value


def load_settings(*, env_file: Path | None = ENV_FILE) -> Settings:
    if env_file is not None:
        load_dotenv(env_file)

    repo_backend = _choice("REPO_BACKEND", "memory", REPO_BACKENDS)
    database_url = _env("DATABASE_URL")
    if repo_backend == "postgres" and not database_url:
        raise ValueError("DATABASE_URL is required when REPO_BACKEND=postgres")

    origins = tuple(o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip())
    return Settings(
        session_creation=_choice("SESSION_CREATION", "lazy", SESSION_CREATION_CHOICES),
        storage_backend=_choice("STORAGE_BACKEND", "local", STORAGE_BACKENDS),
        voice_bucket=_env("VOICE_BUCKET", DEFAULT_VOICE_BUCKET),
        document_bucket=_env("DOCUMENT_BUCKET", DEFAULT_DOCUMENT_BUCKET),
        gcs_project=_env("GCS_PROJECT") or None,
        gcs_signed_url_seconds=int(_env("GCS_SIGNED_URL_SECONDS", "0")),
        local_storage_dir=_env("LOCAL_STORAGE_DIR", "media"),
        local_storage_base_url=_env("LOCAL_STORAGE_BASE_URL", "http://localhost:8000/media"),
        repo_backend=repo_backend,
        database_url=database_url,
        synthesis_url=_env("SYNTHESIS_URL"),
        synthesis_timeout_seconds=float(_env("SYNTHESIS_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))),
        user_id=_env("STUDIO_USER_ID") or None,
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        cors_origins=origins or ("*",),
    )
