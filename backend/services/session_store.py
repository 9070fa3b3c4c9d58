"""Thin persistence facade over the sessions table. Holds current state only."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

from models import SESSION_COLUMNS, Session, SessionStatus
from services.errors import PersistenceError

logger = logging.getLogger(__name__)


class SessionTable(Protocol):
    def insert(self, values: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, session_id: int, values: dict[str, Any]) -> bool: ...

    def get(self, session_id: int) -> dict[str, Any] | None: ...


def _to_columns(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - set(SESSION_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown session fields: {sorted(unknown)}")
    return {
        SESSION_COLUMNS[name]: value.value if isinstance(value, Enum) else value
        for name, value in fields.items()
    }


def _from_row(row: dict[str, Any]) -> Session:
    session = Session(
        id=int(row["id"]),
        voice_path=row.get("voice_path"),
        document_path=row.get("pdf_path"),
        story_text=row.get("story_text") or "",
        status=SessionStatus(row["status"]),
        generated_audio_path=row.get("generated_audio_path"),
        user_id=row.get("user_id"),
    )
    if row.get("created_at") is not None:
        session.created_at = row["created_at"]
    return session


class SessionStore:
    def __init__(self, table: SessionTable) -> None:
        self._table = table

    async def create(self, fields: dict[str, Any]) -> Session:
        """Insert a row and return it with the store-assigned id."""
        values = _to_columns(fields)
        try:
            row = await asyncio.to_thread(self._table.insert, values)
        except Exception as exc:  # noqa: BLE001
            logger.error("[session_store] create failed: %s", exc, exc_info=True)
            raise PersistenceError("Could not create the session") from exc
        session = _from_row(row)
        logger.info("[session_store] Created session id=%s status=%s", session.id, session.status.value)
        return session

    async def update(self, session_id: int, patch: dict[str, Any]) -> None:
        """Set exactly the keys in ``patch``; other columns are left as they are."""
        values = _to_columns(patch)
        try:
            found = await asyncio.to_thread(self._table.update, session_id, values)
        except Exception as exc:  # noqa: BLE001
            logger.error("[session_store] update id=%s failed: %s", session_id, exc, exc_info=True)
            raise PersistenceError(f"Could not update session {session_id}") from exc
        if not found:
            raise PersistenceError(f"Session {session_id} not found")
        logger.info("[session_store] Updated session id=%s keys=%s", session_id, sorted(values))

    async def get(self, session_id: int) -> Session | None:
        try:
            row = await asyncio.to_thread(self._table.get, session_id)
        except Exception as exc:  # noqa: BLE001
            raise PersistenceError(f"Could not read session {session_id}") from exc
        return _from_row(row) if row is not None else None
