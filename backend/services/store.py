"""In-memory sessions table for development and tests. Keyed by session ID."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Any


class MemorySessionTable:
    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        row = {
            "id": next(self._ids),
            "voice_path": None,
            "pdf_path": None,
            "story_text": "",
            "status": None,
            "generated_audio_path": None,
            "user_id": None,
            "created_at": datetime.now(timezone.utc),
        }
        row.update(values)
        self.rows[row["id"]] = row
        return dict(row)

    def update(self, session_id: int, values: dict[str, Any]) -> bool:
        row = self.rows.get(session_id)
        if row is None:
            return False
        row.update(values)
        return True

    def get(self, session_id: int) -> dict[str, Any] | None:
        row = self.rows.get(session_id)
        return dict(row) if row is not None else None

    def clear(self) -> None:
        self.rows.clear()


sessions = MemorySessionTable()
