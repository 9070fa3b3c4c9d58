"""PostgreSQL sessions table via SQLAlchemy core ``text()`` queries."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

_RETURNING = """
    id, voice_path, pdf_path, story_text, status,
    generated_audio_path, user_id, created_at
"""
_WRITABLE = ("voice_path", "pdf_path", "story_text", "status", "generated_audio_path", "user_id")


class PostgresSessionTable:
    """
    Expects a table shaped like::

        CREATE TABLE sessions (
            id BIGSERIAL PRIMARY KEY,
            voice_path TEXT,
            pdf_path TEXT,
            story_text TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL,
            generated_audio_path TEXT,
            user_id TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "PostgresSessionTable":
        return cls(create_engine(database_url, pool_pre_ping=True))

    def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        columns = [c for c in _WRITABLE if c in values]
        q = text(f"""
            INSERT INTO sessions ({", ".join(columns)})
            VALUES ({", ".join(f":{c}" for c in columns)})
            RETURNING {_RETURNING}
        """)
        with self._engine.begin() as conn:
            row = conn.execute(q, {c: values[c] for c in columns}).mappings().one()
        return dict(row)

    def update(self, session_id: int, values: dict[str, Any]) -> bool:
        # Only the keys present in the patch are written; an explicit None clears the column.
        columns = [c for c in _WRITABLE if c in values]
        if not columns:
            return True
        q = text(f"""
            UPDATE sessions
            SET {", ".join(f"{c} = :{c}" for c in columns)}
            WHERE id = :id
        """)
        params = {c: values[c] for c in columns}
        params["id"] = session_id
        with self._engine.begin() as conn:
            res = conn.execute(q, params)
        return res.rowcount > 0

    def get(self, session_id: int) -> dict[str, Any] | None:
        q = text(f"SELECT {_RETURNING} FROM sessions WHERE id = :id")
        with self._engine.connect() as conn:
            row = conn.execute(q, {"id": session_id}).mappings().one_or_none()
        return dict(row) if row is not None else None
