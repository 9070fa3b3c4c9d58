from __future__ import annotations

import asyncio
from collections import deque
from typing import Any

HISTORY_SIZE = 20


class StudioHub:
    """
    In-memory pubsub for pushing studio events to WebSocket subscribers.

    Payloads are one of:
      {"type": "notice", "level": "info"|"success"|"error", "code": str, "message": str}
      {"type": "state", ...StudioState fields}
      {"type": "connectivity", "online": bool}

    Late subscribers get the most recent events replayed first.
    """

    def __init__(self, *, history_size: int = HISTORY_SIZE) -> None:
        self._lock = asyncio.Lock()
        self._subscribers: set[asyncio.Queue[dict[str, Any]]] = set()
        self._history: deque[dict[str, Any]] = deque(maxlen=history_size)

    async def subscribe(self, *, current: dict[str, Any] | None = None) -> asyncio.Queue[dict[str, Any]]:
        """
        Queue starts with the replayed history, then ``current`` (a snapshot of
        live state) so it lands after any older state events.
        """
        q: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=32)
        async with self._lock:
            replay = list(self._history)
            if current is not None:
                replay.append(current)
            for payload in replay[-q.maxsize :]:
                q.put_nowait(payload)
            self._subscribers.add(q)
        return q

    async def unsubscribe(self, q: asyncio.Queue[dict[str, Any]]) -> None:
        async with self._lock:
            self._subscribers.discard(q)

    async def publish(self, payload: dict[str, Any]) -> None:
        async with self._lock:
            self._history.append(payload)
            subs = list(self._subscribers)
        for q in subs:
            if q.full():
                try:
                    _ = q.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                # Raced between the full-check and put; drop for this subscriber.
                pass

    def publish_nowait(self, payload: dict[str, Any]) -> None:
        """
        Fire-and-forget helper for sync contexts (connectivity listeners, guards).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: keep it for replay so the next subscriber still sees it.
            self._history.append(payload)
            return
        loop.create_task(self.publish(payload))

    def recent(self) -> list[dict[str, Any]]:
        return list(self._history)

    def notice(self, level: str, code: str, message: str) -> None:
        self.publish_nowait({"type": "notice", "level": level, "code": code, "message": message})
