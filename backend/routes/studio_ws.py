from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter(tags=["studio"])
logger = logging.getLogger(__name__)


@router.websocket("/ws/studio/events")
async def ws_studio_events(websocket: WebSocket) -> None:
    """
    Stream studio events to the frontend.

    Payload schema is one of:
      {"type": "state", "state": str, "session_id": int | None, ...}
      {"type": "notice", "level": str, "code": str, "message": str}
      {"type": "connectivity", "online": bool}
    """
    studio = websocket.app.state.studio
    hub = studio.hub
    await websocket.accept()
    q = await hub.subscribe(current={"type": "state", **studio.orchestrator.state().as_payload()})
    logger.info("[studio_ws] Client subscribed")
    try:
        while True:
            payload: dict[str, Any] = await q.get()
            logger.debug("[studio_ws] Sending %s event", payload.get("type"))
            await websocket.send_json(payload)
    except WebSocketDisconnect:
        return
    finally:
        await hub.unsubscribe(q)
        logger.info("[studio_ws] Client unsubscribed")
