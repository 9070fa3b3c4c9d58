"""HTTP client for the external voice synthesis workflow."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from services.errors import MalformedResponse, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class SynthesisClient:
    """
    One POST per call, never retried here::

        request  {"voiceUrl", "text", "documentUrl"?, "sessionId"}
        response {"audioUrl"}
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    async def synthesize(
        self,
        *,
        voice_url: str,
        text: str,
        session_id: int,
        document_url: str | None = None,
    ) -> str:
        """
        Return the generated audio URL.

        :raises TransportError: network failure or non-2xx status
        :raises MalformedResponse: body is not JSON or has no usable audioUrl
        """
        if not self._url:
            raise TransportError("Synthesis workflow URL is not configured")
        payload: dict[str, Any] = {"voiceUrl": voice_url, "text": text, "sessionId": session_id}
        if document_url:
            payload["documentUrl"] = document_url

        logger.info("[synthesis] POST %s session=%s text_chars=%d", self._url, session_id, len(text))
        try:
            if self._client is not None:
                response = await self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("[synthesis] Request failed session=%s: %s", session_id, exc)
            raise TransportError(f"Synthesis request failed: {type(exc).__name__}") from exc

        if not response.is_success:
            logger.warning("[synthesis] HTTP %d for session=%s", response.status_code, session_id)
            raise TransportError(
                f"Synthesis service returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponse("Synthesis response was not JSON") from exc
        audio_url = body.get("audioUrl") if isinstance(body, dict) else None
        if not isinstance(audio_url, str) or not audio_url.strip():
            raise MalformedResponse("Synthesis response did not include an audio URL")
        logger.info("[synthesis] Session %s produced %s", session_id, audio_url)
        return audio_url.strip()
