from __future__ import annotations

import json

import httpx
import pytest

from services.errors import MalformedResponse, TransportError
from services.synthesis_client import SynthesisClient

URL = "https://workflow.test/generate"


def _client(handler) -> SynthesisClient:
    return SynthesisClient(URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.anyio
async def test_posts_expected_body_and_returns_audio_url() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"audioUrl": " https://cdn.test/out.wav "})

    audio_url = await _client(handler).synthesize(
        voice_url="https://cdn.test/voice.wav", text="Hello world", session_id=7
    )

    assert audio_url == "https://cdn.test/out.wav"
    assert seen == [{"voiceUrl": "https://cdn.test/voice.wav", "text": "Hello world", "sessionId": 7}]


@pytest.mark.anyio
async def test_document_url_is_sent_when_present() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"audioUrl": "https://cdn.test/out.wav"})

    await _client(handler).synthesize(
        voice_url="v", text="", session_id=1, document_url="https://cdn.test/story.pdf"
    )
    assert seen[0]["documentUrl"] == "https://cdn.test/story.pdf"


@pytest.mark.anyio
async def test_non_2xx_is_transport_error() -> None:
    client = _client(lambda request: httpx.Response(500, text="upstream exploded"))

    with pytest.raises(TransportError) as exc_info:
        await client.synthesize(voice_url="v", text="t", session_id=1)
    assert exc_info.value.status_code == 500


@pytest.mark.anyio
async def test_network_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc_info:
        await _client(handler).synthesize(voice_url="v", text="t", session_id=1)
    assert exc_info.value.status_code is None


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>ok</html>"),
        httpx.Response(200, json={}),
        httpx.Response(200, json={"audioUrl": "   "}),
        httpx.Response(200, json={"audioUrl": 42}),
        httpx.Response(200, json=["https://cdn.test/out.wav"]),
    ],
)
async def test_unusable_body_is_malformed(response: httpx.Response) -> None:
    with pytest.raises(MalformedResponse):
        await _client(lambda request: response).synthesize(voice_url="v", text="t", session_id=1)


@pytest.mark.anyio
async def test_missing_url_configuration() -> None:
    with pytest.raises(TransportError, match="not configured"):
        await SynthesisClient("").synthesize(voice_url="v", text="t", session_id=1)
