from __future__ import annotations

import asyncio

import pytest

from services.studio_hub import StudioHub


@pytest.mark.asyncio
async def test_studio_hub_replays_recent_history_for_late_subscriber() -> None:
    hub = StudioHub()

    await hub.publish({"type": "notice", "level": "info", "code": "voice_staged", "message": "one"})
    await hub.publish({"type": "state", "state": "submitting"})

    q = await hub.subscribe()
    first = await asyncio.wait_for(q.get(), timeout=0.5)
    second = await asyncio.wait_for(q.get(), timeout=0.5)

    assert first["code"] == "voice_staged"
    assert second["state"] == "submitting"

    await hub.unsubscribe(q)


@pytest.mark.asyncio
async def test_studio_hub_fans_out_to_every_subscriber() -> None:
    hub = StudioHub()
    a = await hub.subscribe()
    b = await hub.subscribe()

    await hub.publish({"type": "connectivity", "online": False})

    assert (await asyncio.wait_for(a.get(), timeout=0.5))["online"] is False
    assert (await asyncio.wait_for(b.get(), timeout=0.5))["online"] is False

    await hub.unsubscribe(a)
    await hub.publish({"type": "connectivity", "online": True})
    assert a.empty()
    assert (await asyncio.wait_for(b.get(), timeout=0.5))["online"] is True


@pytest.mark.asyncio
async def test_studio_hub_drops_oldest_for_slow_subscriber() -> None:
    hub = StudioHub(history_size=1)
    q = await hub.subscribe()
    for i in range(40):
        await hub.publish({"type": "notice", "level": "info", "code": "n", "message": str(i)})

    assert q.qsize() == 32
    assert q.get_nowait()["message"] == "8"
    assert hub.recent() == [{"type": "notice", "level": "info", "code": "n", "message": "39"}]


@pytest.mark.asyncio
async def test_notice_from_sync_code_is_delivered() -> None:
    hub = StudioHub()
    q = await hub.subscribe()

    hub.notice("error", "no_connectivity", "You are offline")

    payload = await asyncio.wait_for(q.get(), timeout=0.5)
    assert payload == {"type": "notice", "level": "error", "code": "no_connectivity", "message": "You are offline"}


def test_publish_nowait_without_loop_keeps_history() -> None:
    hub = StudioHub()
    hub.publish_nowait({"type": "connectivity", "online": False})
    assert hub.recent() == [{"type": "connectivity", "online": False}]


@pytest.mark.asyncio
async def test_current_snapshot_is_queued_after_history() -> None:
    hub = StudioHub()
    await hub.publish({"type": "state", "state": "submitting"})
    await hub.publish({"type": "notice", "level": "success", "code": "generation_completed", "message": "done"})

    q = await hub.subscribe(current={"type": "state", "state": "completed"})
    received = [q.get_nowait() for _ in range(q.qsize())]

    assert [p.get("state", p.get("code")) for p in received] == ["submitting", "generation_completed", "completed"]
    await hub.unsubscribe(q)
