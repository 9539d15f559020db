import asyncio
import inspect

import httpx
import pytest

from main import app
from routers import sessions

ALICE = {"X-User-Id": "alice"}
ADMIN = {"X-User-Id": "root", "X-User-Role": "admin"}


def test_session_routes_run_on_the_event_loop():
    for route in sessions.router.routes:
        assert inspect.iscoroutinefunction(route.endpoint), route.path
    assert inspect.iscoroutinefunction(sessions.controlled_session)
    assert inspect.iscoroutinefunction(sessions.persist_design)


@pytest.mark.anyio
async def test_concurrent_events_apply_one_at_a_time(db):
    sessions._sessions.clear()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        chair = {"id": "chair", "name": "Chair", "category": "chair", "modelUrl": "/uploads/chair.glb"}
        assert (await client.post("/api/furniture/", json=chair, headers=ADMIN)).status_code == 201
        design = (await client.post("/api/designs/", json={}, headers=ALICE)).json()
        state = (await client.post("/api/sessions/", json={"designId": design["id"]}, headers=ALICE)).json()
        path = f"/api/sessions/{state['id']}"

        state = (await client.post(f"{path}/furniture", json={"modelId": "chair"}, headers=ALICE)).json()
        await client.put(f"{path}/selection", json={"instanceId": state["furniture"][0]["instanceId"]},
                         headers=ALICE)

        nudge = {"type": "key", "key": "ArrowRight"}
        responses = await asyncio.gather(*(
            client.post(f"{path}/events", json=nudge, headers=ALICE) for _ in range(8)
        ))
        assert all(r.status_code == 200 for r in responses)

        state = (await client.get(path, headers=ALICE)).json()
    assert state["furniture"][0]["position"]["x"] == 4.0
    # add + select + eight nudges
    assert state["revision"] == 10
    sessions._sessions.clear()
