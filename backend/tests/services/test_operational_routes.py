"""Maintenance, room stream and health routes."""

import json
from uuid import UUID, uuid4

from app.api.routes.room_stream import room_events


def _events(body: str) -> list[dict]:
    return [
        json.loads(line[len("data: "):])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


async def test_inactive_room_sweep_endpoint(client, clock):
    room = (await client.post("/api/v1/rooms", json={"name": "Old"})).json()
    clock.advance(seconds=6 * 24 * 3600)

    res = await client.post("/api/v1/maintenance/inactive-rooms")

    assert res.status_code == 200
    assert res.json()["inactive_days"] == 5
    assert res.json()["deleted"]["rooms_deleted"] == 1
    assert res.json()["deleted"]["canvas_nodes_deleted"] == 2
    assert (await client.get(f"/api/v1/rooms/{room['id']}")).status_code == 404


async def test_inactive_room_sweep_accepts_override(client, clock):
    await client.post("/api/v1/rooms", json={"name": "Recent"})
    clock.advance(seconds=2 * 24 * 3600)
    res = await client.post(
        "/api/v1/maintenance/inactive-rooms", params={"inactive_days": 1},
    )
    assert res.json()["deleted"]["rooms_deleted"] == 1


async def test_orphan_and_presence_endpoints(client):
    orphans = await client.post("/api/v1/maintenance/orphans")
    assert orphans.status_code == 200
    assert orphans.json()["deleted"]["votes_deleted"] == 0

    presence = await client.post("/api/v1/maintenance/presence")
    assert presence.json() == {"marked_inactive": 0, "purged": 0}


async def test_stream_first_event_is_sanitized_snapshot(client, clock):
    room = (await client.post("/api/v1/rooms", json={"name": "Live"})).json()
    user = (await client.post(
        f"/api/v1/rooms/{room['id']}/users", json={"name": "Alice"},
    )).json()
    await client.put(
        f"/api/v1/rooms/{room['id']}/votes/{user['id']}",
        json={"card_label": "13", "card_value": 13},
    )

    res = await client.get(
        f"/api/v1/rooms/{room['id']}/stream", params={"max_events": 1},
    )

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/event-stream")
    events = _events(res.text)
    assert len(events) == 1
    snapshot = events[0]
    assert snapshot["type"] == "snapshot"
    assert snapshot["room"]["id"] == room["id"]
    assert snapshot["server_now"] == clock()
    assert snapshot["votes"][0]["has_voted"] is True
    assert "card_label" not in snapshot["votes"][0]
    assert len(snapshot["canvas_nodes"]) == 2 + 1 + 9


async def test_stream_unknown_room_is_404(client):
    res = await client.get(f"/api/v1/rooms/{uuid4()}/stream")
    assert res.status_code == 404


async def test_room_events_end_when_room_is_deleted(client, clock):
    room = (await client.post("/api/v1/rooms", json={"name": "Short"})).json()
    events = room_events(UUID(room["id"]), clock, interval_seconds=0)

    first = await events.__anext__()
    assert first["type"] == "snapshot"

    await client.delete(f"/api/v1/rooms/{room['id']}")
    last = await events.__anext__()
    assert last == {"type": "room_deleted", "room_id": room["id"]}
    await events.aclose()


async def test_health_endpoints(client):
    live = await client.get("/api/v1/health/")
    assert live.status_code == 200
    assert live.json()["service"] == "planning-canvas-api"

    ready = await client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["database"] == "healthy"
