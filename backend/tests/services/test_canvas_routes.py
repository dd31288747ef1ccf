"""Canvas and timer routes — node sync, locking, story, viewport, presence, timers."""

from uuid import uuid4


async def _room_with_player(client) -> tuple[str, str]:
    room = (await client.post("/api/v1/rooms", json={"name": "Canvas"})).json()
    user = (await client.post(
        f"/api/v1/rooms/{room['id']}/users", json={"name": "Alice"},
    )).json()
    return room["id"], user["id"]


async def test_nodes_listing_shape(client):
    room_id, user_id = await _room_with_player(client)
    nodes = (await client.get(f"/api/v1/rooms/{room_id}/canvas/nodes")).json()

    by_id = {n["id"]: n for n in nodes}
    assert len(nodes) == 2 + 1 + 9
    assert by_id["timer"]["position"] == {"x": -500, "y": -250}
    assert by_id[f"player-{user_id}"]["data"] == {"user_id": user_id}
    assert by_id[f"card-{user_id}-4"]["data"]["card"] == {"value": "5"}


async def test_initialize_is_idempotent(client):
    room_id, _ = await _room_with_player(client)
    res = await client.post(f"/api/v1/rooms/{room_id}/canvas/nodes/initialize")
    assert res.status_code == 200
    assert res.json() == []


async def test_move_then_lock(client):
    room_id, user_id = await _room_with_player(client)
    base = f"/api/v1/rooms/{room_id}/canvas/nodes/timer"

    moved = await client.patch(
        f"{base}/position", json={"position": {"x": 1, "y": 2}, "user_id": user_id},
    )
    assert moved.status_code == 200
    assert moved.json()["position"] == {"x": 1, "y": 2}
    assert moved.json()["last_updated_by"] == user_id

    locked = await client.patch(f"{base}/lock", json={"locked": True})
    assert locked.json()["is_locked"] is True

    blocked = await client.patch(
        f"{base}/position", json={"position": {"x": 9, "y": 9}, "user_id": user_id},
    )
    assert blocked.status_code == 423
    assert blocked.json()["error"]["code"] == "NODE_LOCKED"
    assert blocked.json()["error"]["context"]["node_id"] == "timer"

    nodes = (await client.get(f"/api/v1/rooms/{room_id}/canvas/nodes")).json()
    timer = next(n for n in nodes if n["id"] == "timer")
    assert timer["position"] == {"x": 1, "y": 2}


async def test_move_unknown_node_is_404(client):
    room_id, user_id = await _room_with_player(client)
    res = await client.patch(
        f"/api/v1/rooms/{room_id}/canvas/nodes/missing/position",
        json={"position": {"x": 0, "y": 0}, "user_id": user_id},
    )
    assert res.status_code == 404


async def test_story_upsert(client):
    room_id, _ = await _room_with_player(client)
    url = f"/api/v1/rooms/{room_id}/canvas/story"
    await client.put(url, json={"title": "Checkout"})
    res = await client.put(url, json={"title": "Checkout", "description": "Pay"})
    assert res.json()["type"] == "story"
    assert res.json()["data"]["description"] == "Pay"
    nodes = (await client.get(f"/api/v1/rooms/{room_id}/canvas/nodes")).json()
    assert [n["id"] for n in nodes].count("story") == 1


async def test_viewport_round_trip(client):
    room_id, user_id = await _room_with_player(client)
    url = f"/api/v1/rooms/{room_id}/canvas/viewports"
    await client.put(f"{url}/{user_id}", json={"x": 10, "y": 20, "zoom": 1.5})
    viewports = (await client.get(url)).json()
    assert len(viewports) == 1
    assert viewports[0]["zoom"] == 1.5


async def test_viewport_rejects_non_positive_zoom(client):
    room_id, user_id = await _room_with_player(client)
    res = await client.put(
        f"/api/v1/rooms/{room_id}/canvas/viewports/{user_id}",
        json={"x": 0, "y": 0, "zoom": 0},
    )
    assert res.status_code == 400


async def test_presence_lists_active_users_only(client):
    room_id, user_id = await _room_with_player(client)
    other = str(uuid4())
    url = f"/api/v1/rooms/{room_id}/canvas/presence"
    await client.put(f"{url}/{user_id}", json={"cursor": {"x": 3, "y": 4}})
    await client.put(f"{url}/{other}", json={"is_active": False})

    presence = (await client.get(url)).json()

    assert [p["user_id"] for p in presence] == [user_id]
    assert presence[0]["cursor"] == {"x": 3, "y": 4}


async def test_timer_flow(client, clock):
    room_id, user_id = await _room_with_player(client)
    base = f"/api/v1/rooms/{room_id}/timers/timer"

    started = await client.post(f"{base}/start", json={"user_id": user_id})
    assert started.status_code == 200
    assert started.json()["is_running"] is True

    clock.advance(seconds=75)
    state = (await client.get(base)).json()
    assert state["current_seconds"] == 75
    assert state["display_time"] == "1:15"

    paused = (await client.post(f"{base}/pause")).json()
    assert paused["elapsed_seconds"] == 75
    assert paused["is_running"] is False

    again = await client.post(f"{base}/pause")
    assert again.status_code == 409

    reset = (await client.post(f"{base}/reset")).json()
    assert reset["display_time"] == "0:00"


async def test_timer_unknown_action_is_400(client):
    room_id, _ = await _room_with_player(client)
    res = await client.post(f"/api/v1/rooms/{room_id}/timers/timer/rewind")
    assert res.status_code == 400


async def test_timer_missing_node_is_404(client):
    room_id, _ = await _room_with_player(client)
    assert (await client.get(f"/api/v1/rooms/{room_id}/timers/nope")).status_code == 404
    res = await client.post(f"/api/v1/rooms/{room_id}/timers/session-current/start")
    assert res.status_code == 404


async def test_canvas_writes_on_unknown_room_are_404(client):
    room_id, user_id = str(uuid4()), str(uuid4())
    base = f"/api/v1/rooms/{room_id}/canvas"

    responses = [
        await client.post(f"{base}/nodes/initialize"),
        await client.put(f"{base}/story", json={"title": "Checkout"}),
        await client.put(f"{base}/viewports/{user_id}", json={"x": 0, "y": 0, "zoom": 1}),
        await client.put(f"{base}/presence/{user_id}", json={"is_active": True}),
    ]

    assert [r.status_code for r in responses] == [404, 404, 404, 404]
    assert (await client.get(f"{base}/nodes")).json() == []
    assert (await client.get(f"{base}/viewports")).json() == []
    assert (await client.get(f"{base}/presence")).json() == []
