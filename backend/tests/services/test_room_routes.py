"""Room, user and vote routes — status mapping and the sanitized room read model.

Invariants:
    - Creation endpoints answer 201, unknown ids 404, illegal states 409
    - Request validation failures answer 400 with VALIDATION_ERROR
    - GET /rooms/{id} never exposes card fields before reveal
"""

from uuid import uuid4


async def _create_room(client, name: str = "Sprint 1") -> dict:
    res = await client.post("/api/v1/rooms", json={"name": name})
    assert res.status_code == 201
    return res.json()


async def _join(client, room_id: str, name: str, is_spectator: bool = False) -> dict:
    res = await client.post(
        f"/api/v1/rooms/{room_id}/users",
        json={"name": name, "is_spectator": is_spectator},
    )
    assert res.status_code == 201
    return res.json()


async def test_create_room_returns_201_with_defaults(client, clock):
    room = await _create_room(client, "  Planning  ")
    assert room["name"] == "Planning"
    assert room["is_game_over"] is False
    assert room["voting_categorized"] is True
    assert room["room_type"] == "canvas"
    assert room["created_at"] == clock()


async def test_create_room_rejects_blank_name(client):
    res = await client.post("/api/v1/rooms", json={"name": "   "})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_room_returns_404(client):
    res = await client.get(f"/api/v1/rooms/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_votes_hidden_until_reveal(client):
    room = await _create_room(client)
    alice = await _join(client, room["id"], "Alice")
    res = await client.put(
        f"/api/v1/rooms/{room['id']}/votes/{alice['id']}",
        json={"card_label": "8", "card_value": 8},
    )
    assert res.status_code == 200
    assert "card_label" not in res.json()

    hidden = (await client.get(f"/api/v1/rooms/{room['id']}")).json()
    assert hidden["votes"] == [{
        "id": res.json()["id"],
        "room_id": room["id"],
        "user_id": alice["id"],
        "has_voted": True,
    }]

    await client.post(f"/api/v1/rooms/{room['id']}/reveal")
    shown = (await client.get(f"/api/v1/rooms/{room['id']}")).json()
    assert shown["room"]["is_game_over"] is True
    assert shown["votes"][0]["card_label"] == "8"
    assert shown["votes"][0]["card_value"] == 8


async def test_reveal_creates_results_node(client):
    room = await _create_room(client)
    await client.post(f"/api/v1/rooms/{room['id']}/reveal")
    nodes = (await client.get(f"/api/v1/rooms/{room['id']}/canvas/nodes")).json()
    assert "results" in {n["id"] for n in nodes}


async def test_vote_from_non_member_is_404(client):
    room = await _create_room(client)
    res = await client.put(
        f"/api/v1/rooms/{room['id']}/votes/{uuid4()}",
        json={"card_label": "5", "card_value": 5},
    )
    assert res.status_code == 404


async def test_analysis_before_reveal_is_409(client):
    room = await _create_room(client)
    res = await client.get(f"/api/v1/rooms/{room['id']}/analysis")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "INVALID_STATE"


async def test_round_through_the_api(client):
    room = await _create_room(client)
    alice = await _join(client, room["id"], "Alice")
    bob = await _join(client, room["id"], "Bob")
    await _join(client, room["id"], "Carol", is_spectator=True)
    base = f"/api/v1/rooms/{room['id']}"

    await client.put(f"{base}/votes/{alice['id']}", json={"card_label": "5", "card_value": 5})
    assert (await client.get(f"{base}/votes/complete")).json()["all_votes_in"] is False
    await client.put(f"{base}/votes/{bob['id']}", json={"card_label": "8", "card_value": 8})
    assert (await client.get(f"{base}/votes/complete")).json()["all_votes_in"] is True

    await client.post(f"{base}/reveal")
    analysis = (await client.get(f"{base}/analysis")).json()
    assert analysis["stats"]["average"] == 6.5
    assert analysis["stats"]["median"] == 6.5
    assert analysis["agreement_quality"]["consensus_strength"] == 50
    assert analysis["agreement_quality"]["agreement_level"] == "low"

    reset = (await client.post(f"{base}/reset")).json()
    assert reset["votes_deleted"] == 2
    snapshot = (await client.get(base)).json()
    assert snapshot["room"]["is_game_over"] is False
    assert snapshot["votes"] == []


async def test_withdraw_vote(client):
    room = await _create_room(client)
    alice = await _join(client, room["id"], "Alice")
    url = f"/api/v1/rooms/{room['id']}/votes/{alice['id']}"
    assert (await client.delete(url)).json()["removed"] is False
    await client.put(url, json={"card_label": "?"})
    assert (await client.delete(url)).json()["removed"] is True


async def test_activity_endpoint(client, clock):
    room = await _create_room(client)
    clock.advance(seconds=5)
    res = await client.post(f"/api/v1/rooms/{room['id']}/activity")
    assert res.json()["updated"] is True
    snapshot = (await client.get(f"/api/v1/rooms/{room['id']}")).json()
    assert snapshot["room"]["last_activity_at"] == clock()

    assert (await client.post(f"/api/v1/rooms/{uuid4()}/activity")).status_code == 404


async def test_delete_room_cascades(client):
    room = await _create_room(client)
    await _join(client, room["id"], "Alice")

    res = await client.delete(f"/api/v1/rooms/{room['id']}")

    assert res.status_code == 200
    deleted = res.json()["deleted"]
    assert deleted["rooms"] == 1
    assert deleted["users"] == 1
    assert deleted["canvas_nodes"] == 2 + 1 + 9
    assert (await client.get(f"/api/v1/rooms/{room['id']}")).status_code == 404
    assert (await client.delete(f"/api/v1/rooms/{room['id']}")).status_code == 404


async def test_users_listed_in_join_order(client, clock):
    room = await _create_room(client)
    await _join(client, room["id"], "Zed")
    clock.advance(ms=1)
    await _join(client, room["id"], "Amy")
    users = (await client.get(f"/api/v1/rooms/{room['id']}")).json()["users"]
    assert [u["name"] for u in users] == ["Zed", "Amy"]


async def test_join_unknown_room_is_404(client):
    res = await client.post(f"/api/v1/rooms/{uuid4()}/users", json={"name": "Alice"})
    assert res.status_code == 404


async def test_name_taken_is_case_insensitive(client):
    room = await _create_room(client)
    await _join(client, room["id"], "Alice")
    url = f"/api/v1/rooms/{room['id']}/users/name-taken"
    assert (await client.get(url, params={"name": "alice"})).json()["taken"] is True
    assert (await client.get(url, params={"name": "Bob"})).json()["taken"] is False


async def test_edit_user_to_spectator_drops_cards(client):
    room = await _create_room(client)
    alice = await _join(client, room["id"], "Alice")

    res = await client.patch(
        f"/api/v1/users/{alice['id']}", json={"is_spectator": True, "name": "Al"},
    )

    assert res.status_code == 200
    assert res.json()["is_spectator"] is True
    assert res.json()["name"] == "Al"
    nodes = (await client.get(f"/api/v1/rooms/{room['id']}/canvas/nodes")).json()
    assert not any(n["type"] == "votingCard" for n in nodes)


async def test_leave_room_returns_counts(client):
    room = await _create_room(client)
    alice = await _join(client, room["id"], "Alice")
    await client.put(
        f"/api/v1/rooms/{room['id']}/votes/{alice['id']}", json={"card_label": "3"},
    )

    res = await client.delete(f"/api/v1/users/{alice['id']}")

    assert res.status_code == 200
    assert res.json()["deleted"] == {
        "votes": 1, "canvas_nodes": 10, "presence": 0, "users": 1,
    }
    assert (await client.delete(f"/api/v1/users/{alice['id']}")).status_code == 404
