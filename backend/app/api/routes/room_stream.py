"""Room Stream — SSE feed of full room snapshots for clients that do not poll.

Invariants:
    - Every event is a complete, self-consistent snapshot: room, users, sanitized
      votes, canvas nodes and the server clock reading
    - An event is only sent when the snapshot differs from the previous one
    - Each poll opens its own DB session; nothing is held open between polls
    - The stream ends with a `room_deleted` event once the room disappears

Design Decisions:
    - Server-side polling of the same read queries clients would poll: no change feed
      to keep consistent, and sanitization stays on the one read path
    - Sessions come from db_manager, not the request dependency: the generator outlives
      the request handler
"""

import asyncio
import json
import logging
from typing import AsyncGenerator
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

import app.infrastructure.database as database
from app.api.dependencies import get_clock
from app.api.routes.rooms import build_room_snapshot
from app.config import get_settings
from app.core.errors import ResourceNotFoundError
from app.infrastructure.clock import Clock
from app.schemas.canvas import CanvasNodeResponse
from app.services.room_lifecycle import RoomLifecycle

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def _sse_line(event: dict) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


async def load_room_event(room_id: UUID, clock: Clock) -> dict | None:
    """One snapshot event, or None if the room no longer exists."""
    async with database.db_manager.session() as db:
        rooms = RoomLifecycle(db, clock)
        data = await rooms.get_room_with_related_data(room_id)
        if data is None:
            return None
        nodes = await rooms.canvas.get_canvas_nodes(room_id)
    snapshot = build_room_snapshot(data).model_dump(mode="json")
    snapshot["canvas_nodes"] = [
        CanvasNodeResponse.from_node(n).model_dump(mode="json") for n in nodes
    ]
    return {"type": "snapshot", **snapshot}


async def room_events(
    room_id: UUID,
    clock: Clock,
    interval_seconds: float,
    max_events: int | None = None,
) -> AsyncGenerator[dict, None]:
    sent = 0
    previous: dict | None = None
    while True:
        event = await load_room_event(room_id, clock)
        if event is None:
            yield {"type": "room_deleted", "room_id": str(room_id)}
            return
        if event != previous:
            previous = event
            sent += 1
            yield {**event, "server_now": clock()}
            if max_events is not None and sent >= max_events:
                return
        await asyncio.sleep(interval_seconds)


@router.get("/{room_id}/stream")
async def stream_room(
    room_id: UUID,
    max_events: int | None = Query(None, ge=1),
    clock: Clock = Depends(get_clock),
):
    """SSE: a snapshot now, then one per change. max_events bounds the stream."""
    if await load_room_event(room_id, clock) is None:
        raise ResourceNotFoundError("Room", str(room_id))
    interval = get_settings().room_stream_interval_seconds

    async def event_generator():
        try:
            async for event in room_events(room_id, clock, interval, max_events):
                yield _sse_line(event)
        except asyncio.CancelledError:
            logger.info(
                "Client disconnected from room stream",
                extra={"room_id": str(room_id)},
            )
            raise

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=SSE_HEADERS,
    )
