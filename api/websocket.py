"""
WebSocket transport for the real-time layer.

Every socket gets its own ConnectionSession. Relayed events are never written
to the socket directly: they are put on a bounded per-socket queue that a
writer task drains, so publishing never waits on a slow client. When the queue
is full the event is dropped for that client.

Client frames:
    {"action": "join", "list_id": "..."}
    {"action": "leave", "list_id": "..."}
    {"action": "emit", "list_id": "...", "event": {"type": "product-added", ...}}

Only members may join a list, and emit is only accepted for joined lists.

Server frames:
    relayed event dicts, plus {"type": "connected" | "joined" | "left" | "error", ...}
"""

import asyncio
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from realtime.connection import ConnectionSession
from realtime.events import parse_event, to_wire
from shared import config
from shared.data_store import DataStore
from shared.errors import InvalidInput, ListError, NotFound

logger = logging.getLogger("websocket")

ws_router = APIRouter()


def _enqueue(queue: asyncio.Queue, frame: dict[str, Any], connection_id: str) -> None:
    try:
        queue.put_nowait(frame)
    except asyncio.QueueFull:
        logger.warning(f"Send queue full for connection {connection_id[:8]}, dropping {frame.get('type')}")


async def _drain(websocket: WebSocket, queue: asyncio.Queue, connection_id: str) -> None:
    """Writer task: send queued frames until the socket goes away."""
    while True:
        frame = await queue.get()
        try:
            await websocket.send_json(frame)
        except Exception as e:
            logger.debug(f"Stopped writing to connection {connection_id[:8]}: {e}")
            return


def _require_list_id(frame: dict[str, Any]) -> str:
    list_id = frame.get("list_id")
    if not isinstance(list_id, str) or not list_id:
        raise InvalidInput("list_id required")
    return list_id


def handle_frame(
    session: ConnectionSession, text: str, user_id: str, store: DataStore
) -> Optional[dict[str, Any]]:
    """
    Process one client frame.

    Returns:
        The acknowledgement or error frame for the sender, if any
    """
    try:
        frame = json.loads(text)
    except json.JSONDecodeError:
        return {"type": "error", "detail": "Malformed JSON"}
    if not isinstance(frame, dict):
        return {"type": "error", "detail": "Frame must be an object"}

    action = frame.get("action")
    try:
        if action == "join":
            list_id = _require_list_id(frame)
            if store.get_list(list_id) is None:
                raise NotFound(f"List not found: {list_id}")
            if not store.is_member(list_id, user_id):
                raise NotFound(f"Not a member of list: {list_id}")
            session.join(list_id)
            return {"type": "joined", "list_id": list_id}

        if action == "leave":
            list_id = _require_list_id(frame)
            session.leave(list_id)
            return {"type": "left", "list_id": list_id}

        if action == "emit":
            list_id = _require_list_id(frame)
            if list_id not in session.rooms:
                raise NotFound(f"Not joined to list: {list_id}")
            event = parse_event(frame.get("event"))
            if event is None:
                raise InvalidInput("Unrecognised event")
            session.emit(list_id, event)
            return None

        raise InvalidInput(f"Unknown action: {action!r}")
    except ListError as e:
        return {"type": "error", "detail": e.detail}


@ws_router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = None):
    """
    Real-time endpoint. Query parameters:
    - token: session token issued by POST /auth/session
    """
    state = websocket.app.state
    user_id = state.sessions.resolve(token)
    if user_id is None:
        logger.info("WebSocket connection rejected: unauthenticated")
        await websocket.close(code=1008, reason="Unauthorized")
        return

    await websocket.accept()

    queue: asyncio.Queue = asyncio.Queue(maxsize=config.WS_SEND_QUEUE_SIZE)
    session = ConnectionSession(state.registry, state.relay)
    session.on_event = lambda event: _enqueue(queue, to_wire(event), session.connection_id)
    session.connect()
    writer = asyncio.create_task(_drain(websocket, queue, session.connection_id))
    logger.info(f"WebSocket {session.connection_id[:8]} accepted for user {user_id}")

    _enqueue(queue, {"type": "connected", "connection_id": session.connection_id}, session.connection_id)
    try:
        while True:
            try:
                text = await websocket.receive_text()
            except WebSocketDisconnect:
                logger.info(f"WebSocket {session.connection_id[:8]} disconnected")
                break
            reply = handle_frame(session, text, user_id, state.store)
            if reply is not None:
                _enqueue(queue, reply, session.connection_id)
    finally:
        session.disconnect()
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass
