# backend/soundcomm/api/websocket.py

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from soundcomm.api.dependencies import get_ws_state
from soundcomm.core.state import RelayState
from soundcomm.models.models import Envelope

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, state: RelayState = Depends(get_ws_state)):
    """
    WebSocket endpoint carrying the relay protocol.

    Every frame, in both directions, is a JSON envelope:
        {"event": "<name>", "data": {...}}

    Client -> Server:
        {"event": "join-room", "data": {"room": "main", "role": "B"}}
        {"event": "b:adjust", "data": {"room": "main", "instrumentKey": "guitar", "delta": 1}}
        ... (see RelayHandler for the full list)

    Server -> Client:
        {"event": "state:levels", "data": {"keyboard": 5, ...}}
        {"event": "log:append", "data": {"id": "...", "at": "19:30", "from": "B", "text": "...", "senderId": "..."}}

    Lifecycle:
    ==========
    1. Connection accepted, not in any room
    2. Client sends join-room; receives the level snapshot and a join notice
    3. Client receives every broadcast for its room until it joins another
    4. On disconnect, membership is dropped and the room is told

    Error Handling:
        The protocol has no error event. Binary frames and frames that are
        not valid JSON envelopes are logged and ignored; the connection stays
        open. Any other transport fault drops the session and closes the
        socket with 1011.
    """
    connection = await state.connection_manager.connect(websocket)
    relay = state.relay

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            data = message.get("text")
            if data is None:
                logger.warning("Ignoring binary frame from %s", connection.id)
                continue

            try:
                envelope = Envelope.model_validate(json.loads(data))
            except (ValueError, RecursionError, ValidationError):
                # ValueError covers JSONDecodeError and the int digit limit
                logger.warning("Ignoring malformed frame from %s: %.200s", connection.id, data)
                continue

            logger.debug("Websocket input from %s: %s %s", connection.id, envelope.event, envelope.data)
            await relay.handle(connection, envelope.event, envelope.data)

    except WebSocketDisconnect:
        await relay.handle_disconnect(connection)
    except Exception as e:
        logger.error("WebSocket error on %s: %s", connection.id, e)
        await relay.handle_disconnect(connection)
        await _close_quietly(websocket, connection.id)


async def _close_quietly(websocket: WebSocket, connection_id: str) -> None:
    """Close after a transport fault so the client is not left waiting."""
    try:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    except RuntimeError as e:
        # Already closed by the peer or the server
        logger.debug("Close of %s skipped: %s", connection_id, e)
