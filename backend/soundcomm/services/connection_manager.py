# backend/soundcomm/services/connection_manager.py

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from soundcomm.services.session import ConnectionSession

logger = logging.getLogger(__name__)


class NotConnectedError(RuntimeError):
    """Raised when a room operation targets a connection that is already gone."""


class Connection:
    """A live WebSocket plus the session state the relay keeps for it."""

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None) -> None:
        self.id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        self.session = ConnectionSession(connection_id=self.id)

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, room={self.session.current_room!r})"

    async def send(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": data})


# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Manages WebSocket connections and their room broadcast groups.

    Data Structures:
        connections: Maps connection id -> Connection for every open socket

        rooms: Maps room_id -> {connection id: Connection} of current members,
               in join order (broadcasts go out in that order)
               Example: {"main": {"3f2a...": conn1, "9bc1...": conn2}}

        connection_rooms: Maps connection id -> room_id it is subscribed to

    A connection is subscribed to at most one room at a time. Room level
    state lives in RoomStore; this class only knows who is listening where.
    """

    def __init__(self) -> None:
        self.connections: Dict[str, Connection] = {}
        self.rooms: Dict[str, Dict[str, Connection]] = {}
        self.connection_rooms: Dict[str, str] = {}

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    async def connect(self, websocket: WebSocket) -> Connection:
        """
        Accept a new WebSocket connection.

        The connection starts outside any room; it must send join-room to
        receive room broadcasts.
        """
        await websocket.accept()
        connection = Connection(websocket)
        self.connections[connection.id] = connection
        logger.info("✓ Connection %s opened. Total: %d", connection.id, len(self.connections))
        return connection

    def disconnect(self, connection: Connection) -> Optional[str]:
        """
        Forget a connection and drop its room membership.

        Returns:
            The room it was subscribed to, if any. Safe to call twice.
        """
        room_id = self._remove_from_room(connection)
        if self.connections.pop(connection.id, None) is not None:
            logger.info("✗ Connection %s closed. Total: %d", connection.id, len(self.connections))
        return room_id

    def join_room(self, connection: Connection, room_id: str) -> None:
        """
        Subscribe a connection to a room's broadcasts, leaving any other room.

        Raises:
            NotConnectedError: the connection was already disconnected
        """
        if connection.id not in self.connections:
            raise NotConnectedError(f"connection {connection.id} is not connected")

        current = self.connection_rooms.get(connection.id)
        if current == room_id:
            return
        if current is not None:
            self.leave_room(connection, current)

        self.rooms.setdefault(room_id, {})[connection.id] = connection
        self.connection_rooms[connection.id] = room_id
        logger.info("→ %s joined '%s' (%d members)", connection.id, room_id, self.member_count(room_id))

    def leave_room(self, connection: Connection, room_id: str) -> None:
        """Unsubscribe a connection from *room_id*; a no-op if it is not a member."""
        if self.connection_rooms.get(connection.id) != room_id:
            return
        self._remove_from_room(connection)
        logger.info("← %s left '%s' (%d members)", connection.id, room_id, self.member_count(room_id))

    def _remove_from_room(self, connection: Connection) -> Optional[str]:
        room_id = self.connection_rooms.pop(connection.id, None)
        if room_id is None:
            return None
        members = self.rooms.get(room_id)
        if members is not None:
            members.pop(connection.id, None)
            # Clean up empty groups; the room's level state stays in RoomStore
            if not members:
                del self.rooms[room_id]
        return room_id

    def members(self, room_id: str) -> List[Connection]:
        return list(self.rooms.get(room_id, {}).values())

    def member_count(self, room_id: str) -> int:
        return len(self.rooms.get(room_id, {}))

    async def send(self, connection: Connection, event: str, data: Any) -> bool:
        """
        Send one event to a single connection.

        Returns:
            False if the send failed; the connection is then cleaned up.
        """
        try:
            await connection.send(event, data)
            return True
        except Exception as e:
            logger.error("Send error to %s: %s", connection.id, e)
            self.disconnect(connection)
            return False

    async def broadcast_to_room(self, room_id: str, event: str, data: Any) -> None:
        """
        Send one event to every connection subscribed to a room.

        Members receive it in join order, the sender included. If a send
        fails, that connection is dropped and the rest still get the event.
        """
        connections = self.members(room_id)  # Copy to avoid modification during iteration
        if not connections:
            logger.debug("[routing] Skipped %s: room=%s has 0 subscribers", event, room_id)
            return

        logger.debug("📨 Broadcasting %s to room %s: %d clients", event, room_id, len(connections))
        for connection in connections:
            await self.send(connection, event, data)

    def rooms_info(self) -> Dict[str, int]:
        """Member count per room with at least one subscriber."""
        return {room_id: len(members) for room_id, members in self.rooms.items()}
