# backend/soundcomm/services/relay.py

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from soundcomm.models.models import (
    InboundCommand,
    JoinRoom,
    LogEntry,
    OperatorAck,
    OperatorAdjust,
    RequesterAction,
    RequestLevels,
    ResetLevels,
    parse_command,
)
from soundcomm.services.connection_manager import Connection, ConnectionManager
from soundcomm.services.instruments import find_label, label_for
from soundcomm.services.room_store import RoomStore
from soundcomm.services.session import Role

logger = logging.getLogger(__name__)

# Outbound event names
LEVELS_EVENT = "state:levels"
LOG_EVENT = "log:append"

TIME_FORMAT = "%H:%M"


def _new_id() -> str:
    return uuid.uuid4().hex


# ============================================================================
# RELAY PROTOCOL HANDLER
# ============================================================================

class RelayHandler:
    """
    Interprets client events, updates room levels and fans results out.

    Protocol:
    =========

    Client -> Server events:
    ------------------------
    join-room            {room, role}
    state:requestLevels  {room}
    a:request            {room, instrumentKey, action, text}
    b:adjust             {room, instrumentKey, delta, text}
    b:ack                {room, instrumentKey, text}
    reset-levels         {room}

    Server -> Client events:
    ------------------------
    state:levels  {<instrumentKey>: level, ...}   full snapshot, never a delta
    log:append    {id, at, from, text, senderId}

    Room resolution for every event: the payload's room, else the room the
    connection has joined, else the default room.

    Ordering:
        Events touching the same room are handled one at a time under that
        room's lock, so every member sees broadcasts in processing order.
    """

    def __init__(
        self,
        store: RoomStore,
        connections: ConnectionManager,
        default_room: str = "main",
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        announce_departures: bool = True,
    ) -> None:
        self.store = store
        self.connections = connections
        self.default_room = default_room
        self.announce_departures = announce_departures
        self._clock = clock or datetime.now
        self._new_id = id_factory or _new_id
        self._room_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.events_handled = 0

        self._handlers: Dict[type, Callable[[Connection, Any], Any]] = {
            JoinRoom: self._join,
            RequestLevels: self._request_levels,
            RequesterAction: self._requester_action,
            OperatorAdjust: self._operator_adjust,
            OperatorAck: self._operator_ack,
            ResetLevels: self._reset_levels,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle(self, connection: Connection, event: Any, payload: Any) -> None:
        """
        Handle one inbound event to completion.

        Unknown events are ignored. Any fault raised while handling is logged
        and ends this event only; the connection and other sessions carry on.
        """
        try:
            command = parse_command(event, payload)
            if command is None:
                logger.debug("Ignoring unknown event %r from %s", event, connection.id)
                return
            await self.dispatch(connection, command)
            self.events_handled += 1
        except Exception:
            logger.exception("Error handling %r from %s", event, connection.id)

    async def dispatch(self, connection: Connection, command: InboundCommand) -> None:
        handler = self._handlers[type(command)]
        await handler(connection, command)

    async def handle_disconnect(self, connection: Connection) -> None:
        """
        Drop a closed connection's room membership.

        With departure announcements on, the remaining members get a
        "Left room" log entry.
        """
        room = connection.session.clear()
        self.connections.disconnect(connection)
        if room is None or not self.announce_departures:
            return
        async with self._room_locks[room]:
            await self._append_log(room, connection.session.role, f"Left room {room}", connection)

    def resolve_room(self, connection: Connection, room: Optional[str]) -> str:
        return room or connection.session.current_room or self.default_room

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def _join(self, connection: Connection, command: JoinRoom) -> None:
        room = self.resolve_room(connection, command.room)
        session = connection.session
        try:
            previous = session.enter(room, command.role)
            if previous is not None:
                self.connections.leave_room(connection, previous)
            self.connections.join_room(connection, room)
            state = self.store.ensure_room(room)
        except Exception:
            # Leave the connection unjoined; nothing goes back to the client
            logger.exception("Join of room %s failed for %s", room, connection.id)
            left = session.clear()
            if left is not None:
                self.connections.leave_room(connection, left)
            return

        async with self._room_locks[room]:
            await self.connections.send(connection, LEVELS_EVENT, state.snapshot())
            await self._append_log(room, session.role, f"Joined room {room}", connection)

    async def _request_levels(self, connection: Connection, command: RequestLevels) -> None:
        room = self.resolve_room(connection, command.room)
        async with self._room_locks[room]:
            state = self.store.ensure_room(room)
            await self.connections.send(connection, LEVELS_EVENT, state.snapshot())

    async def _requester_action(self, connection: Connection, command: RequesterAction) -> None:
        room = self.resolve_room(connection, command.room)
        text = command.text or f"{label_for(command.instrument_key)} – {command.action}"
        async with self._room_locks[room]:
            await self._append_log(room, Role.REQUESTER, text, connection)

    async def _operator_adjust(self, connection: Connection, command: OperatorAdjust) -> None:
        room = self.resolve_room(connection, command.room)
        async with self._room_locks[room]:
            prev, new = self.store.adjust_level(room, command.instrument_key, command.delta)
            logger.info(
                "%s: %s %d -> %d (delta %d) by %s",
                room, command.instrument_key, prev, new, command.delta, connection.id,
            )
            await self.connections.broadcast_to_room(
                room, LEVELS_EVENT, self.store.ensure_room(room).snapshot()
            )

            if command.delta > 0:
                verb, code = "Increased", "IC"
            else:
                verb, code = "Lowered", "LV"
            text = command.text or f"{label_for(command.instrument_key)} – {verb} to {new} ({code})"
            await self._append_log(room, Role.OPERATOR, text, connection)

    async def _operator_ack(self, connection: Connection, command: OperatorAck) -> None:
        room = self.resolve_room(connection, command.room)
        label = find_label(command.instrument_key)
        text = command.text or (f"{label} – Received ✅" if label else "RECEIVED ✅")
        async with self._room_locks[room]:
            await self._append_log(room, Role.OPERATOR, text, connection)

    async def _reset_levels(self, connection: Connection, command: ResetLevels) -> None:
        room = self.resolve_room(connection, command.room)
        async with self._room_locks[room]:
            state = self.store.reset_room(room)
            await self.connections.broadcast_to_room(room, LEVELS_EVENT, state.snapshot())
            await self._append_log(room, Role.OPERATOR, "Levels reset", connection)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def make_log_entry(self, role: Role, text: str, connection: Connection) -> LogEntry:
        return LogEntry(
            id=self._new_id(),
            at=self._clock().strftime(TIME_FORMAT),
            from_=role,
            text=text,
            sender_id=connection.id,
        )

    async def _append_log(self, room: str, role: Role, text: str, connection: Connection) -> None:
        entry = self.make_log_entry(role, text, connection)
        await self.connections.broadcast_to_room(room, LOG_EVENT, entry.to_wire())
