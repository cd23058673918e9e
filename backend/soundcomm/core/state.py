# backend/soundcomm/core/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from soundcomm.core.config import Settings, settings as default_settings
from soundcomm.services.connection_manager import ConnectionManager
from soundcomm.services.relay import RelayHandler
from soundcomm.services.room_store import RoomStore


@dataclass
class RelayState:
    """Everything one running relay shares between requests and sockets."""

    room_store: RoomStore
    connection_manager: ConnectionManager
    relay: RelayHandler
    app_start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def build_state(settings: Optional[Settings] = None) -> RelayState:
    """Create a fresh store, connection manager and relay wired together."""
    settings = settings or default_settings
    room_store = RoomStore()
    connection_manager = ConnectionManager()
    relay = RelayHandler(
        room_store,
        connection_manager,
        default_room=settings.DEFAULT_ROOM,
        announce_departures=settings.ANNOUNCE_DEPARTURES,
    )
    return RelayState(
        room_store=room_store,
        connection_manager=connection_manager,
        relay=relay,
    )
