# backend/soundcomm/services/room_store.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from soundcomm.services.instruments import INITIAL_LEVEL, clamp, default_levels, find_label

logger = logging.getLogger(__name__)


@dataclass
class RoomState:
    """Per-room instrument levels, shared by every connection in the room."""

    levels: Dict[str, int] = field(default_factory=default_levels)

    def snapshot(self) -> Dict[str, int]:
        """Copy of the levels, safe to hand to the transport."""
        return dict(self.levels)


# ============================================================================
# IN-MEMORY ROOM STORE
# ============================================================================
class RoomStore:
    """
    Holds the level state of every room referenced since the process started.

    Rooms are created lazily on first reference (join, level request, adjust
    or reset) and are never removed. Nothing is persisted: a restart starts
    from an empty store.

    Attributes:
        rooms: Dictionary mapping room_id -> RoomState

    Usage:
        store = RoomStore()
        store.ensure_room("main").levels["guitar"]   # 5
        store.adjust_level("main", "guitar", 3)      # (5, 8)
        store.reset_room("main")

    Concurrency:
        Every read-modify-write runs under one lock, so adjusts on the same
        room serialize even when the store is shared between threads.
    """

    def __init__(self) -> None:
        self.rooms: Dict[str, RoomState] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self.rooms

    def ensure_room(self, room_id: str) -> RoomState:
        """
        Return the state of *room_id*, creating it with default levels if needed.

        Idempotent; any string is accepted as a room id.
        """
        with self._lock:
            room = self.rooms.get(room_id)
            if room is None:
                room = RoomState()
                self.rooms[room_id] = room
                logger.info("✓ Created room state: %s", room_id)
            return room

    def get_room(self, room_id: str) -> Optional[RoomState]:
        return self.rooms.get(room_id)

    def room_ids(self) -> List[str]:
        return list(self.rooms)

    def reset_room(self, room_id: str) -> RoomState:
        """
        Replace the room's levels with a fresh default mapping.

        The mapping is swapped wholesale, so snapshots handed out earlier
        keep their old values.
        """
        with self._lock:
            room = self.ensure_room(room_id)
            room.levels = default_levels()
            logger.info("↺ Reset levels in room %s", room_id)
            return room

    def adjust_level(self, room_id: str, instrument_key: Optional[str], delta: int) -> Tuple[int, int]:
        """
        Move one instrument's level by *delta*, clamped to [0, 10].

        Args:
            room_id: Room to adjust (created if missing)
            instrument_key: Instrument to adjust
            delta: Signed step; out-of-range values clamp, never wrap

        Unregistered keys get a computed result but are not written, so
        snapshots always carry exactly the registered instruments.

        Returns:
            (previous level, new level)
        """
        with self._lock:
            room = self.ensure_room(room_id)
            prev = room.levels.get(instrument_key, INITIAL_LEVEL)
            new = clamp(prev + delta)
            if find_label(instrument_key) is not None:
                room.levels[instrument_key] = new
            return prev, new
