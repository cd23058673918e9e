# backend/soundcomm/api/routes/health.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from soundcomm.api.dependencies import get_state
from soundcomm.core.state import RelayState

router = APIRouter()

@router.get("/health")
async def health(state: RelayState = Depends(get_state)):
    """
    Health check endpoint.

    Returns current system status, connection counts and room counts.

    Returns:
        dict: Status, connection count, rooms with level state, rooms with
        members, events handled and uptime
    """
    uptime_seconds = (datetime.now(timezone.utc) - state.app_start_time).total_seconds()
    return {
        "status": "healthy",
        "connections": state.connection_manager.connection_count,
        "rooms": len(state.room_store),
        "active_rooms_with_members": len(state.connection_manager.rooms),
        "events_handled": state.relay.events_handled,
        "uptime_seconds": round(uptime_seconds, 1),
    }
