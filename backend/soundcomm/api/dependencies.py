# backend/soundcomm/api/dependencies.py

from fastapi import Request, WebSocket

from soundcomm.core.state import RelayState


def get_state(request: Request) -> RelayState:
    return request.app.state.relay


def get_ws_state(websocket: WebSocket) -> RelayState:
    return websocket.app.state.relay
