# backend/soundcomm/models/models.py
from __future__ import annotations

import math
from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from soundcomm.services.session import Role


# ============================================================================
# FIELD COERCION
# ============================================================================
# Inbound payloads are untrusted. Each coercer maps any value to a usable
# default instead of raising, so parsing never rejects a frame.

def coerce_room(value: Any) -> Optional[str]:
    if not value:
        return None
    room = str(value).strip()
    return room or None


def coerce_key(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def coerce_text(value: Any) -> Optional[str]:
    if not value:
        return None
    return value if isinstance(value, str) else str(value)


def coerce_delta(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
        return int(number) if math.isfinite(number) else 0
    return 0


class InboundCommand(BaseModel):
    """Base for parsed client events. Unknown payload fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    room: Optional[str] = None

    @field_validator("room", mode="before")
    @classmethod
    def _room(cls, value: Any) -> Optional[str]:
        return coerce_room(value)


class _InstrumentCommand(InboundCommand):
    instrument_key: Optional[str] = Field(default=None, alias="instrumentKey")
    text: Optional[str] = None

    @field_validator("instrument_key", mode="before")
    @classmethod
    def _instrument_key(cls, value: Any) -> Optional[str]:
        return coerce_key(value)

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return coerce_text(value)


class JoinRoom(InboundCommand):
    role: Role = Role.REQUESTER

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, value: Any) -> Role:
        return Role.normalize(value)


class RequestLevels(InboundCommand):
    pass


class RequesterAction(_InstrumentCommand):
    action: str = "Request"

    @field_validator("action", mode="before")
    @classmethod
    def _action(cls, value: Any) -> str:
        return coerce_text(value) or "Request"


class OperatorAdjust(_InstrumentCommand):
    delta: int = 0

    @field_validator("delta", mode="before")
    @classmethod
    def _delta(cls, value: Any) -> int:
        return coerce_delta(value)


class OperatorAck(_InstrumentCommand):
    pass


class ResetLevels(InboundCommand):
    pass


Command = Union[JoinRoom, RequestLevels, RequesterAction, OperatorAdjust, OperatorAck, ResetLevels]

# Inbound event name -> command model
EVENT_COMMANDS: Dict[str, Type[InboundCommand]] = {
    "join-room": JoinRoom,
    "state:requestLevels": RequestLevels,
    "a:request": RequesterAction,
    "b:adjust": OperatorAdjust,
    "b:ack": OperatorAck,
    "reset-levels": ResetLevels,
}


def parse_command(event: Any, payload: Any) -> Optional[Command]:
    """
    Turn an inbound event name and payload into a typed command.

    Returns None for events the relay does not know. A payload that is not
    an object is parsed as an empty one, so every field takes its default.
    """
    model = EVENT_COMMANDS.get(event) if isinstance(event, str) else None
    if model is None:
        return None
    if not isinstance(payload, dict):
        payload = {}
    return model.model_validate(payload)


# ============================================================================
# WIRE MESSAGES
# ============================================================================

class Envelope(BaseModel):
    """One WebSocket frame: {"event": "...", "data": {...}}."""

    event: str
    data: Any = None


class LogEntry(BaseModel):
    """A broadcast-only notice of something that happened in a room."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    at: str
    from_: Role = Field(alias="from")
    text: str
    sender_id: str = Field(alias="senderId")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class InstrumentInfo(BaseModel):
    key: str
    label: str
