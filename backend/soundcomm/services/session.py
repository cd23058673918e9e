# backend/soundcomm/services/session.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    """The two connection roles, carried on the wire as "A" and "B"."""

    REQUESTER = "A"
    OPERATOR = "B"

    @classmethod
    def normalize(cls, value: Any) -> "Role":
        """Anything other than the operator tag is a requester."""
        if value is cls.OPERATOR or value == cls.OPERATOR.value:
            return cls.OPERATOR
        return cls.REQUESTER


@dataclass
class ConnectionSession:
    """
    Per-connection state layered over the transport connection.

    Starts unjoined with the requester role. Only the connection's own
    join-room event moves it between rooms; it goes away with the connection.
    """

    connection_id: str
    current_room: Optional[str] = None
    role: Role = Role.REQUESTER

    @property
    def is_joined(self) -> bool:
        return self.current_room is not None

    def enter(self, room: str, role: Any) -> Optional[str]:
        """
        Record membership of *room* under *role*.

        Returns:
            The room the connection was in before, if it was a different one
            (the caller must leave that room's broadcast group).
        """
        previous = self.current_room
        self.current_room = room
        self.role = Role.normalize(role)
        return previous if previous is not None and previous != room else None

    def clear(self) -> Optional[str]:
        """Forget the current room and return it."""
        previous, self.current_room = self.current_room, None
        return previous
