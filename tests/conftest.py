from __future__ import annotations

import asyncio
import itertools
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from soundcomm.core.config import Settings
from soundcomm.main import create_app
from soundcomm.services.connection_manager import ConnectionManager
from soundcomm.services.relay import RelayHandler
from soundcomm.services.room_store import RoomStore

FIXED_NOW = datetime(2026, 10, 19, 19, 30, 5)


class FakeWebSocket:
    """Stands in for a FastAPI WebSocket; records every JSON frame sent to it."""

    def __init__(self, fail_sends: bool = False):
        self.accepted = False
        self.fail_sends = fail_sends
        self.sent: list[dict] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail_sends:
            msg = "socket closed"
            raise RuntimeError(msg)
        self.sent.append(message)

    def events(self, name: str | None = None) -> list[dict]:
        return [m for m in self.sent if name is None or m["event"] == name]

    def data(self, name: str) -> list:
        return [m["data"] for m in self.events(name)]

    def texts(self) -> list[str]:
        return [d["text"] for d in self.data("log:append")]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture
def store():
    return RoomStore()


@pytest.fixture
def manager():
    return ConnectionManager()


@pytest.fixture
def relay(store, manager):
    ids = itertools.count(1)
    return RelayHandler(
        store,
        manager,
        default_room="main",
        clock=lambda: FIXED_NOW,
        id_factory=lambda: f"log-{next(ids)}",
    )


@pytest.fixture
def connect(manager, run):
    """Open a fake connection; returns (connection, websocket)."""

    def _connect(fail_sends: bool = False):
        ws = FakeWebSocket(fail_sends=fail_sends)
        conn = run(manager.connect(ws))
        return conn, ws

    return _connect


@pytest.fixture
def settings():
    test_settings = Settings()
    test_settings.DEFAULT_ROOM = "main"
    test_settings.ANNOUNCE_DEPARTURES = True
    test_settings.CORS_ORIGINS = ["*"]
    test_settings.LOG_LEVEL = "INFO"
    return test_settings


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
